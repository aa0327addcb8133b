from setuptools import setup, find_packages

setup(
    name="quick_diff_apply",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
        "unidiff>=0.7",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "quick-diff-apply=quick_diff_apply.cli:main",
        ],
    },
    python_requires=">=3.10",
    description="Apply unified diffs to text buffers, all at once or hunk by hunk.",
)

"""
Configuration — settings for the apply and review commands, resolved from
QDA_* environment variables, a .quickdiff.yaml file, then built-in defaults.
"""

import logging
import os

import yaml


logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".quickdiff.yaml", ".quickdiff.yml")


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# attribute, environment variable, YAML key, default, converter
_SETTINGS = (
    ("LOG_DIR", "QDA_LOG_DIR", "log_dir", ".quickdiff/logs", str),
    ("ENCODING", "QDA_ENCODING", "encoding", "utf-8", str),
    ("WORKSPACE_ROOT", "QDA_WORKSPACE_ROOT", "workspace_root", ".", str),
    # Interactive review opens the Textual app unless this is off
    ("USE_TUI", "QDA_USE_TUI", "use_tui", True, _as_bool),
    # Batch apply without the confirmation prompt
    ("AUTO_APPROVE", "QDA_AUTO_APPROVE", "auto_approve", False, _as_bool),
    ("SHOW_PREVIEW", "QDA_SHOW_PREVIEW", "show_preview", True, _as_bool),
)


def locate_config(explicit_path: str | None = None) -> str | None:
    """Return the config file to read, or None.

    An explicit path wins outright (a missing one means no file at all);
    otherwise the working directory is searched before the home directory.
    """
    if explicit_path:
        if not os.path.isfile(explicit_path):
            logger.warning("Config file %s not found, using defaults", explicit_path)
            return None
        return explicit_path

    for directory in (os.getcwd(), os.path.expanduser("~")):
        candidates = (os.path.join(directory, n) for n in CONFIG_FILENAMES)
        found = next((c for c in candidates if os.path.isfile(c)), None)
        if found:
            return found
    return None


def read_yaml(path: str) -> dict:
    """Mapping stored in *path*; anything unreadable or non-mapping gives {}."""
    try:
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring config file %s: %s", path, exc)
        return {}
    if not isinstance(loaded, dict):
        return {}
    return loaded


class Config:
    """Resolved settings.

    Each attribute in ``_SETTINGS`` takes the first value found among the
    environment, the YAML mapping, and the default.  Command-line flags
    are layered on top by the caller.
    """

    def __init__(self, yaml_data: dict | None = None):
        file_values = yaml_data or {}
        for attr, env_key, yaml_key, default, convert in _SETTINGS:
            raw = os.environ.get(env_key)
            if raw is None:
                raw = file_values.get(yaml_key)
            setattr(self, attr, default if raw is None else convert(raw))

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        path = locate_config(config_path)
        return cls(read_yaml(path) if path else None)

"""Tests for the file logger setup."""

import logging

import pytest

from quick_diff_apply.cli_display import log, setup_logger


def _file_handlers():
    return [h for h in log.handlers if isinstance(h, logging.FileHandler)]


@pytest.fixture(autouse=True)
def detach_handlers():
    yield
    for handler in _file_handlers():
        log.removeHandler(handler)
        handler.close()


class TestSetupLogger:
    def test_creates_log_file(self, tmp_path):
        setup_logger(str(tmp_path / "logs"))
        log.info("hello")

        files = list((tmp_path / "logs").iterdir())
        assert len(files) == 1
        assert files[0].name.startswith("quickdiff_")
        assert "hello" in files[0].read_text(encoding="utf-8")

    def test_same_directory_reuses_handler(self, tmp_path):
        setup_logger(str(tmp_path))
        setup_logger(str(tmp_path))
        assert len(_file_handlers()) == 1

    def test_new_directory_replaces_handler(self, tmp_path):
        setup_logger(str(tmp_path / "first"))
        setup_logger(str(tmp_path / "second"))

        handlers = _file_handlers()
        assert len(handlers) == 1
        assert handlers[0].baseFilename.startswith(str(tmp_path / "second"))

    def test_empty_directory_disables_file(self, tmp_path):
        setup_logger(str(tmp_path))
        setup_logger("")
        assert _file_handlers() == []

"""Tests for logging helpers."""

import logging

import pytest

from revdiff.utils import log as log_module
from revdiff.utils.log import RevdiffLogger, StructuredFormatter, configure_logging, level_from_env


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("revdiff", logging.INFO, __file__, 1, "[diff] done", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_appends_sorted_extras():
    formatter = StructuredFormatter("%(message)s")

    line = formatter.format(_record(segment_count=4, old_lines=10))

    assert line == '[diff] done | {"old_lines": 10, "segment_count": 4}'


def test_structured_formatter_without_extras():
    assert StructuredFormatter("%(message)s").format(_record()) == "[diff] done"


def test_structured_formatter_uses_utc_iso_timestamps():
    record = _record()
    record.created = 0.0
    record.msecs = 0.0

    assert StructuredFormatter().formatTime(record) == "1970-01-01T00:00:00.000Z"


@pytest.mark.parametrize(
    "value, expected",
    [("", logging.WARNING), ("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("loud", logging.WARNING)],
)
def test_level_from_env(monkeypatch, value, expected):
    monkeypatch.setenv("REVDIFF_LOG_LEVEL", value)

    assert level_from_env() == expected


def test_file_handler_receives_debug_output(tmp_path):
    logger = RevdiffLogger(name="revdiff.test-file")
    logger.attach_file_handler(tmp_path / "run.log")

    logger.debug("[config] Loaded", extra={"path": "x"})

    assert logger.log_file == (tmp_path / "run.log").resolve()
    assert '[config] Loaded | {"path": "x"}' in (tmp_path / "run.log").read_text()


def test_attaching_new_file_replaces_previous(tmp_path):
    logger = RevdiffLogger(name="revdiff.test-rotate")
    logger.attach_file_handler(tmp_path / "first.log")
    logger.attach_file_handler(tmp_path / "second.log")

    logger.info("[cli] after switch")

    assert "after switch" not in (tmp_path / "first.log").read_text()
    assert "after switch" in (tmp_path / "second.log").read_text()
    file_handlers = [h for h in logger.logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1


def test_configure_logging_verbose_and_file(tmp_path, monkeypatch):
    fresh = RevdiffLogger(name="revdiff.test-configure")
    monkeypatch.setattr(log_module, "_logger", fresh)

    logger = configure_logging(verbose=True, log_file=tmp_path / "logs" / "cli.log")

    assert logger is fresh
    console = next(h for h in fresh.logger.handlers if type(h) is logging.StreamHandler)
    assert console.level == logging.DEBUG
    assert "File logging enabled" in (tmp_path / "logs" / "cli.log").read_text()

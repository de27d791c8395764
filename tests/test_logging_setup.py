# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from zenflow.logging_setup import _ZenflowOnlyFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_zenflow_and_third_party_errors() -> None:
    f = _ZenflowOnlyFilter()
    assert f.filter(_record("zenflow", logging.DEBUG))
    assert f.filter(_record("zenflow.store.sqlite_store", logging.INFO))
    assert not f.filter(_record("zenflowish", logging.INFO))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("asyncio", logging.ERROR))


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in saved_handlers:
            h.close()
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)


def test_setup_logging_writes_app_log(tmp_path: Path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", app_name="zen")
    logging.getLogger("zenflow.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "zen.log"
    assert "DEBUG zenflow.test: hello file" in log_file.read_text("utf-8")

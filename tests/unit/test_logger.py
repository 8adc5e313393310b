"""Test structured logging setup and run_id propagation."""

import logging

import pytest

from trading_journal.observability.logger import get_run_id, new_run_id, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestRunId:
    def test_new_run_id_replaces_current(self):
        first = new_run_id()
        assert get_run_id() == first
        second = new_run_id()
        assert second != first
        assert get_run_id() == second


class TestSetupLogging:
    def test_stdlib_records_rendered_as_json(self, capsys):
        setup_logging("INFO", "json")
        run_id = new_run_id()
        logging.getLogger("trading_journal.test").info("hello %s", "world")
        err = capsys.readouterr().err
        assert '"event": "hello world"' in err
        assert run_id in err

    def test_level_filters(self, capsys):
        setup_logging("WARNING", "console")
        logging.getLogger("trading_journal.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err

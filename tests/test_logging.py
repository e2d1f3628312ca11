import json
import logging

import pytest
import structlog

from pricelist.core.logging import QUIET_LOGGERS, configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def _own_handlers(root):
    return [h for h in root.handlers if h.get_name() == "pricelist"]


def test_repeated_configuration_keeps_one_handler(root_logger):
    configure_logging("INFO")
    configure_logging("DEBUG")
    assert len(_own_handlers(root_logger)) == 1
    assert root_logger.level == logging.DEBUG


def test_library_loggers_stay_at_warning_in_debug(root_logger):
    configure_logging("DEBUG")
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_json_lines_go_to_stderr(root_logger, capsys):
    configure_logging("INFO", json_logs=True)
    structlog.get_logger("pricelist.test").info("PDF exported", pages=3, shop="متجر")
    captured = capsys.readouterr()
    assert captured.out == ""
    line = json.loads(captured.err.strip().splitlines()[-1])
    assert line["event"] == "PDF exported"
    assert line["pages"] == 3
    assert line["shop"] == "متجر"
    assert line["level"] == "info"


def test_stdlib_records_are_rendered_too(root_logger, capsys):
    configure_logging("INFO", json_logs=True)
    logging.getLogger("pricelist.stdlib").warning("plain %s", "record")
    line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert line["event"] == "plain record"
    assert line["logger"] == "pricelist.stdlib"

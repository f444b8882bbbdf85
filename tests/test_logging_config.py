import logging
from contextlib import contextmanager

from conference_api.app.core.logging_config import setup_logging


@contextmanager
def bare_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers.clear()
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_setup_logging_writes_console_and_file(tmp_path):
    logfile = tmp_path / "app.log"

    with bare_root_logger() as root:
        setup_logging("debug", str(logfile))
        logging.getLogger("conference_api.tests").info("ready")
        level, handler_count = root.level, len(root.handlers)

    assert level == logging.DEBUG
    assert handler_count == 2
    assert "[INFO] conference_api.tests: ready" in logfile.read_text(encoding="utf-8")


def test_setup_logging_keeps_existing_handlers():
    existing = logging.NullHandler()

    with bare_root_logger() as root:
        root.addHandler(existing)
        setup_logging("DEBUG")
        handlers = root.handlers[:]

    assert handlers == [existing]

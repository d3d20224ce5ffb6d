import logging

import pytest

from pathmpc.util import setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger("")
    level, handlers = root.level, list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_console_only(restore_root):
    handlers = setup_logging()
    assert len(handlers) == 1
    assert logging.getLogger("").level == logging.INFO
    assert logging.getLogger("pathmpc").level == logging.INFO


def test_debug_and_file(restore_root, tmp_path):
    main = logging.getLogger("replay")
    handlers = setup_logging(main, debug=True, log_path=str(tmp_path))
    assert len(handlers) == 2
    assert main.level == logging.DEBUG
    assert logging.getLogger("matplotlib").level == logging.INFO

    logging.getLogger("pathmpc.control.mpc").debug("Cost 1.0")
    handlers[1].flush()
    logs = list(tmp_path.glob("mpc_*.log"))
    assert len(logs) == 1
    assert "Cost 1.0" in logs[0].read_text()


def test_missing_log_path(restore_root, tmp_path):
    root_handlers = list(logging.getLogger("").handlers)
    with pytest.raises(FileNotFoundError):
        setup_logging(log_path=str(tmp_path / "missing"))
    assert logging.getLogger("").handlers == root_handlers

import logging
import os
import sys
import tempfile
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))


def pytest_configure(config):
    """Point the CLI at a local API and keep its log file out of $HOME."""
    os.environ.setdefault("LOGQ_URL", "http://localhost:3000")
    os.environ.setdefault("LOGQ_TOKEN", "test-token")
    os.environ.setdefault("LOGQ_LOG_DIR", tempfile.mkdtemp(prefix="logq-tests-"))


@pytest.fixture(autouse=True)
def restore_logq_logger():
    """Undo configure_logging() so later tests can capture logq records."""
    logger = logging.getLogger("logq")
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate

"""
Shared fixtures.

Each test gets its own in-memory SQLite database with every module table,
a clock standing at Monday 2024-01-15 09:00 UTC, and file storage under
``tmp_path``.  ``captured_logs`` returns the JSON records logged so far.
"""

import json
import logging
from datetime import UTC, datetime
from io import StringIO
from uuid import UUID

import pytest

from plant_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from plant_kernel.domain.clock import DeterministicClock
from plant_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from plant_kernel.storage import LocalFileStorage

TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-00000000aaaa")

FIXED_NOW = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)

STORAGE_BASE_URL = "https://files.test/storage/v1/object/public"


class _JsonCollector(logging.Handler):
    """Keeps every formatted record as a parsed dict."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.setFormatter(StructuredFormatter())
        self.records: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(json.loads(self.format(record)))


@pytest.fixture(autouse=True, scope="session")
def _structured_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _fresh_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    ``captured_logs()`` is the list of records emitted under ``plant_kernel``
    since the fixture started, oldest first.
    """
    collector = _JsonCollector()
    plant_logger = logging.getLogger("plant_kernel")
    saved_level = plant_logger.level
    plant_logger.setLevel(logging.DEBUG)
    plant_logger.addHandler(collector)

    yield lambda: list(collector.records)

    plant_logger.removeHandler(collector)
    plant_logger.setLevel(saved_level)


@pytest.fixture
def engine():
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(engine):
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "storage", base_url=STORAGE_BASE_URL)

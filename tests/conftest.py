# tests/conftest.py
from __future__ import annotations

import pytest
from loguru import logger

from tzframe.core.table import sample_table

CHICAGO = "America/Chicago"


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def chicago() -> str:
    return CHICAGO


@pytest.fixture
def sample():
    """2018-12-30 00:00 → 2019-01-02 00:00 每 6 小时；dt=UTC, dt_loc=Chicago"""
    return sample_table(zone=CHICAGO)


@pytest.fixture
def captured_warnings():
    """收集 loguru WARNING 及以上的日志"""
    messages: list[str] = []
    logger.add(lambda msg: messages.append(str(msg)), level="WARNING")
    return messages

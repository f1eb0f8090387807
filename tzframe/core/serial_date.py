#!filepath: tzframe/core/serial_date.py
"""
Legacy spreadsheet serial date codec.

serial = days since day 0 + fraction of a 24h day

Spreadsheets count from 1900-01-01 = day 1 but also treat 1900 as a leap
year, so every serial after the fictitious 1900-02-29 is one day ahead of
a naive count. Anchoring day 0 at 1899-12-30 absorbs both quirks:

    61.0  -> 1900-03-01 00:00:00
    0.75  -> 1899-12-30 18:00:00

No 1904 date system.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta

from tzframe.core.instant import UTC, Instant, TimestampLike, localize, to_instant

SERIAL_EPOCH = datetime(1899, 12, 30)

_US_PER_DAY = 86_400 * 1_000_000


def civil_to_serial(civil: datetime) -> float:
    """naive civil fields → serial（不涉及任何时区）。"""
    if civil.tzinfo is not None:
        civil = civil.replace(tzinfo=None)

    delta = civil - SERIAL_EPOCH
    us = (delta.seconds * 1_000_000) + delta.microseconds
    return delta.days + us / _US_PER_DAY


def serial_to_civil(serial: float) -> datetime:
    """serial → naive civil fields，四舍五入到微秒。"""
    if isinstance(serial, bool) or not isinstance(serial, (int, float)):
        raise ValueError(f"serial date must be numeric: {serial!r}")
    if not math.isfinite(serial):
        raise ValueError(f"serial date must be finite: {serial!r}")

    days = math.floor(serial)
    us = round((serial - days) * _US_PER_DAY)
    return SERIAL_EPOCH + timedelta(days=days, microseconds=us)


def to_serial(value: TimestampLike) -> float:
    """Instant（按 UTC civil fields）→ serial。"""
    instant = to_instant(value)
    return civil_to_serial(instant.to_datetime(UTC))


def from_serial(serial: float) -> Instant:
    """serial → Instant（civil fields 视为 UTC）。"""
    return localize(serial_to_civil(serial), UTC)

#!filepath: tzframe/core/instant.py
from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzframe.utils.errors import (
    AmbiguousLocalTimeError,
    InvalidZoneError,
    ParseError,
    TypeMismatchError,
)

UTC = "UTC"
CIVIL_FORMAT = "%Y-%m-%d %H:%M:%S"

_NS_PER_SECOND = 1_000_000_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# YYYY-MM-DD[T ]HH:MM:SS[.fffffffff][Z|±HH:MM]
_TS_RE = re.compile(
    r"^(?P<y>\d{4})-(?P<mo>\d{2})-(?P<d>\d{2})[T ]"
    r"(?P<h>\d{2}):(?P<mi>\d{2}):(?P<s>\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})?$"
)


# ================================================================
# zone database
# ================================================================
@lru_cache(maxsize=None)
def _load_zone(zone_id: str) -> ZoneInfo:
    return ZoneInfo(zone_id)


def resolve_zone(zone_id: str) -> ZoneInfo:
    """
    IANA zone id → ZoneInfo

    无法解析（未知 / 非法字符串 / 非 str）统一抛 InvalidZoneError。
    """
    if not isinstance(zone_id, str) or not zone_id:
        raise InvalidZoneError(zone_id)
    try:
        return _load_zone(zone_id)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidZoneError(zone_id) from e


def zone_key(tz) -> str:
    """tzinfo（ZoneInfo / pytz / timezone.utc）→ IANA key，并校验可解析。"""
    key = getattr(tz, "key", None) or str(tz)
    resolve_zone(key)
    return key


# ================================================================
# Instant
# ================================================================
@dataclass(frozen=True, order=True)
class Instant:
    """
    绝对时间点：Unix epoch 以来的纳秒数。
    与任何显示时区无关；相等 ⇔ 同一物理时刻。
    """

    epoch_ns: int

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Instant":
        if not isinstance(dt, datetime):
            raise TypeMismatchError(f"expected datetime, got {type(dt).__name__}")
        if dt.tzinfo is None or dt.utcoffset() is None:
            raise TypeMismatchError(f"naive datetime has no instant: {dt}")

        delta = dt - _EPOCH
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds * _NS_PER_SECOND + delta.microseconds * 1000)

    @classmethod
    def from_epoch_seconds(cls, seconds: float) -> "Instant":
        return cls(round(seconds * _NS_PER_SECOND))

    def to_datetime(self, zone: str = UTC) -> datetime:
        """aware datetime（微秒精度，纳秒余数截断）。"""
        dt = _EPOCH + timedelta(microseconds=self.epoch_ns // 1000)
        return dt.astimezone(resolve_zone(zone))

    @property
    def subsecond_ns(self) -> int:
        return self.epoch_ns % _NS_PER_SECOND

    def __str__(self) -> str:
        return render_offset(self)


# ================================================================
# ZonedTimestamp
# ================================================================
@dataclass(frozen=True)
class ZonedTimestamp:
    """
    Instant + 显示时区。

    zone 只影响 civil() 的渲染结果，不影响 instant。
    注意：== 比较 (instant, zone) 两者；
    “是否同一时刻”请用 instants_equal()。
    """

    instant: Instant
    zone: str = UTC

    def __post_init__(self):
        if not isinstance(self.instant, Instant):
            raise TypeMismatchError(f"expected Instant, got {type(self.instant).__name__}")
        resolve_zone(self.zone)

    @classmethod
    def from_datetime(cls, dt: datetime, zone: str | None = None) -> "ZonedTimestamp":
        """aware datetime → ZonedTimestamp；zone 缺省取 dt 自带的时区。"""
        instant = Instant.from_datetime(dt)
        return cls(instant, zone if zone is not None else zone_key(dt.tzinfo))

    def to_datetime(self) -> datetime:
        return self.instant.to_datetime(self.zone)

    def to_instant(self) -> Instant:
        return self.instant

    def civil(self) -> datetime:
        """显示时区下的 civil fields（naive datetime）。"""
        return self.to_datetime().replace(tzinfo=None)

    def __str__(self) -> str:
        return f"{render_civil(self)} {self.zone}"


TimestampLike = Union[Instant, ZonedTimestamp]


def as_zoned(value: TimestampLike) -> ZonedTimestamp:
    """Instant 视为 UTC 显示。"""
    if isinstance(value, ZonedTimestamp):
        return value
    if isinstance(value, Instant):
        return ZonedTimestamp(value, UTC)
    raise TypeMismatchError(f"expected Instant or ZonedTimestamp, got {type(value).__name__}")


def to_instant(value: TimestampLike) -> Instant:
    return as_zoned(value).instant


# ================================================================
# operations
# ================================================================
def now_in_zone(zone: str = UTC) -> ZonedTimestamp:
    return ZonedTimestamp(Instant(time.time_ns()), zone)


def with_zone(zt: TimestampLike, zone: str) -> ZonedTimestamp:
    """同一 Instant，换显示时区。"""
    return ZonedTimestamp(to_instant(zt), zone)


def localize(civil: datetime, zone: str) -> Instant:
    """
    naive civil fields 解释为 zone 本地时间 → Instant

    DST fold（同一 civil time 出现两次）或 gap（不存在）时
    抛 AmbiguousLocalTimeError，不做 earliest/latest 猜测。
    """
    if civil.tzinfo is not None:
        civil = civil.replace(tzinfo=None)

    tz = resolve_zone(zone)
    early = civil.replace(tzinfo=tz, fold=0)
    late = civil.replace(tzinfo=tz, fold=1)

    if early.utcoffset() != late.utcoffset():
        back = early.astimezone(timezone.utc).astimezone(tz).replace(tzinfo=None)
        reason = "ambiguous" if back == civil else "nonexistent"
        raise AmbiguousLocalTimeError(civil, zone, reason)

    return Instant.from_datetime(early)


def force_zone(zt: TimestampLike, zone: str) -> ZonedTimestamp:
    """
    保留 civil fields，重新解释为 zone 的本地时间 → 新的 Instant。

    用于修复：civil string 写出后被按 UTC 读回。
    """
    zoned = as_zoned(zt)
    instant = localize(zoned.civil(), zone)
    # 纳秒余数不属于 civil()（微秒精度），单独搬过去
    extra_ns = zoned.instant.epoch_ns % 1000
    return ZonedTimestamp(Instant(instant.epoch_ns + extra_ns), zone)


def instants_equal(a: TimestampLike, b: TimestampLike) -> bool:
    return to_instant(a) == to_instant(b)


# ================================================================
# text
# ================================================================
def _match(text: str) -> re.Match:
    if not isinstance(text, str):
        raise ParseError("timestamp text expected", value=text)
    m = _TS_RE.match(text.strip())
    if m is None:
        raise ParseError("malformed timestamp", value=text)
    return m


def _civil_fields(m: re.Match, text: str) -> tuple[datetime, int]:
    try:
        civil = datetime(
            int(m["y"]), int(m["mo"]), int(m["d"]),
            int(m["h"]), int(m["mi"]), int(m["s"]),
        )
    except ValueError as e:
        raise ParseError(f"invalid civil fields ({e})", value=text) from e

    frac = m["frac"] or ""
    return civil, int(frac.ljust(9, "0")) if frac else 0


def has_zone_indicator(text: str) -> bool:
    return _match(text)["tz"] is not None


def parse_civil(text: str, zone: str = UTC) -> ZonedTimestamp:
    """
    CivilString → ZonedTimestamp（civil fields 解释为 zone 本地时间）

    带 Z / offset 的字符串不是 CivilString，抛 ParseError。
    """
    m = _match(text)
    if m["tz"] is not None:
        raise ParseError("civil string must not carry a zone indicator", value=text)

    civil, frac_ns = _civil_fields(m, text)
    instant = localize(civil, zone)
    return ZonedTimestamp(Instant(instant.epoch_ns + frac_ns), zone)


def parse_offset(text: str) -> Instant:
    """OffsetString（尾部 Z 或 ±HH:MM）→ Instant，无歧义。"""
    m = _match(text)
    indicator = m["tz"]
    if indicator is None:
        raise ParseError("offset string requires a zone indicator", value=text)

    civil, frac_ns = _civil_fields(m, text)
    if indicator == "Z":
        offset = timedelta(0)
    else:
        sign = -1 if indicator[0] == "-" else 1
        digits = indicator[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:])
        if hours > 23 or minutes > 59:
            raise ParseError("invalid utc offset", value=text)
        offset = sign * timedelta(hours=hours, minutes=minutes)

    instant = Instant.from_datetime(civil.replace(tzinfo=timezone(offset)))
    return Instant(instant.epoch_ns + frac_ns)


def _fraction(ns: int) -> str:
    if not ns:
        return ""
    if ns % 1_000_000 == 0:
        return f".{ns // 1_000_000:03d}"
    if ns % 1000 == 0:
        return f".{ns // 1000:06d}"
    return f".{ns:09d}"


def render_offset(value: TimestampLike) -> str:
    """任意时区 → UTC OffsetString：YYYY-MM-DDTHH:MM:SS[.fff]Z"""
    instant = to_instant(value)
    dt = instant.to_datetime(UTC)
    # %Y 对 1000 年之前不补零
    return f"{dt.year:04d}-{dt:%m-%dT%H:%M:%S}{_fraction(instant.subsecond_ns)}Z"


def render_civil(value: TimestampLike, fmt: str = CIVIL_FORMAT) -> str:
    """显示时区下的 CivilString（无时区标识）。"""
    civil = as_zoned(value).civil()
    return civil.strftime(fmt.replace("%Y", f"{civil.year:04d}"))

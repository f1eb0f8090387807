#!filepath: tzframe/core/policy.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tzframe.core.instant import (
    UTC,
    ZonedTimestamp,
    has_zone_indicator,
    localize,
    parse_civil,
    parse_offset,
    resolve_zone,
)


@dataclass(frozen=True)
class ZonePolicy:
    """
    无时区信息的 civil time 该按哪个时区解释。

    每次 read 调用显式传入；不存在全局默认。
    ASSUME_UTC 是具名的默认值（也是常见的坑：本地时间被当成 UTC）。
    """

    zone: str
    name: str

    @classmethod
    def assume_zone(cls, zone: str) -> "ZonePolicy":
        resolve_zone(zone)
        return cls(zone=zone, name=f"assume_zone({zone})")

    @property
    def is_default(self) -> bool:
        return self == ASSUME_UTC

    def interpret(self, civil: datetime) -> ZonedTimestamp:
        """naive civil fields → 该时区下的 ZonedTimestamp。"""
        return ZonedTimestamp(localize(civil, self.zone), self.zone)

    def parse(self, text: str) -> ZonedTimestamp:
        """
        OffsetString → UTC 标记的 ZonedTimestamp（policy 不参与）
        CivilString  → 按 self.zone 解释
        """
        if has_zone_indicator(text):
            return ZonedTimestamp(parse_offset(text), UTC)
        return parse_civil(text, self.zone)

    def __str__(self) -> str:
        return self.name


ASSUME_UTC = ZonePolicy(zone=UTC, name="assume_utc")


def assume_zone(zone: str) -> ZonePolicy:
    return ZonePolicy.assume_zone(zone)

#!filepath: tzframe/core/table.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from tzframe.core.instant import (
    CIVIL_FORMAT,
    UTC,
    Instant,
    ZonedTimestamp,
    as_zoned,
    force_zone,
    instants_equal,
    localize,
    parse_civil,
    render_civil,
    with_zone,
    zone_key,
)
from tzframe.core.policy import ZonePolicy
from tzframe.utils.errors import AmbiguousLocalTimeError, ParseError, SchemaError, TypeMismatchError


class ColumnKind(str, Enum):
    TIMESTAMP = "timestamp"  # Instant / ZonedTimestamp
    CIVIL_TEXT = "civil_text"  # 已渲染的 civil string（无时区标识）
    TEXT = "text"


Schema = Mapping[str, ColumnKind]


@dataclass(frozen=True)
class Column:
    name: str
    kind: ColumnKind
    values: Tuple = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "kind", ColumnKind(self.kind))
        object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)

    def check(self, row: int) -> None:
        """单个 cell 的类型校验。None = 缺失值，任何列都允许。"""
        value = self.values[row]
        if value is None:
            return
        if self.kind is ColumnKind.TIMESTAMP:
            if not isinstance(value, (Instant, ZonedTimestamp)):
                raise TypeMismatchError(
                    f"timestamp column holds {type(value).__name__}", row=row, column=self.name
                )
        elif not isinstance(value, str):
            raise TypeMismatchError(
                f"{self.kind.value} column holds {type(value).__name__}", row=row, column=self.name
            )


@dataclass(frozen=True)
class Table:
    """
    Table = 有序的具名列（按位置对齐行）

    - 内存中构造，写出一次，读回得到新的 Table
    - reader / writer 之间不共享可变状态
    """

    columns: Tuple[Column, ...] = ()

    def __post_init__(self):
        cols = tuple(self.columns)
        object.__setattr__(self, "columns", cols)

        names = [c.name for c in cols]
        if len(set(names)) != len(names):
            raise SchemaError(f"duplicate column names: {names}")

        lengths = {c.name: len(c) for c in cols}
        if len(set(lengths.values())) > 1:
            raise SchemaError(f"columns differ in length: {lengths}")

    # ------------------------------------------------------------------
    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def num_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    def schema(self) -> Dict[str, ColumnKind]:
        return {c.name: c.kind for c in self.columns}

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise SchemaError(f"no such column: {name!r} (have {self.names})")

    def __getitem__(self, name: str) -> Tuple:
        return self.column(name).values

    def rows(self) -> Iterator[Tuple]:
        return zip(*(c.values for c in self.columns))

    def with_column(self, column: Column) -> "Table":
        """同名替换（位置不变），否则追加到末尾。"""
        if column.name in self.names:
            cols = [column if c.name == column.name else c for c in self.columns]
        else:
            cols = [*self.columns, column]
        return Table(tuple(cols))

    def validate(self) -> None:
        """按 row → column 顺序校验，遇到第一个错误即抛出。"""
        for row in range(self.num_rows):
            for col in self.columns:
                col.check(row)

    # ------------------------------------------------------------------
    # pandas（仅用于展示 / 互操作）
    # ------------------------------------------------------------------
    def to_frame(self) -> pd.DataFrame:
        data = {}
        for col in self.columns:
            if col.kind is ColumnKind.TIMESTAMP:
                data[col.name] = _timestamp_series(col)
            else:
                data[col.name] = pd.Series(col.values, dtype="object")
        return pd.DataFrame(data)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Table":
        """
        tz-aware datetime64 → TIMESTAMP（显示时区沿用列时区）
        naive datetime64    → TIMESTAMP（按 UTC）
        其他                → TEXT
        """
        cols = []
        for name in df.columns:
            series = df[name]
            dtype = series.dtype

            if isinstance(dtype, pd.DatetimeTZDtype):
                zone = zone_key(dtype.tz)
                values = [None if pd.isna(ts) else ZonedTimestamp(Instant(ts.value), zone) for ts in series]
                cols.append(Column(str(name), ColumnKind.TIMESTAMP, values))
            elif pd.api.types.is_datetime64_any_dtype(dtype):
                values = [None if pd.isna(ts) else ZonedTimestamp(Instant(ts.value), UTC) for ts in series]
                cols.append(Column(str(name), ColumnKind.TIMESTAMP, values))
            else:
                values = [None if pd.isna(v) else str(v) for v in series]
                cols.append(Column(str(name), ColumnKind.TEXT, values))

        return cls(tuple(cols))


def _timestamp_series(col: Column) -> pd.Series:
    zoned = [None if v is None else as_zoned(v) for v in col.values]
    zones = {z.zone for z in zoned if z is not None}
    stamps = [pd.NaT if z is None else pd.Timestamp(z.instant.epoch_ns, tz=UTC) for z in zoned]

    series = pd.Series(pd.DatetimeIndex(stamps, tz=UTC), name=col.name)
    # 单一显示时区才转换；混合时区保持 UTC
    if len(zones) == 1:
        series = series.dt.tz_convert(zones.pop())
    return series


# ======================================================================
# column helpers
# ======================================================================
def _map_timestamps(table: Table, name: str, fn) -> Table:
    col = table.column(name)
    if col.kind is not ColumnKind.TIMESTAMP:
        raise TypeMismatchError(f"expected timestamp column, got {col.kind.value}", column=name)

    values = []
    for row, v in enumerate(col.values):
        if v is None:
            values.append(None)
            continue
        col.check(row)
        try:
            values.append(fn(v))
        except AmbiguousLocalTimeError as e:
            raise AmbiguousLocalTimeError(e.civil, e.zone, e.reason, row=row, column=name) from e

    return table.with_column(Column(name, ColumnKind.TIMESTAMP, values))


def retag_column(table: Table, name: str, zone: str) -> Table:
    """列级 with_zone：Instant 不变。"""
    return _map_timestamps(table, name, lambda v: with_zone(v, zone))


def force_column(table: Table, name: str, zone: str) -> Table:
    """列级 force_zone：civil fields 不变，Instant 改变。"""
    return _map_timestamps(table, name, lambda v: force_zone(v, zone))


def render_civil_column(table: Table, name: str, fmt: str = CIVIL_FORMAT) -> Table:
    """
    TIMESTAMP → CIVIL_TEXT（按各 cell 的显示时区渲染）

    写 CSV 时该列原样输出本地时间，但时区信息彻底丢失。
    """
    col = table.column(name)
    if col.kind is not ColumnKind.TIMESTAMP:
        raise TypeMismatchError(f"expected timestamp column, got {col.kind.value}", column=name)

    values = []
    for row, v in enumerate(col.values):
        col.check(row)
        values.append(None if v is None else render_civil(v, fmt))
    return table.with_column(Column(name, ColumnKind.CIVIL_TEXT, values))


def parse_civil_column(table: Table, name: str, policy: ZonePolicy) -> Table:
    """CIVIL_TEXT / TEXT → TIMESTAMP，按 policy.zone 解释。"""
    col = table.column(name)
    if col.kind is ColumnKind.TIMESTAMP:
        raise TypeMismatchError("column is already a timestamp column", column=name)

    values = []
    for row, v in enumerate(col.values):
        col.check(row)
        if v is None:
            values.append(None)
            continue
        try:
            values.append(parse_civil(v, policy.zone))
        except ParseError as e:
            raise ParseError("malformed civil string", row=row, column=name, value=v) from e
        except AmbiguousLocalTimeError as e:
            raise AmbiguousLocalTimeError(e.civil, e.zone, e.reason, row=row, column=name) from e
    return table.with_column(Column(name, ColumnKind.TIMESTAMP, values))


def compare_instants(table: Table, a: str, b: str) -> List[bool]:
    """逐行比较两列的 Instant；任一侧缺失视为不相等。"""
    left, right = table[a], table[b]
    return [x is not None and y is not None and instants_equal(x, y) for x, y in zip(left, right)]


def column_zones(table: Table) -> Dict[str, Optional[str]]:
    """列名 → 显示时区；非 timestamp 列为 None。"""
    out: Dict[str, Optional[str]] = {}
    for col in table.columns:
        if col.kind is not ColumnKind.TIMESTAMP:
            out[col.name] = None
            continue
        first = next((v for v in col.values if v is not None), None)
        out[col.name] = as_zoned(first).zone if first is not None else UTC
    return out


def parse_schema(items: Iterable[str]) -> Dict[str, ColumnKind]:
    """["dt=timestamp", "note=text"] → schema"""
    schema: Dict[str, ColumnKind] = {}
    for item in items:
        name, sep, kind = item.partition("=")
        if not sep or not name:
            raise SchemaError(f"schema item must look like name=kind: {item!r}")
        try:
            schema[name.strip()] = ColumnKind(kind.strip())
        except ValueError as e:
            kinds = [k.value for k in ColumnKind]
            raise SchemaError(f"unknown column kind {kind!r} (expected one of {kinds})") from e
    return schema


# ======================================================================
# sample data
# ======================================================================
def _as_utc(value) -> ZonedTimestamp:
    if isinstance(value, str):
        return parse_civil(value, UTC)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return ZonedTimestamp(localize(value, UTC), UTC)
        return ZonedTimestamp.from_datetime(value, UTC)
    return with_zone(value, UTC)


def time_sequence(start, end, step: timedelta) -> List[ZonedTimestamp]:
    """[start, end] 闭区间，UTC 显示。"""
    if step <= timedelta(0):
        raise ValueError(f"step must be positive: {step}")

    first, last = _as_utc(start), _as_utc(end)
    step_ns = (step.days * 86400 + step.seconds) * 1_000_000_000 + step.microseconds * 1000

    out = []
    ns = first.instant.epoch_ns
    while ns <= last.instant.epoch_ns:
        out.append(ZonedTimestamp(Instant(ns), UTC))
        ns += step_ns
    return out


def sample_table(
    start="2018-12-30 00:00:00",
    end="2019-01-02 00:00:00",
    step: timedelta = timedelta(hours=6),
    zone: str = "America/Chicago",
) -> Table:
    """
    dt     : UTC
    dt_loc : 同一批 Instant，显示时区为 zone
    """
    dt: Sequence[ZonedTimestamp] = time_sequence(start, end, step)
    dt_loc = [with_zone(v, zone) for v in dt]
    return Table((
        Column("dt", ColumnKind.TIMESTAMP, dt),
        Column("dt_loc", ColumnKind.TIMESTAMP, dt_loc),
    ))

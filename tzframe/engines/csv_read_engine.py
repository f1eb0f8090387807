#!filepath: tzframe/engines/csv_read_engine.py
from __future__ import annotations

import csv
from typing import Dict, Mapping, Optional

import pyarrow as pa
import pyarrow.csv as pacsv

from tzframe.core.instant import has_zone_indicator
from tzframe.core.policy import ASSUME_UTC, ZonePolicy
from tzframe.core.table import Column, ColumnKind, Schema, Table
from tzframe.utils.errors import AmbiguousLocalTimeError, ParseError, SchemaError
from tzframe.utils.logger import logs


class CsvReadEngine:
    """
    CSV bytes → Table（schema 由调用方声明，不做类型推断）

    TIMESTAMP 列逐 cell 处理：
      - OffsetString（Z / ±HH:MM）→ 直接得到 Instant，显示时区 UTC
      - CivilString（无标识）     → 按 ZonePolicy 解释

    ZonePolicy 每次调用显式传入；默认 ASSUME_UTC 是具名的坑，
    命中时打 warning。
    """

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    # ------------------------------------------------------------------
    def load_strings(self, data: bytes) -> pa.Table:
        """所有列都按 string 读取，空 cell → null。"""
        header = self._header(data)
        # header 自己解析，再显式交给 pyarrow；column_types 与列名一一对应，避免类型推断
        read_options = pacsv.ReadOptions(use_threads=False, column_names=header, skip_rows=1)
        parse_options = pacsv.ParseOptions(delimiter=self.delimiter)
        convert_options = pacsv.ConvertOptions(
            column_types={name: pa.string() for name in header},
            null_values=[""],
            strings_can_be_null=True,
            quoted_strings_can_be_null=False,
        )

        try:
            return pacsv.read_csv(
                pa.BufferReader(data),
                read_options=read_options,
                parse_options=parse_options,
                convert_options=convert_options,
            )
        except pa.ArrowInvalid as e:
            raise ParseError("malformed csv", value=str(e)) from e

    def _header(self, data: bytes) -> list[str]:
        first = data.split(b"\n", 1)[0].rstrip(b"\r")
        try:
            line = first.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError("csv header is not utf-8", value=first[:40]) from e
        if not line:
            raise SchemaError("csv has no header row")
        return next(csv.reader([line], delimiter=self.delimiter))

    # ------------------------------------------------------------------
    def read(
        self,
        data: bytes,
        schema: Schema,
        policy: ZonePolicy = ASSUME_UTC,
        column_policies: Optional[Mapping[str, ZonePolicy]] = None,
    ) -> Table:
        column_policies = dict(column_policies or {})
        raw = self.load_strings(data)

        missing = [name for name in schema if name not in raw.column_names]
        if missing:
            raise SchemaError(f"columns declared in schema but missing from csv: {missing}")

        names = list(schema)
        kinds = {name: ColumnKind(schema[name]) for name in names}
        cells = {name: raw.column(name).to_pylist() for name in names}
        out: Dict[str, list] = {name: [] for name in names}

        warned = set()
        # row → column 顺序：第一个出错的 cell 决定报错
        for row in range(raw.num_rows):
            for name in names:
                text = cells[name][row]
                if text is None or kinds[name] is not ColumnKind.TIMESTAMP:
                    out[name].append(text)
                    continue

                col_policy = column_policies.get(name, policy)
                out[name].append(self._parse_cell(text, col_policy, row, name))

                if col_policy.is_default and name not in warned and not has_zone_indicator(text):
                    warned.add(name)
                    logs.warning(
                        f"[CsvReadEngine] column '{name}' has civil timestamps without a zone; "
                        f"interpreting with default policy {col_policy}"
                    )

        logs.debug(f"[CsvReadEngine] rows={raw.num_rows} cols={names}")
        return Table(tuple(Column(name, kinds[name], out[name]) for name in names))

    @staticmethod
    def _parse_cell(text: str, policy: ZonePolicy, row: int, column: str):
        try:
            return policy.parse(text)
        except ParseError as e:
            raise ParseError("malformed timestamp cell", row=row, column=column, value=text) from e
        except AmbiguousLocalTimeError as e:
            raise AmbiguousLocalTimeError(e.civil, e.zone, e.reason, row=row, column=column) from e

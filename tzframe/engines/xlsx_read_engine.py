#!filepath: tzframe/engines/xlsx_read_engine.py
from __future__ import annotations

import io
import zipfile
from datetime import datetime, time
from typing import Dict, Optional

from openpyxl import load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from tzframe.core.policy import ASSUME_UTC, ZonePolicy
from tzframe.core.serial_date import SERIAL_EPOCH, serial_to_civil
from tzframe.core.table import Column, ColumnKind, Schema, Table
from tzframe.utils.errors import AmbiguousLocalTimeError, ParseError, SchemaError
from tzframe.utils.logger import logs


class XlsxReadEngine:
    """
    xlsx bytes → Table

    TIMESTAMP cell：serial → civil fields → 按 policy.zone 解释（force_zone 语义）。
    容器本身没有 cell 级时区，默认 ASSUME_UTC 会把本地读数当成 UTC。

    日期格式的数值 cell 不走 openpyxl 的日期解码（1900-03-01 之前会差一天，
    且只保留毫秒），统一交给 serial_to_civil。
    """

    def read(
        self,
        data: bytes,
        schema: Schema,
        policy: ZonePolicy = ASSUME_UTC,
        sheet: Optional[str] = None,
    ) -> Table:
        try:
            wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except (zipfile.BadZipFile, InvalidFileException, KeyError) as e:
            raise ParseError("not an xlsx workbook", value=type(e).__name__) from e

        # read_only 模式下按行惰性解析，清空后所有数值 cell 都保持原始 serial
        wb._date_formats = set()
        wb._timedelta_formats = set()

        try:
            ws = wb[sheet] if sheet is not None else wb.active
            grid = [list(r) for r in ws.iter_rows(values_only=True)]
        except KeyError as e:
            raise SchemaError(f"no such sheet: {sheet!r}") from e
        finally:
            wb.close()

        if not grid:
            raise SchemaError("sheet has no header row")

        header = [None if v is None else str(v) for v in grid[0]]
        missing = [name for name in schema if name not in header]
        if missing:
            raise SchemaError(f"columns declared in schema but missing from sheet: {missing}")

        names = list(schema)
        kinds = {name: ColumnKind(schema[name]) for name in names}
        index = {name: header.index(name) for name in names}
        out: Dict[str, list] = {name: [] for name in names}

        if policy.is_default and any(k is ColumnKind.TIMESTAMP for k in kinds.values()):
            logs.warning(
                f"[XlsxReadEngine] spreadsheet dates carry no zone; interpreting with default policy {policy}"
            )

        for row, values in enumerate(grid[1:]):
            for name in names:
                i = index[name]
                value = values[i] if i < len(values) else None
                out[name].append(self._cell(value, kinds[name], policy, row, name, i))

        logs.debug(f"[XlsxReadEngine] rows={len(grid) - 1} cols={names}")
        return Table(tuple(Column(name, kinds[name], out[name]) for name in names))

    @staticmethod
    def _cell(value, kind: ColumnKind, policy: ZonePolicy, row: int, column: str, col_idx: int):
        if value is None:
            return None

        if kind is not ColumnKind.TIMESTAMP:
            return value if isinstance(value, str) else str(value)

        coord = f"{get_column_letter(col_idx + 1)}{row + 2}"
        if isinstance(value, datetime):
            # t="d" 的 ISO cell：本身就是 civil fields
            civil = value
        elif isinstance(value, time):
            civil = datetime.combine(SERIAL_EPOCH.date(), value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                civil = serial_to_civil(value)
            except (ValueError, OverflowError) as e:
                raise ParseError(f"bad serial date at {coord}", row=row, column=column, value=value) from e
        else:
            raise ParseError(f"expected serial date at {coord}", row=row, column=column, value=value)

        try:
            return policy.interpret(civil)
        except AmbiguousLocalTimeError as e:
            raise AmbiguousLocalTimeError(e.civil, e.zone, e.reason, row=row, column=column) from e

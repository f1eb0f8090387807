#!filepath: tzframe/engines/xlsx_write_engine.py
from __future__ import annotations

import io

from openpyxl import Workbook

from tzframe.core.instant import as_zoned
from tzframe.core.serial_date import civil_to_serial
from tzframe.core.table import ColumnKind, Table
from tzframe.utils.logger import logs

DATE_FORMAT = "yyyy-mm-dd hh:mm:ss"


class XlsxWriteEngine:
    """
    Table → xlsx bytes（单 sheet，第一行 header）

    TIMESTAMP cell = serial date 数值 + 日期格式标记：
      - serial 由 cell 显示时区下的 civil fields 计算（不是 UTC）
      - 不写任何时区元数据 → 时区信息在写出时静默丢失
      - Instant 值按 UTC 显示

    CIVIL_TEXT / TEXT → 字符串 cell（原样，不解释为公式）。
    """

    def __init__(self, sheet_name: str = "Sheet1", number_format: str = DATE_FORMAT):
        self.sheet_name = sheet_name
        self.number_format = number_format

    def write(self, table: Table) -> bytes:
        table.validate()

        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_name

        ws.append(table.names)

        for row_idx, row in enumerate(table.rows(), start=2):
            for col_idx, (col, value) in enumerate(zip(table.columns, row), start=1):
                if value is None:
                    continue
                cell = ws.cell(row=row_idx, column=col_idx)
                if col.kind is ColumnKind.TIMESTAMP:
                    cell.value = civil_to_serial(as_zoned(value).civil())
                    cell.number_format = self.number_format
                else:
                    cell.value = value
                    # 以 "=" 开头或形如 "#N/A" 的文本也按字符串存，不当公式 / 错误值
                    cell.data_type = "s"

        buf = io.BytesIO()
        wb.save(buf)
        data = buf.getvalue()

        logs.debug(
            f"[XlsxWriteEngine] sheet={self.sheet_name} rows={table.num_rows} "
            f"cols={len(table.columns)} bytes={len(data)}"
        )
        return data

#!filepath: tzframe/engines/csv_write_engine.py
from __future__ import annotations

import io

import pandas as pd

from tzframe.core.instant import render_offset
from tzframe.core.table import ColumnKind, Table
from tzframe.utils.logger import logs


class CsvWriteEngine:
    """
    Table → CSV bytes（UTF-8，header 必有，逗号分隔）

    - TIMESTAMP  : 一律转成 UTC OffsetString（YYYY-MM-DDTHH:MM:SSZ）
                   列的显示时区不会被保留，所有列都塌缩到 UTC
    - CIVIL_TEXT : 原样写出（本地时间可见，但没有任何时区信息）
    - TEXT       : 原样写出
    - None       : 空 cell
    - ""         : 同样写成空 cell，读回为 None（空字符串与缺失值在 CSV 中不区分）

    不做任何 I/O（路径由 FileSystem 处理）。
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding

    def render(self, table: Table) -> pd.DataFrame:
        """渲染成全 string 的 DataFrame（写出前的最终文本）。"""
        table.validate()

        data = {}
        for col in table.columns:
            if col.kind is ColumnKind.TIMESTAMP:
                data[col.name] = [None if v is None else render_offset(v) for v in col.values]
            else:
                data[col.name] = list(col.values)

        return pd.DataFrame(data, columns=table.names, dtype="object")

    def write(self, table: Table) -> bytes:
        frame = self.render(table)

        buf = io.StringIO()
        frame.to_csv(buf, index=False, sep=self.delimiter, lineterminator="\n", na_rep="")
        data = buf.getvalue().encode(self.encoding)

        logs.debug(
            f"[CsvWriteEngine] rows={table.num_rows} cols={len(table.columns)} bytes={len(data)}"
        )
        return data

#!filepath: tzframe/utils/errors.py
from __future__ import annotations

from typing import Optional


class TzFrameError(RuntimeError):
    """
    tzframe 所有异常的根类。
    CLI 捕获后只打印 message，不打印 traceback。
    """


class InvalidZoneError(TzFrameError):
    """Unknown or malformed IANA zone identifier."""

    def __init__(self, zone: object):
        self.zone = zone
        super().__init__(f"无法解析时区: {zone!r}")


class CellError(TzFrameError):
    """
    带单元格坐标的异常基类。

    row    : 数据行号（0-based，不含 header）
    column : 列名
    """

    def __init__(self, message: str, row: Optional[int] = None, column: Optional[str] = None):
        self.row = row
        self.column = column
        if row is not None or column is not None:
            message = f"{message} (row={row}, column={column})"
        super().__init__(message)


class TypeMismatchError(CellError):
    """Cell value incompatible with the declared column kind."""


class ParseError(CellError):
    """Malformed cell text or number."""

    def __init__(self, message: str, row: Optional[int] = None, column: Optional[str] = None, value: object = None):
        self.value = value
        super().__init__(f"{message}: {value!r}", row=row, column=column)


class AmbiguousLocalTimeError(CellError):
    """
    civil time 落在 DST 切换区间：
      - ambiguous   : fall-back，同一 civil time 出现两次
      - nonexistent : spring-forward，该 civil time 不存在
    不做任何猜测，直接抛出。
    """

    def __init__(self, civil, zone: str, reason: str, row: Optional[int] = None, column: Optional[str] = None):
        self.civil = civil
        self.zone = zone
        self.reason = reason
        super().__init__(f"{reason} local time {civil} in {zone}", row=row, column=column)


class SchemaError(TzFrameError):
    """Header / schema / column-length mismatch."""

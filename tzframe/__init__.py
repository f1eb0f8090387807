#!filepath: tzframe/__init__.py

from .utils.logger import Logging, logs
from .utils.filesystem import FileSystem
from .utils.errors import (
    TzFrameError,
    InvalidZoneError,
    TypeMismatchError,
    ParseError,
    AmbiguousLocalTimeError,
    SchemaError,
)
from .core.instant import (
    Instant,
    ZonedTimestamp,
    now_in_zone,
    with_zone,
    force_zone,
    instants_equal,
    parse_civil,
    parse_offset,
    render_civil,
    render_offset,
    resolve_zone,
)
from .core.serial_date import to_serial, from_serial, civil_to_serial, serial_to_civil
from .core.policy import ZonePolicy, ASSUME_UTC, assume_zone
from .core.table import Column, ColumnKind, Table, sample_table
from .engines.csv_write_engine import CsvWriteEngine
from .engines.csv_read_engine import CsvReadEngine
from .engines.xlsx_write_engine import XlsxWriteEngine
from .engines.xlsx_read_engine import XlsxReadEngine
from .config.app_config import AppConfig

__version__ = "0.1.0"

fs = FileSystem

__all__ = [
    "logs", "Logging", "fs", "AppConfig",
    "TzFrameError", "InvalidZoneError", "TypeMismatchError", "ParseError",
    "AmbiguousLocalTimeError", "SchemaError",
    "Instant", "ZonedTimestamp", "now_in_zone", "with_zone", "force_zone", "instants_equal",
    "parse_civil", "parse_offset", "render_civil", "render_offset", "resolve_zone",
    "to_serial", "from_serial", "civil_to_serial", "serial_to_civil",
    "ZonePolicy", "ASSUME_UTC", "assume_zone",
    "Column", "ColumnKind", "Table", "sample_table",
    "CsvWriteEngine", "CsvReadEngine", "XlsxWriteEngine", "XlsxReadEngine",
]

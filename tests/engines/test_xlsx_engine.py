#!filepath: tests/engines/test_xlsx_engine.py
from __future__ import annotations

import io
import zipfile
from datetime import datetime

import pytest
from openpyxl import Workbook, load_workbook

from tzframe.core.instant import Instant, ZonedTimestamp, force_zone, instants_equal, parse_offset, render_civil
from tzframe.core.policy import assume_zone
from tzframe.core.serial_date import civil_to_serial
from tzframe.core.table import Column, ColumnKind, Table, column_zones, compare_instants, force_column
from tzframe.engines.xlsx_read_engine import XlsxReadEngine
from tzframe.engines.xlsx_write_engine import DATE_FORMAT, XlsxWriteEngine
from tzframe.utils.errors import AmbiguousLocalTimeError, ParseError, SchemaError, TypeMismatchError

CHICAGO = "America/Chicago"
TS = ColumnKind.TIMESTAMP
BOTH_TS = {"dt": TS, "dt_loc": TS}


def make_xlsx(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(r)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ============================================================
# 1. writer
# ============================================================
def test_write_local_civil_reading_as_date_cell(sample):
    data = XlsxWriteEngine().write(sample)
    ws = load_workbook(io.BytesIO(data)).active

    assert [c.value for c in ws[1]] == ["dt", "dt_loc"]
    assert ws["A2"].number_format == DATE_FORMAT
    assert ws["B2"].is_date
    # dt_loc 写的是 Chicago 本地读数
    assert ws["A2"].value == datetime(2018, 12, 30, 0, 0)
    assert ws["B2"].value == datetime(2018, 12, 29, 18, 0)


def test_write_stores_serial_number(sample):
    data = XlsxWriteEngine().write(sample)
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        sheet = zf.read("xl/worksheets/sheet1.xml").decode("utf-8")
    assert "43463.75" in sheet


def test_write_sheet_name(sample):
    data = XlsxWriteEngine(sheet_name="ts").write(sample)
    assert load_workbook(io.BytesIO(data)).sheetnames == ["ts"]


def test_write_type_mismatch():
    table = Table((Column("dt", TS, [Instant(0), 43464.0]),))
    with pytest.raises(TypeMismatchError) as exc:
        XlsxWriteEngine().write(table)
    assert exc.value.row == 1


# ============================================================
# 2. reader：容器时区丢失
# ============================================================
def test_container_zone_loss_and_force_zone_repair(sample):
    back = XlsxReadEngine().read(XlsxWriteEngine().write(sample), BOTH_TS)

    original = sample["dt_loc"][0]
    read = back["dt_loc"][0]

    # 本地读数被当成 UTC
    assert render_civil(read) == "2018-12-29 18:00:00"
    assert read.zone == "UTC"
    assert not instants_equal(read, original)

    repaired = force_zone(read, CHICAGO)
    assert instants_equal(repaired, original)


def test_utc_column_survives_container(sample):
    back = XlsxReadEngine().read(XlsxWriteEngine().write(sample), BOTH_TS)
    assert [v.instant for v in back["dt"]] == [v.instant for v in sample["dt"]]


def test_force_column_restores_equality(sample):
    back = XlsxReadEngine().read(XlsxWriteEngine().write(sample), BOTH_TS)
    assert not any(compare_instants(back, "dt", "dt_loc"))

    forced = force_column(back, "dt_loc", CHICAGO)
    assert all(compare_instants(forced, "dt", "dt_loc"))
    assert column_zones(forced) == {"dt": "UTC", "dt_loc": CHICAGO}


def test_read_with_policy_tags_zone(sample):
    only_loc = Table((sample.column("dt_loc"),))
    back = XlsxReadEngine().read(XlsxWriteEngine().write(only_loc), {"dt_loc": TS}, policy=assume_zone(CHICAGO))

    assert [v.instant for v in back["dt_loc"]] == [v.instant for v in sample["dt_loc"]]
    assert column_zones(back) == {"dt_loc": CHICAGO}


def test_read_plain_numeric_serial():
    back = XlsxReadEngine().read(make_xlsx([["t"], [61]]), {"t": TS})
    assert back["t"][0].instant == parse_offset("1900-03-01T00:00:00Z")


def test_text_and_missing_cells():
    table = Table((
        Column("dt", TS, [None, Instant(0)]),
        Column("note", ColumnKind.TEXT, ["hello", None]),
    ))
    back = XlsxReadEngine().read(XlsxWriteEngine().write(table), {"dt": TS, "note": ColumnKind.TEXT})

    assert back["dt"][0] is None
    assert back["dt"][1].instant == Instant(0)
    assert back["note"] == ("hello", None)


@pytest.mark.parametrize(
    "text",
    ["1900-01-15T00:00:00Z", "1900-02-28T12:00:00Z", "1900-03-01T00:00:00Z", "1899-12-30T06:00:00Z"],
)
def test_roundtrip_dates_before_march_1900(text):
    """固定 1899-12-30 纪元：写出、读回两个方向一致（不受 Excel 1900 闰年规则影响）"""
    table = Table((Column("t", TS, [ZonedTimestamp(parse_offset(text))]),))
    back = XlsxReadEngine().read(XlsxWriteEngine().write(table), {"t": TS})
    assert back["t"][0].instant == parse_offset(text)


def test_text_cells_not_stored_as_formulas():
    values = ["=1+1", "#N/A", "plain"]
    table = Table((
        Column("note", ColumnKind.TEXT, values),
        Column("civil", ColumnKind.CIVIL_TEXT, ["=2018-12-29", "2018-12-29 18:00:00", None]),
    ))
    schema = {"note": ColumnKind.TEXT, "civil": ColumnKind.CIVIL_TEXT}
    back = XlsxReadEngine().read(XlsxWriteEngine().write(table), schema)

    assert back["note"] == tuple(values)
    assert back["civil"] == ("=2018-12-29", "2018-12-29 18:00:00", None)


# ============================================================
# 3. 错误
# ============================================================
def test_text_in_timestamp_column_is_parse_error():
    data = make_xlsx([["t"], [43464.0], ["yesterday"]])
    with pytest.raises(ParseError) as exc:
        XlsxReadEngine().read(data, {"t": TS})
    assert (exc.value.row, exc.value.column) == (1, "t")


def test_missing_schema_column():
    with pytest.raises(SchemaError):
        XlsxReadEngine().read(make_xlsx([["dt"], [43464.0]]), BOTH_TS)


def test_unknown_sheet(sample):
    with pytest.raises(SchemaError):
        XlsxReadEngine().read(XlsxWriteEngine().write(sample), BOTH_TS, sheet="nope")


def test_ambiguous_local_time_on_read():
    data = make_xlsx([["t"], [civil_to_serial(datetime(2018, 11, 4, 0, 30))], [civil_to_serial(datetime(2018, 11, 4, 1, 30))]])
    with pytest.raises(AmbiguousLocalTimeError) as exc:
        XlsxReadEngine().read(data, {"t": TS}, policy=assume_zone(CHICAGO))
    assert (exc.value.row, exc.value.column, exc.value.reason) == (1, "t", "ambiguous")


def test_nonexistent_local_time_on_read():
    data = make_xlsx([["t"], [civil_to_serial(datetime(2019, 3, 10, 2, 30))]])
    with pytest.raises(AmbiguousLocalTimeError) as exc:
        XlsxReadEngine().read(data, {"t": TS}, policy=assume_zone(CHICAGO))
    assert (exc.value.row, exc.value.column, exc.value.reason) == (0, "t", "nonexistent")


@pytest.mark.parametrize("data", [b"", b"dt,dt_loc\n2018-12-30T00:00:00Z,x\n", b"PK\x03\x04 truncated"])
def test_not_a_workbook_is_parse_error(data):
    with pytest.raises(ParseError):
        XlsxReadEngine().read(data, BOTH_TS)

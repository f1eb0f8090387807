#!filepath: tests/walkthrough/test_walkthrough.py
from __future__ import annotations

import pytest

from tzframe.config import AppConfig
from tzframe.core.table import column_zones, compare_instants
from tzframe.pipeline.pipeline import WalkthroughPipeline
from tzframe.steps.build_sample_step import BuildSampleStep
from tzframe.utils.errors import InvalidZoneError
from tzframe.workflows.walkthrough import build_walkthrough_pipeline, run_walkthrough

CHICAGO = "America/Chicago"


@pytest.fixture
def result(tmp_path):
    return run_walkthrough(AppConfig(), out_dir=tmp_path / "dat")


def test_walkthrough_writes_files(result, tmp_path):
    out = tmp_path / "dat"
    assert result.files == {
        "csv": out / "ts.csv",
        "civil_csv": out / "ts-civil.csv",
        "xlsx": out / "ts-write.xlsx",
    }
    for path in result.files.values():
        assert path.exists()
    # 原子写入不残留 tmp
    assert not list(out.glob("*.tmp"))


def test_walkthrough_csv_collapses_zone(result):
    raw = result.files["csv"].read_text(encoding="utf-8").splitlines()
    assert raw[1] == "2018-12-30T00:00:00Z,2018-12-30T00:00:00Z"

    assert column_zones(result.tables["csv_read"]) == {"dt": "UTC", "dt_loc": "UTC"}
    assert column_zones(result.tables["csv_retagged"]) == {"dt": "UTC", "dt_loc": CHICAGO}


def test_walkthrough_civil_text(result):
    raw = result.files["civil_csv"].read_text(encoding="utf-8").splitlines()
    assert raw[1] == "2018-12-30T00:00:00Z,2018-12-29 18:00:00"

    assert not any(compare_instants(result.tables["civil_default"], "dt", "dt_loc"))
    assert all(compare_instants(result.tables["civil_assumed"], "dt", "dt_loc"))
    assert all(compare_instants(result.tables["civil_parsed"], "dt", "dt_loc"))


def test_walkthrough_xlsx(result):
    assert not any(compare_instants(result.tables["xlsx_read"], "dt", "dt_loc"))
    assert all(compare_instants(result.tables["xlsx_forced"], "dt", "dt_loc"))


def test_walkthrough_findings(result):
    assert len(result.findings) == 10
    assert result.findings[0].title == "Sample data"
    assert result.findings[-1].frame["is_equal"].all()


def test_walkthrough_other_zone(tmp_path):
    ctx = run_walkthrough(AppConfig(), out_dir=tmp_path, zone="Asia/Shanghai")
    assert column_zones(ctx.table)["dt_loc"] == "Asia/Shanghai"
    assert all(compare_instants(ctx.tables["xlsx_forced"], "dt", "dt_loc"))


def test_walkthrough_invalid_zone(tmp_path):
    with pytest.raises(InvalidZoneError):
        run_walkthrough(AppConfig(), out_dir=tmp_path, zone="Nowhere/Special")


def test_build_pipeline_uses_config():
    cfg = AppConfig(walkthrough={"start": "2020-01-01 00:00:00", "end": "2020-01-01 12:00:00", "step_hours": 12})
    pipeline = build_walkthrough_pipeline(cfg)

    assert isinstance(pipeline, WalkthroughPipeline)
    assert isinstance(pipeline.steps[0], BuildSampleStep)


def test_pipeline_with_single_step(tmp_path):
    pipeline = WalkthroughPipeline(steps=[BuildSampleStep("2020-01-01 00:00:00", "2020-01-01 12:00:00", 12)])
    ctx = pipeline.run(tmp_path, zone=CHICAGO)
    assert ctx.table.num_rows == 2
    assert len(ctx.findings) == 1

#!filepath: tzframe/workflows/walkthrough.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from tzframe.config.app_config import AppConfig
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.pipeline import WalkthroughPipeline
from tzframe.steps.build_sample_step import BuildSampleStep
from tzframe.steps.civil_csv_step import CivilCsvStep
from tzframe.steps.csv_roundtrip_step import CsvRoundTripStep
from tzframe.steps.xlsx_roundtrip_step import XlsxRoundTripStep
from tzframe.utils.logger import logs


def build_walkthrough_pipeline(cfg: Optional[AppConfig] = None) -> WalkthroughPipeline:
    cfg = cfg or AppConfig()
    wt = cfg.walkthrough

    steps = [
        BuildSampleStep(start=wt.start, end=wt.end, step_hours=wt.step_hours),
        CsvRoundTripStep(),
        CivilCsvStep(),
        XlsxRoundTripStep(),
    ]
    return WalkthroughPipeline(steps=steps, io=cfg.io)


@logs.catch(msg="walkthrough failed")
def run_walkthrough(
    cfg: Optional[AppConfig] = None,
    out_dir: Optional[str | Path] = None,
    zone: Optional[str] = None,
) -> WalkthroughContext:
    cfg = cfg or AppConfig()
    pipeline = build_walkthrough_pipeline(cfg)
    return pipeline.run(
        out_dir=out_dir or cfg.walkthrough.out_dir,
        zone=zone or cfg.walkthrough.zone,
    )

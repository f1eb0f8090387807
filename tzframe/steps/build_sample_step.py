#!filepath: tzframe/steps/build_sample_step.py
from __future__ import annotations

from datetime import timedelta

from tzframe.core.table import column_zones, sample_table
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.step import PipelineStep


class BuildSampleStep(PipelineStep):
    """
    dt     : UTC 时间序列
    dt_loc : 同一批时刻，显示时区为 ctx.zone
    """

    stage = "sample"

    def __init__(self, start: str, end: str, step_hours: float):
        self.start = start
        self.end = end
        self.step = timedelta(hours=step_hours)

    def run(self, ctx: WalkthroughContext) -> WalkthroughContext:
        with self.timed():
            ctx.table = sample_table(self.start, self.end, self.step, ctx.zone)
            ctx.tables["sample"] = ctx.table

            ctx.record(
                "Sample data",
                note=f"dt is UTC; dt_loc holds the same instants displayed in {ctx.zone}.",
                frame=ctx.table.to_frame(),
                zones=column_zones(ctx.table),
            )
        return ctx

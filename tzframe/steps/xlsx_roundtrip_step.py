#!filepath: tzframe/steps/xlsx_roundtrip_step.py
from __future__ import annotations

from tzframe.core.policy import ASSUME_UTC
from tzframe.core.table import ColumnKind, column_zones, compare_instants, force_column
from tzframe.engines.xlsx_read_engine import XlsxReadEngine
from tzframe.engines.xlsx_write_engine import XlsxWriteEngine
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.step import PipelineStep
from tzframe.utils.filesystem import FileSystem


class XlsxRoundTripStep(PipelineStep):
    """
    xlsx 写出本地 civil 读数（serial date，无时区），
    读回默认按 UTC 解释 → 需要 force_zone 修复。
    """

    stage = "xlsx"
    filename = "ts-write.xlsx"

    def run(self, ctx: WalkthroughContext) -> WalkthroughContext:
        with self.timed():
            writer = XlsxWriteEngine(sheet_name=ctx.io.sheet_name, number_format=ctx.io.number_format)
            reader = XlsxReadEngine()

            path = FileSystem.safe_write(ctx.out_dir / self.filename, writer.write(ctx.table))
            ctx.files["xlsx"] = path

            schema = {"dt": ColumnKind.TIMESTAMP, "dt_loc": ColumnKind.TIMESTAMP}
            back = reader.read(FileSystem.read_bytes(path), schema, policy=ASSUME_UTC, sheet=ctx.io.sheet_name)
            ctx.tables["xlsx_read"] = back

            frame = back.to_frame()
            frame["is_equal"] = compare_instants(back, "dt", "dt_loc")
            ctx.record(
                "xlsx read back",
                note="dt_loc was written as local clock time, and is read back as if it were UTC.",
                frame=frame,
                zones=column_zones(back),
            )

            forced = force_column(back, "dt_loc", ctx.zone)
            ctx.tables["xlsx_forced"] = forced

            frame = forced.to_frame()
            frame["is_equal"] = compare_instants(forced, "dt", "dt_loc")
            ctx.record(
                f"xlsx read back, dt_loc forced to {ctx.zone}",
                note="force_zone keeps the clock reading and fixes the zone, restoring the original instants.",
                frame=frame,
                zones=column_zones(forced),
            )
        return ctx

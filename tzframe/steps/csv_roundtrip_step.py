#!filepath: tzframe/steps/csv_roundtrip_step.py
from __future__ import annotations

from tzframe.core.policy import ASSUME_UTC
from tzframe.core.table import ColumnKind, column_zones, retag_column
from tzframe.engines.csv_read_engine import CsvReadEngine
from tzframe.engines.csv_write_engine import CsvWriteEngine
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.step import PipelineStep
from tzframe.utils.filesystem import FileSystem


class CsvRoundTripStep(PipelineStep):
    """
    timestamp 列直接写 CSV：
      1. 两列都被写成 UTC ...Z
      2. 读回后 dt_loc 的显示时区丢失（变成 UTC）
      3. retag（with_zone）即可恢复显示时区，Instant 本来就没变
    """

    stage = "csv"
    filename = "ts.csv"

    def run(self, ctx: WalkthroughContext) -> WalkthroughContext:
        with self.timed():
            writer = CsvWriteEngine(delimiter=ctx.io.delimiter)
            reader = CsvReadEngine(delimiter=ctx.io.delimiter)

            data = writer.write(ctx.table)
            path = FileSystem.safe_write(ctx.out_dir / self.filename, data)
            ctx.files["csv"] = path

            ctx.record(
                "CSV written with timestamp columns",
                note="Both columns are written in UTC; the display zone of dt_loc is not preserved.",
                raw=data.decode("utf-8"),
            )

            schema = {"dt": ColumnKind.TIMESTAMP, "dt_loc": ColumnKind.TIMESTAMP}
            back = reader.read(FileSystem.read_bytes(path), schema, policy=ASSUME_UTC)
            ctx.tables["csv_read"] = back
            ctx.record(
                "CSV read back",
                note="Offset strings parse to the right instants, but every column is now tagged UTC.",
                frame=back.to_frame(),
                zones=column_zones(back),
            )

            retagged = retag_column(back, "dt_loc", ctx.zone)
            ctx.tables["csv_retagged"] = retagged
            ctx.record(
                "CSV read back, dt_loc re-tagged",
                note=f"with_zone(dt_loc, {ctx.zone}) restores the display zone; instants are unchanged.",
                frame=retagged.to_frame(),
                zones=column_zones(retagged),
            )
        return ctx

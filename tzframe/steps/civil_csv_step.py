#!filepath: tzframe/steps/civil_csv_step.py
from __future__ import annotations

from tzframe.core.policy import ASSUME_UTC, assume_zone
from tzframe.core.table import (
    ColumnKind,
    column_zones,
    compare_instants,
    parse_civil_column,
    render_civil_column,
)
from tzframe.engines.csv_read_engine import CsvReadEngine
from tzframe.engines.csv_write_engine import CsvWriteEngine
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.step import PipelineStep
from tzframe.utils.filesystem import FileSystem


def _with_equality(table, a: str = "dt", b: str = "dt_loc"):
    frame = table.to_frame()
    frame["is_equal"] = compare_instants(table, a, b)
    return frame


class CivilCsvStep(PipelineStep):
    """
    dt_loc 先渲染成 civil string 再写 CSV：
      1. 文件里能看到本地时间，但没有任何时区标识
      2. 默认 ASSUME_UTC 读回 → Instant 错位（is_equal 全 False）
      3. 显式 assume_zone 读回 → Instant 正确
    """

    stage = "civil_csv"
    filename = "ts-civil.csv"

    def run(self, ctx: WalkthroughContext) -> WalkthroughContext:
        with self.timed():
            writer = CsvWriteEngine(delimiter=ctx.io.delimiter)
            reader = CsvReadEngine(delimiter=ctx.io.delimiter)

            civil = render_civil_column(ctx.table, "dt_loc", ctx.io.civil_format)
            ctx.tables["civil"] = civil

            data = writer.write(civil)
            path = FileSystem.safe_write(ctx.out_dir / self.filename, data)
            ctx.files["civil_csv"] = path
            ctx.record(
                "CSV written with dt_loc rendered as civil text",
                note="dt_loc shows local clock time but carries no zone indicator.",
                raw=data.decode("utf-8"),
            )

            payload = FileSystem.read_bytes(path)
            ts_schema = {"dt": ColumnKind.TIMESTAMP, "dt_loc": ColumnKind.TIMESTAMP}

            naive = reader.read(payload, ts_schema, policy=ASSUME_UTC)
            ctx.tables["civil_default"] = naive
            ctx.record(
                "Civil text read back with the default policy",
                note="Civil text without a zone is assumed to be UTC, so the instants no longer match.",
                frame=_with_equality(naive),
            )

            fixed = reader.read(
                payload, ts_schema, policy=ASSUME_UTC, column_policies={"dt_loc": assume_zone(ctx.zone)}
            )
            ctx.tables["civil_assumed"] = fixed
            ctx.record(
                f"Civil text read back with assume_zone({ctx.zone})",
                note="An explicit zone policy recovers the original instants.",
                frame=_with_equality(fixed),
                zones=column_zones(fixed),
            )

            text_schema = {"dt": ColumnKind.TIMESTAMP, "dt_loc": ColumnKind.CIVIL_TEXT}
            as_text = reader.read(payload, text_schema, policy=ASSUME_UTC)
            parsed = parse_civil_column(as_text, "dt_loc", assume_zone(ctx.zone))
            ctx.tables["civil_parsed"] = parsed
            ctx.record(
                "Civil text kept as text, then parsed in the known zone",
                note="Equal instants, different display zones: same rendering does not mean same time.",
                frame=_with_equality(parsed),
                zones=column_zones(parsed),
            )
        return ctx

#!filepath: tzframe/cli.py
from functools import wraps
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer
from rich import print
from rich.markup import escape
from rich.table import Table as RichTable

from tzframe import __version__
from tzframe.config.app_config import AppConfig
from tzframe.core.instant import render_civil, with_zone
from tzframe.core.policy import assume_zone
from tzframe.core.serial_date import civil_to_serial, serial_to_civil
from tzframe.core.table import column_zones, parse_schema
from tzframe.engines.csv_read_engine import CsvReadEngine
from tzframe.engines.xlsx_read_engine import XlsxReadEngine
from tzframe.utils.errors import TzFrameError
from tzframe.utils.filesystem import FileSystem
from tzframe.utils.logger import logs
from tzframe.workflows.walkthrough import run_walkthrough

app = typer.Typer(help="tzframe: timezone pitfalls of CSV / xlsx timestamp round trips")


def _handle_errors(func):
    """TzFrameError / 文件不存在 → 红色提示 + exit 1，不打印 traceback。"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (TzFrameError, FileNotFoundError) as e:
            print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

    return wrapper


def _print_frame(frame: pd.DataFrame, title: str = "") -> None:
    table = RichTable(title=title or None)
    for name in frame.columns:
        table.add_column(str(name))
    for row in frame.itertuples(index=False):
        table.add_row(*["" if pd.isna(v) else str(v) for v in row])
    print(table)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config path"),
):
    cfg = AppConfig.load(str(config) if config else None)
    logs.reconfigure(
        log_dir=cfg.log.dir,
        rotation=cfg.log.rotation,
        retention=cfg.log.retention,
        log_level=cfg.log.level,
    )
    ctx.obj = cfg


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
@_handle_errors
def walkthrough(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="output directory"),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help="IANA zone for dt_loc"),
):
    """
    运行完整的 CSV / xlsx 时区 walkthrough
    """
    cfg: AppConfig = ctx.obj
    result = run_walkthrough(cfg, out_dir=out, zone=zone)

    for finding in result.findings:
        print(f"\n[bold blue]## {finding.title}[/bold blue]")
        if finding.note:
            print(finding.note)
        if finding.raw is not None:
            print(f"[dim]{finding.raw}[/dim]")
        if finding.frame is not None:
            _print_frame(finding.frame)
        if finding.zones is not None:
            print(finding.zones)

    print(f"\n[green]files: {', '.join(str(p) for p in result.files.values())}[/green]")


@app.command()
@_handle_errors
def serial(value: float):
    """
    serial date → civil time
    """
    print(serial_to_civil(value).isoformat(sep=" "))


@app.command("to-serial")
@_handle_errors
def to_serial_cmd(
    timestamp: str,
    zone: str = typer.Option("UTC", "--zone", "-z", help="display zone (civil input is read in this zone)"),
):
    """
    timestamp → serial date（按 zone 下的 civil 读数计算）
    """
    zt = with_zone(assume_zone(zone).parse(timestamp), zone)
    print(f"{render_civil(zt)} {zone} -> {civil_to_serial(zt.civil())!r}")


@app.command()
@_handle_errors
def inspect(
    ctx: typer.Context,
    path: Path,
    schema: List[str] = typer.Option(..., "--schema", "-s", help="name=timestamp|civil_text|text"),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help="zone for civil timestamps"),
):
    """
    按 schema 读取 CSV / xlsx 文件并展示
    """
    cfg: AppConfig = ctx.obj
    policy = assume_zone(zone) if zone else cfg.io.default_policy()
    data = FileSystem.read_bytes(path)
    declared = parse_schema(schema)

    if path.suffix.lower() == ".xlsx":
        table = XlsxReadEngine().read(data, declared, policy=policy)
    else:
        table = CsvReadEngine(delimiter=cfg.io.delimiter).read(data, declared, policy=policy)

    _print_frame(table.to_frame(), title=str(path))
    print(column_zones(table))


if __name__ == "__main__":
    app()

# python -m tzframe.cli walkthrough --out dat

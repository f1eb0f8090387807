#!filepath: tzframe/pipeline/pipeline.py
from __future__ import annotations

from pathlib import Path

from tzframe.config.io_config import IOConfig
from tzframe.pipeline.context import WalkthroughContext
from tzframe.pipeline.step import PipelineStep
from tzframe.utils.filesystem import FileSystem
from tzframe.utils.logger import logs


class WalkthroughPipeline:
    """
    顺序执行 Step 的调度器

    - Pipeline 负责构造 ctx、准备输出目录
    - Step 自己定义计时边界（PipelineStep.timed）
    """

    def __init__(self, steps: list[PipelineStep], io: IOConfig | None = None):
        self.steps = steps
        self.io = io or IOConfig()

    def run(self, out_dir: str | Path, zone: str) -> WalkthroughContext:
        out_dir = FileSystem.ensure_dir(out_dir)
        logs.info(f"[Pipeline] ====== START zone={zone} out={out_dir} ======")

        ctx = WalkthroughContext(out_dir=out_dir, zone=zone, io=self.io)

        for step in self.steps:
            ctx = step.run(ctx)

        logs.info(f"[Pipeline] ====== DONE findings={len(ctx.findings)} ======")
        return ctx

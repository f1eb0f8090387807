#!filepath: tzframe/pipeline/step.py
from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter

from tzframe.pipeline.context import WalkthroughContext
from tzframe.utils.logger import logs


class PipelineStep:
    """
    Pipeline Step 基类

    职责：
      - run(ctx) 读写 ctx，返回 ctx
      - timed() 提供 Step 级计时边界
    """

    stage: str = ""

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    @contextmanager
    def timed(self):
        start = perf_counter()
        logs.debug(f"[{self.step_name}] start")
        try:
            yield
        finally:
            logs.info(f"[{self.step_name}] {self.stage} took {perf_counter() - start:.4f}s")

    def run(self, ctx: WalkthroughContext) -> WalkthroughContext:
        raise NotImplementedError

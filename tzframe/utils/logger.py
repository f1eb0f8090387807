#!filepath: tzframe/utils/logger.py
import sys
import json
from functools import wraps
from pathlib import Path
from time import perf_counter
from typing import Callable, Optional

from loguru import logger


class Logging:
    """
    日志模块（loguru 封装）
    ---------------------------------------
    - stderr sink 默认开启
    - 可选文件 sink：按日期切割 + 保留周期
    - 函数级日志装饰器 catch()
    ---------------------------------------
    """

    FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"

    def __init__(
        self,
        log_dir: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level

        self._configure()

    def _configure(self) -> None:
        logger.remove()

        logger.add(sink=sys.stderr, level=self.level, format=self.FORMAT)

        if self.log_dir:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)
            logger.add(
                sink=f"{self.log_dir}/{{time:YYYY-MM-DD}}.log",
                rotation=self.rotation,
                retention=self.retention,
                level=self.level,
                format=self.FORMAT,
                enqueue=True,
                backtrace=True,
                diagnose=True,
            )

        logger.debug(f"[Logging] configured level={self.level} dir={self.log_dir}")

    def reconfigure(self, log_dir: Optional[str] = None, rotation: str = "1 day",
                    retention: str = "30 days", log_level: str = "INFO") -> None:
        """根据 LogConfig 重新配置全局 logger。"""
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level
        self._configure()

    # ----------- 日志方法 -----------
    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.error(msg, *args, **kwargs)

    # ---------- 日志装饰器 ----------
    def catch(
        self,
        msg: str = "Exception occurred",
        log_inputs: bool = False,
        log_outputs: bool = False,
        log_time: bool = True,
    ) -> Callable:

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):

                if log_inputs:
                    logger.debug(
                        f"[CALL] {func.__name__} args={args}, "
                        f"kwargs={json.dumps(kwargs, ensure_ascii=False, default=str)}"
                    )

                start = perf_counter()

                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.exception(f"[ERROR] {func.__name__}: {msg}")
                    raise

                if log_outputs:
                    logger.debug(f"[RETURN] {func.__name__} result={result}")

                if log_time:
                    cost = perf_counter() - start
                    logger.debug(f"[TIME] {func.__name__} took {cost:.4f}s")

                return result

            return wrapper

        return decorator


# 默认全局 logs（CLI 启动时按配置 reconfigure）
logs = Logging()

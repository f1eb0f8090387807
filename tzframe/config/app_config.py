#!filepath: tzframe/config/app_config.py
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .io_config import IOConfig
from .log_config import LogConfig
from .walkthrough_config import WalkthroughConfig

ENV_CONFIG_PATH = "TZFRAME_CONFIG"


def project_root() -> Path:
    """
    tzframe/config/app_config.py → tzframe/config → tzframe → project_root
    """
    return Path(__file__).resolve().parents[2]


def default_config_path() -> Path:
    return Path(__file__).resolve().parent / "base.yml"


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    io: IOConfig = Field(default_factory=IOConfig)
    walkthrough: WalkthroughConfig = Field(default_factory=WalkthroughConfig)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        优先级：path 参数 > $TZFRAME_CONFIG > tzframe/config/base.yml
        """
        load_dotenv(project_root() / ".env")

        if path is None:
            path = os.getenv(ENV_CONFIG_PATH) or str(default_config_path())

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        return cls(**raw)

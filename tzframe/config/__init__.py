from .app_config import AppConfig
from .io_config import IOConfig
from .log_config import LogConfig
from .walkthrough_config import WalkthroughConfig

__all__ = ["AppConfig", "IOConfig", "LogConfig", "WalkthroughConfig"]

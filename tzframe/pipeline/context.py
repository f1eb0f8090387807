#!filepath: tzframe/pipeline/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from tzframe.config.io_config import IOConfig
from tzframe.core.table import Table


@dataclass
class Finding:
    """walkthrough 中的一条观察结果（供 CLI 展示）"""

    title: str
    note: str = ""
    frame: Optional[pd.DataFrame] = None
    raw: Optional[str] = None
    zones: Optional[Dict[str, Optional[str]]] = None


@dataclass
class WalkthroughContext:
    """
    WalkthroughContext = Pipeline 运行期唯一上下文

    - Pipeline 负责构造
    - Step 读写 tables / files / findings
    - 不放业务逻辑
    """

    out_dir: Path
    zone: str
    io: IOConfig = field(default_factory=IOConfig)

    # sample data（BuildSampleStep 产出）
    table: Optional[Table] = None

    # step 产出的中间结果：key → Table / 文件
    tables: Dict[str, Table] = field(default_factory=dict)
    files: Dict[str, Path] = field(default_factory=dict)

    findings: List[Finding] = field(default_factory=list)

    def record(self, title: str, **kwargs) -> Finding:
        finding = Finding(title=title, **kwargs)
        self.findings.append(finding)
        return finding

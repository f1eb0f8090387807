#!filepath: tzframe/utils/filesystem.py
from pathlib import Path

from tzframe.utils.logger import logs


class FileSystem:
    """
    文件系统工具
    - 自动创建目录
    - 原子写入（临时文件 → rename）
    - 读取 bytes

    engines 只处理 bytes，路径全部在这里解析。
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] 创建目录: {p}")
        return p

    @staticmethod
    def safe_write(path: str | Path, data: bytes) -> Path:
        """
        原子写入（避免部分写入导致文件损坏）
            1) 先写入 tmp 文件
            2) rename → 正式文件
        """
        path = Path(path)
        FileSystem.ensure_dir(path.parent)

        tmp_path = path.with_suffix(path.suffix + ".tmp")

        with open(tmp_path, "wb") as f:
            f.write(data)

        tmp_path.replace(path)
        logs.debug(f"[FS] 原子写入完成: {path} ({FileSystem.format_size(len(data))})")
        return path

    @staticmethod
    def read_bytes(path: str | Path) -> bytes:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"文件不存在: {p}")
        return p.read_bytes()

    @staticmethod
    def format_size(size_bytes: float) -> str:
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size_bytes < 1024:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f} TB"

#!filepath: tzframe/config/io_config.py
from pydantic import BaseModel, field_validator

from tzframe.core.instant import UTC, resolve_zone
from tzframe.core.policy import ASSUME_UTC, ZonePolicy, assume_zone
from tzframe.utils.errors import InvalidZoneError


class IOConfig(BaseModel):
    """读写相关的默认值（均可在单次调用中覆盖）"""

    civil_format: str = "%Y-%m-%d %H:%M:%S"
    delimiter: str = ","
    sheet_name: str = "Sheet1"
    number_format: str = "yyyy-mm-dd hh:mm:ss"

    # 无时区 civil time 的默认解释时区；仅用于构造具名 policy
    default_zone: str = "UTC"

    @field_validator("default_zone")
    @classmethod
    def _check_zone(cls, v: str) -> str:
        try:
            resolve_zone(v)
        except InvalidZoneError as e:
            raise ValueError(str(e)) from e
        return v

    def default_policy(self) -> ZonePolicy:
        """default_zone 为 UTC 时返回具名的 ASSUME_UTC。"""
        if self.default_zone == UTC:
            return ASSUME_UTC
        return assume_zone(self.default_zone)

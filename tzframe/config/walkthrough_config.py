#!filepath: tzframe/config/walkthrough_config.py
from pydantic import BaseModel, Field, field_validator

from tzframe.core.instant import resolve_zone
from tzframe.utils.errors import InvalidZoneError


class WalkthroughConfig(BaseModel):
    start: str = "2018-12-30 00:00:00"
    end: str = "2019-01-02 00:00:00"
    step_hours: float = Field(6.0, gt=0)
    zone: str = "America/Chicago"
    out_dir: str = "dat"

    @field_validator("zone")
    @classmethod
    def _check_zone(cls, v: str) -> str:
        try:
            resolve_zone(v)
        except InvalidZoneError as e:
            raise ValueError(str(e)) from e
        return v

"""Wire formats.

Record documents use snake_case field names internally and camelCase
aliases on the wire, so each model doubles as the field mapping between
the JSON a kiosk sends and the columns the store keeps.
"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _check_timestamp(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"'{value}' is not an ISO-8601 timestamp") from e
    return value


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeDoc(WireModel):
    id: str = Field(min_length=1, max_length=100)
    name: str
    pin: str
    image_url: str | None = None
    archived: bool = False
    auto_deduct_lunch: bool = False
    location_id: str | None = None
    department_id: str | None = None
    is_temp: bool = False
    temp_agency: str | None = None


class BreakPeriod(WireModel):
    start: str
    end: str | None = None  # None while the break is running

    check_timestamps = field_validator("start", "end")(_check_timestamp)


class TimeRecordDoc(WireModel):
    id: str = Field(min_length=1, max_length=100)
    employee_id: str
    location_id: str | None = None
    clock_in: str
    clock_out: str | None = None
    breaks: list[BreakPeriod] = Field(default_factory=list)

    check_timestamps = field_validator("clock_in", "clock_out")(_check_timestamp)

    @field_validator("breaks", mode="before")
    @classmethod
    def none_breaks_to_empty(cls, v):
        return [] if v is None else v


class LocationDoc(WireModel):
    id: str = Field(min_length=1, max_length=100)
    name: str
    abbreviation: str | None = None


class DepartmentDoc(WireModel):
    id: str = Field(min_length=1, max_length=100)
    name: str


class SettingsDoc(WireModel):
    id: str = Field(min_length=1, max_length=100)
    logo_url: str | None = None
    week_start_day: int = Field(default=0, ge=0, le=6)
    remote_db_url: str | None = None
    screen_saver_enabled: bool = False
    clock_format: Literal["12h", "24h"] = "12h"
    clock_screen_timeout: int = Field(default=30, gt=0)
    admin_screen_timeout: int = Field(default=120, gt=0)
    report_screen_timeout: int = Field(default=60, gt=0)


class Checkpoint(BaseModel):
    id: str | None = None
    sequence: int = Field(default=0, ge=0)


class PullRequest(BaseModel):
    checkpoint: Checkpoint | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)


class PullResponse(BaseModel):
    documents: list[dict]
    checkpoint: Checkpoint | None = None


class OkResponse(BaseModel):
    ok: bool

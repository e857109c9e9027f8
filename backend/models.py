from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Employee(SQLModel, table=True):
    __tablename__ = "employee"

    id: str = Field(primary_key=True, max_length=100)
    name: str
    pin: str  # Plaintext, the kiosk compares it client-side
    image_url: str | None = Field(default=None)
    archived: bool = Field(default=False)
    auto_deduct_lunch: bool = Field(default=False)
    location_id: str | None = Field(default=None, index=True)
    department_id: str | None = Field(default=None, index=True)
    is_temp: bool = Field(default=False)
    temp_agency: str | None = Field(default=None)
    sequence: int = Field(default=0, index=True)


class TimeRecord(SQLModel, table=True):
    __tablename__ = "time_record"

    id: str = Field(primary_key=True, max_length=100)
    employee_id: str = Field(index=True, max_length=100)  # Not a foreign key
    location_id: str | None = Field(default=None)
    clock_in: str  # ISO-8601
    clock_out: str | None = Field(default=None)  # None while clocked in
    breaks: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    sequence: int = Field(default=0, index=True)


class Location(SQLModel, table=True):
    __tablename__ = "location"

    id: str = Field(primary_key=True, max_length=100)
    name: str
    abbreviation: str | None = Field(default=None)
    sequence: int = Field(default=0, index=True)


class Department(SQLModel, table=True):
    __tablename__ = "department"

    id: str = Field(primary_key=True, max_length=100)
    name: str
    sequence: int = Field(default=0, index=True)


class KioskSettings(SQLModel, table=True):
    __tablename__ = "settings"

    id: str = Field(primary_key=True, max_length=100)
    logo_url: str | None = Field(default=None)
    week_start_day: int = Field(default=0)
    remote_db_url: str | None = Field(default=None)
    screen_saver_enabled: bool = Field(default=False)
    clock_format: str = Field(default="12h")
    clock_screen_timeout: int = Field(default=30)
    admin_screen_timeout: int = Field(default=120)
    report_screen_timeout: int = Field(default=60)
    sequence: int = Field(default=0, index=True)


class SyncCounter(SQLModel, table=True):
    """Last write sequence handed out per collection."""

    __tablename__ = "sync_counter"

    collection: str = Field(primary_key=True, max_length=50)
    value: int = Field(default=0)

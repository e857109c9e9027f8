from enum import Enum

from models import Department, Employee, KioskSettings, Location, TimeRecord
from schemas import DepartmentDoc, EmployeeDoc, LocationDoc, SettingsDoc, TimeRecordDoc

GLOBAL_SETTINGS_ID = "GLOBAL_SETTINGS"


class RecordKind(str, Enum):
    """The five record collections served by the kiosk backend."""

    EMPLOYEES = "employees"
    TIME_RECORDS = "time_records"
    LOCATIONS = "locations"
    DEPARTMENTS = "departments"
    SETTINGS = "settings"

    @classmethod
    def from_collection(cls, name: str) -> "RecordKind | None":
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def schema(self):
        return _SCHEMAS[self]

    @property
    def table(self):
        return _TABLES[self]

    @property
    def deletable(self) -> bool:
        # Settings is a singleton that lives for the life of the install
        return self is not RecordKind.SETTINGS

    @property
    def fixed_id(self) -> "str | None":
        """The only id a record of this kind may have, or None if any id is allowed."""
        return GLOBAL_SETTINGS_ID if self is RecordKind.SETTINGS else None


_SCHEMAS = {
    RecordKind.EMPLOYEES: EmployeeDoc,
    RecordKind.TIME_RECORDS: TimeRecordDoc,
    RecordKind.LOCATIONS: LocationDoc,
    RecordKind.DEPARTMENTS: DepartmentDoc,
    RecordKind.SETTINGS: SettingsDoc,
}

_TABLES = {
    RecordKind.EMPLOYEES: Employee,
    RecordKind.TIME_RECORDS: TimeRecord,
    RecordKind.LOCATIONS: Location,
    RecordKind.DEPARTMENTS: Department,
    RecordKind.SETTINGS: KioskSettings,
}

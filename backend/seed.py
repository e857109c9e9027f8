import logging

from kinds import GLOBAL_SETTINGS_ID, RecordKind
from mapper import to_storage
from store import RecordNotFound

logger = logging.getLogger(__name__)

SAMPLE_DOCUMENTS = {
    RecordKind.LOCATIONS: [
        {"id": "LOC001", "name": "Main Plant", "abbreviation": "MP"},
        {"id": "LOC002", "name": "Warehouse", "abbreviation": "WH"},
    ],
    RecordKind.DEPARTMENTS: [
        {"id": "DEP001", "name": "Production"},
        {"id": "DEP002", "name": "Shipping"},
    ],
    RecordKind.EMPLOYEES: [
        {
            "id": "EMP001",
            "name": "Alice Johnson",
            "pin": "1234",
            "autoDeductLunch": True,
            "locationId": "LOC001",
            "departmentId": "DEP001",
        },
        {
            "id": "EMP002",
            "name": "Bob Smith",
            "pin": "2345",
            "locationId": "LOC002",
            "departmentId": "DEP002",
        },
        {
            "id": "EMP003",
            "name": "Carol Davis",
            "pin": "3456",
            "locationId": "LOC001",
            "departmentId": "DEP001",
            "isTemp": True,
            "tempAgency": "Staffing Plus",
        },
    ],
    RecordKind.TIME_RECORDS: [
        {
            "id": "TR001",
            "employeeId": "EMP001",
            "locationId": "LOC001",
            "clockIn": "2024-01-15T08:00:00Z",
            "clockOut": "2024-01-15T16:30:00Z",
            "breaks": [{"start": "2024-01-15T12:00:00Z", "end": "2024-01-15T12:30:00Z"}],
        },
    ],
}


def ensure_settings(store) -> bool:
    """Create the GLOBAL_SETTINGS record with defaults if it is missing."""
    try:
        store.get(RecordKind.SETTINGS, GLOBAL_SETTINGS_ID)
        return False
    except RecordNotFound:
        store.upsert(RecordKind.SETTINGS, to_storage(RecordKind.SETTINGS, {"id": GLOBAL_SETTINGS_ID}))
        logger.info(f"Created {GLOBAL_SETTINGS_ID} with default values")
        return True


def seed_store(store) -> int:
    """Seed every empty collection with sample data. Returns the number of records written."""
    written = 0
    for kind, documents in SAMPLE_DOCUMENTS.items():
        if store.list(kind):
            logger.info(f"{kind.value} already has data, skipping seed")
            continue
        for document in documents:
            store.upsert(kind, to_storage(kind, document))
            written += 1
        logger.info(f"Seeded {kind.value} with {len(documents)} sample records")
    return written


if __name__ == "__main__":
    from config import load_config
    from store import build_store

    logging.basicConfig(level=logging.INFO)
    store = build_store(load_config())
    try:
        ensure_settings(store)
        count = seed_store(store)
        print(f"Seeded database with {count} sample records.")
    finally:
        store.close()

"""Translation between camelCase wire documents and snake_case storage records."""
from kinds import RecordKind


def to_storage(kind: RecordKind, wire: dict) -> dict:
    """Validate a wire document and return its storage record.

    Raises pydantic.ValidationError when the document is invalid.
    Absent optional fields come back as None (breaks as an empty list).
    """
    return kind.schema.model_validate(wire).model_dump()


def to_wire(kind: RecordKind, record: dict) -> dict:
    return kind.schema.model_validate(record).model_dump(by_alias=True)

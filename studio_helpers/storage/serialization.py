"""
JSON serialization of stored records.

Stored JSON uses PascalCase field names (SectionName, ClassId, SubFolder).
Models accept either the PascalCase alias or the Python field name on input.
"""

from typing import List, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_pascal


class StoredRecord(BaseModel):
    """Base for every record persisted in the key-value store."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


RecordT = TypeVar("RecordT", bound=BaseModel)


def dump_records(records: Sequence[BaseModel]) -> str:
    """Serialize records as an indented JSON array with aliased field names."""
    if not records:
        return "[]"
    adapter = TypeAdapter(List[type(records[0])])
    return adapter.dump_json(list(records), by_alias=True, indent=2).decode("utf-8")


def load_records(model: Type[RecordT], text: str) -> List[RecordT]:
    """
    Parse a JSON array of records.

    Raises:
        ValueError: If text is not a JSON array of valid records
    """
    try:
        return TypeAdapter(List[model]).validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid {model.__name__} data: {e}") from e


def dump_model(record: BaseModel) -> str:
    """Serialize one record as indented JSON with aliased field names."""
    return record.model_dump_json(by_alias=True, indent=2)

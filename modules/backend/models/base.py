"""
Stored Record Base Model.

Base class for the JSON records kept on disk. Records use camelCase keys
on disk, snake_case attributes in Python, and keep any unknown keys they
were loaded with so a rewrite never drops data.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StoredRecord(BaseModel):
    """Base class for all on-disk records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    # Keys left out of the file entirely when their value is None.
    omit_when_none: ClassVar[frozenset[str]] = frozenset()

    def to_record(self) -> dict[str, Any]:
        """Serialize to the dict written to disk."""
        data = self.model_dump(by_alias=True, mode="json")
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in self.omit_when_none
        }

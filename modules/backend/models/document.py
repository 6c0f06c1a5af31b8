"""
Document Models.

A document is two records sharing one id: the content record (what the
editor loads and saves) and the metadata record (what listings read).
"""

import json
from typing import Any

from pydantic import Field

from modules.backend.models.base import StoredRecord

DEFAULT_TITLE = "Untitled Document"
DOCUMENT_TYPE = "document"


def default_content() -> dict[str, Any]:
    """Empty editor payload used when a document is created without content."""
    return {
        "body": {
            "dataStream": "",
            "textRuns": [],
            "paragraphs": [{"startIndex": 0}],
        },
        "documentStyle": {
            "pageSize": {"width": 595, "height": 842},
            "marginTop": 72,
            "marginBottom": 72,
            "marginRight": 90,
            "marginLeft": 90,
        },
    }


class DocumentContent(StoredRecord):
    """Content record: ``documents/<id>.json``."""

    id: str
    title: str
    content: dict[str, Any] = Field(default_factory=default_content)
    created_at: str
    modified_at: str

    def serialized_size(self) -> int:
        """Byte length of the compact JSON serialization of this record."""
        compact = json.dumps(self.to_record(), separators=(",", ":"), ensure_ascii=False)
        return len(compact.encode("utf-8"))


class DocumentMetadata(StoredRecord):
    """Metadata record: ``metadata/<id>.json``. No folderId means root."""

    omit_when_none = frozenset({"folderId"})

    id: str
    title: str
    created_at: str
    modified_at: str
    size: int = 0
    type: str = DOCUMENT_TYPE
    folder_id: str | None = None

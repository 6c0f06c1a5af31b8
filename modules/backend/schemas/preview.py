"""
Preview Schemas.
"""

from modules.backend.schemas.base import CamelModel, OperationResponse


class PreviewStats(CamelModel):
    total: int
    generated: int
    skipped: int
    errors: int


class GeneratePreviewsResponse(OperationResponse):
    stats: PreviewStats


class PreviewFailure(CamelModel):
    """A failed preview task attempt."""

    task_id: str
    task_name: str
    document_id: str | None = None
    attempt: int
    error: str
    failed_at: str


class PreviewFailuresResponse(CamelModel):
    failures: list[PreviewFailure]

"""
Previews API Endpoints.

Serving stored preview images, batch generation, and the preview task
failure log.
"""

from fastapi import APIRouter, Response

from modules.backend.core.dependencies import PreviewServiceDep, RequestId
from modules.backend.schemas.preview import (
    GeneratePreviewsResponse,
    PreviewFailure,
    PreviewFailuresResponse,
    PreviewStats,
)
from modules.backend.tasks.previews import get_recent_failures

router = APIRouter()

PREVIEW_CACHE_CONTROL = "public, max-age=3600"


@router.get(
    "/previews/failures",
    response_model=PreviewFailuresResponse,
    summary="Recent preview failures",
    description="Latest failed preview task attempts, newest first.",
)
async def list_preview_failures() -> PreviewFailuresResponse:
    """List recent preview task failures."""
    return PreviewFailuresResponse(
        failures=[PreviewFailure.model_validate(failure) for failure in get_recent_failures()]
    )


@router.get(
    "/previews/{filename}",
    summary="Get a preview image",
    description="Serve a stored .svg or .png preview.",
    response_class=Response,
)
async def get_preview(filename: str, service: PreviewServiceDep) -> Response:
    """Serve a preview file."""
    preview = await service.get_preview_file(filename)
    return Response(
        content=preview.content,
        media_type=preview.media_type,
        headers={
            "Cache-Control": PREVIEW_CACHE_CONTROL,
            "ETag": preview.etag,
        },
    )


@router.post(
    "/generate-previews",
    response_model=GeneratePreviewsResponse,
    summary="Generate missing previews",
    description="Render previews for every document that does not have one yet.",
)
async def generate_previews(
    service: PreviewServiceDep,
    request_id: RequestId,
) -> GeneratePreviewsResponse:
    """Generate all missing previews."""
    stats = await service.generate_missing()
    return GeneratePreviewsResponse(
        message="Preview generation complete",
        stats=PreviewStats(**stats),
    )

"""
API Router.

Aggregates all endpoint routers.
"""

from fastapi import APIRouter

from modules.backend.api.v1.endpoints import documents, folders, previews

router = APIRouter()

# Document endpoints
router.include_router(documents.router, prefix="/documents", tags=["documents"])

# Folder endpoints
router.include_router(folders.router, prefix="/folders", tags=["folders"])

# Preview endpoints
router.include_router(previews.router, tags=["previews"])

"""
unMute Backend: Stored File Route
===================================

GET /files/{path} serves profile pictures from STORAGE_ROOT. Paths that
resolve outside the root are rejected with 400; missing files are 404.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from unmute.schemas.common import ERROR_RESPONSES
from unmute.services.file_service import file_service

router = APIRouter(tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        400: ERROR_RESPONSES[400],
        404: ERROR_RESPONSES[404],
    },
    summary="Serve a stored file",
)
async def serve_file(file_path: str) -> FileResponse:
    path = file_service.resolve(file_path)
    # media type is guessed from the suffix
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )

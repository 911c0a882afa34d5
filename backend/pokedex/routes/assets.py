"""
Pokedex Backend — Static Asset Route
=====================================

What:  Serves files under the assets root at /assets/{path}.
Who:   Hit by clients following a record's `image` URI.

Security:
    - Path is resolved relative to the assets root and must stay inside it
    - Missing files are a 404 through the NotFoundError handler
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from pokedex.exceptions import NotFoundError, ValidationError

router = APIRouter(tags=["Assets"])


@router.get(
    "/assets/{file_path:path}",
    summary="Serve stored image assets",
    responses={
        200: {"description": "Asset file"},
        404: {"description": "File not found"},
    },
)
async def serve_asset(file_path: str, request: Request) -> FileResponse:
    assets_root: Path = request.app.state.assets_root
    full_path = (assets_root / file_path).resolve()

    if not full_path.is_relative_to(assets_root):
        raise ValidationError(message="Invalid file path", field="path")

    if not full_path.is_file():
        raise NotFoundError(resource="Asset", resource_id=file_path)

    # media type is guessed from the file extension
    return FileResponse(path=str(full_path), headers={"Cache-Control": "public, max-age=86400"})

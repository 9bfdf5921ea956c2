"""
Uploads Routes: 저장된 artifact 서빙

- GET /uploads/{file_name}            → 저장된 bytes
- GET /uploads/{file_name}?w=&h=      → 리사이즈 버전 (캐시)

SVG와 애니메이션 파일은 항상 원본 그대로 서빙.
"""

import asyncio
from pathlib import Path

from fastapi import APIRouter, Query, Request
from fastapi.responses import FileResponse

from vellum.app.context import get_context
from vellum.core.images import is_animated, resize_image
from vellum.domain.constants import VERBATIM_EXTENSIONS, get_mime_type
from vellum.domain.errors import DashboardError, ErrorCodes

router = APIRouter()

MAX_DIMENSION = 4000


def _artifact_path(uploads_dir: Path, file_name: str) -> Path:
    """
    Raises:
        DashboardError: UPLOAD_NOT_FOUND (없음, 숨김 파일, uploads_dir 밖)
    """
    path = uploads_dir / file_name
    if (
        file_name.startswith(".")
        or "/" in file_name
        or "\\" in file_name
        or path.resolve().parent != uploads_dir.resolve()
        or not path.is_file()
    ):
        raise DashboardError(ErrorCodes.UPLOAD_NOT_FOUND, file_name=file_name)
    return path


@router.get("/{file_name}")
async def serve_upload(
    request: Request,
    file_name: str,
    w: int | None = Query(None, ge=1, le=MAX_DIMENSION),
    h: int | None = Query(None, ge=1, le=MAX_DIMENSION),
) -> FileResponse:
    """저장된 artifact (w/h가 있으면 리사이즈)."""
    ctx = get_context(request)
    path = _artifact_path(ctx.uploads_dir, file_name)
    media_type = get_mime_type(file_name)

    if not (w or h) or path.suffix.lower() in VERBATIM_EXTENSIONS:
        return FileResponse(path, media_type=media_type)

    data = await asyncio.to_thread(path.read_bytes)
    if is_animated(data):
        return FileResponse(path, media_type=media_type)

    rendition = ctx.settings.cache_dir / f"{w or 0}x{h or 0}" / file_name
    if not rendition.exists():
        await asyncio.to_thread(
            resize_image, path, rendition, w, h, ctx.settings.jpeg_quality
        )
    return FileResponse(rendition, media_type=media_type)

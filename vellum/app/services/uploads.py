"""
요청 업로드: multipart UploadFile → 요청 범위 temp 파일

제출된 파일은 tmp_dir에 spool된 뒤 UploadedFile로 수집 단계에 전달되고,
요청이 끝나면 (수집 작업이 모두 끝난 뒤) 삭제됨.
"""

import logging
import tempfile
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from starlette.datastructures import UploadFile

from vellum.domain.schemas import UploadedFile

logger = logging.getLogger(__name__)


def split_form_items(items: Iterable[tuple[str, Any]]) -> tuple[list[tuple[str, Any]], list[tuple[str, UploadFile]]]:
    """
    일반 값과 파일 part 분리.

    비워둔 file input도 파일 이름 없는 part로 도착하므로
    버림.

    Returns:
        (값 쌍 목록, 파일 쌍 목록)
    """
    values: list[tuple[str, Any]] = []
    files: list[tuple[str, UploadFile]] = []
    for key, value in items:
        if isinstance(value, UploadFile):
            if value.filename:
                files.append((key, value))
        else:
            values.append((key, value))
    return values, files


@asynccontextmanager
async def spooled_uploads(
    files: list[tuple[str, UploadFile]],
    tmp_dir: Path,
) -> AsyncGenerator[list[UploadedFile], None]:
    """
    요청 동안 파일 part를 temp 파일로 spool.

    Usage:
        async with spooled_uploads(files, settings.tmp_dir) as uploads:
            content = await service.assemble(section, body, uploads)

    Args:
        files: (필드 이름, UploadFile) 쌍 목록
        tmp_dir: temp 디렉터리

    Yields:
        제출 순서의 UploadedFile 목록
    """
    tmp_dir.mkdir(parents=True, exist_ok=True)
    uploads: list[UploadedFile] = []
    try:
        for field_name, part in files:
            suffix = Path(part.filename or "").suffix
            with tempfile.NamedTemporaryFile(
                dir=tmp_dir, suffix=suffix, delete=False
            ) as f:
                f.write(await part.read())
                uploads.append(
                    UploadedFile(
                        field_name=field_name,
                        filename=part.filename or "",
                        path=Path(f.name),
                    )
                )
        yield uploads
    finally:
        for upload in uploads:
            try:
                upload.path.unlink()
            except OSError as e:
                logger.warning("Failed to remove temp upload %s: %s", upload.path, e)

"""
이미지 처리 (Pillow): 애니메이션 판별, 방향 보정 재인코딩, 리사이즈

규칙:
- 애니메이션 이미지는 재인코딩하지 않음 (Pillow는 첫 프레임만 남김)
- 재인코딩 = decode → exif_transpose → 원본 포맷으로 저장
- 저장된 파일에는 orientation 태그가 없음
- decode 실패는 raw 복사로 대체하지 않고 raise
- 모든 쓰기는 temp 파일 → os.replace (읽는 쪽은 이전 파일 또는 새 파일만 봄)
"""

import io
import logging
import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from vellum.domain.constants import DEFAULT_JPEG_QUALITY
from vellum.domain.errors import DashboardError, ErrorCodes

logger = logging.getLogger(__name__)

# Pillow가 읽을 수는 있지만 다른 포맷 이름으로 써야 하는 것들
_SAVE_FORMAT_ALIASES = {"MPO": "JPEG"}


# =============================================================================
# Atomic Output
# =============================================================================

@contextmanager
def atomic_output(dest: Path) -> Generator[Path, None, None]:
    """
    dest와 같은 디렉터리에 temp 파일을 만들고, 성공 시 dest로 교체.

    보장:
    - 원자성: dest는 항상 이전 내용 전체 또는 새 내용 전체
    - 실패 시 temp 파일 삭제 (예외는 그대로 전파)

    Args:
        dest: 최종 경로 (부모 디렉터리는 존재해야 함)

    Yields:
        내용을 쓸 temp 파일 경로
    """
    with tempfile.NamedTemporaryFile(dir=dest.parent, suffix=".tmp", delete=False) as f:
        tmp_path = Path(f.name)

    try:
        yield tmp_path
        os.replace(tmp_path, dest)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


# =============================================================================
# Detection / Re-encode
# =============================================================================

def is_animated(data: bytes) -> bool:
    """
    멀티 프레임 이미지 여부 (GIF, APNG, WebP, ...).

    읽을 수 없는 버퍼는 animated가 아님 (decode 단계에서 보고).

    Args:
        data: 파일 bytes

    Returns:
        프레임이 2개 이상이면 True
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            return bool(getattr(img, "is_animated", False))
    except (UnidentifiedImageError, OSError):
        return False


def _save_kwargs(fmt: str, jpeg_quality: int) -> dict:
    if fmt == "JPEG":
        return {"quality": jpeg_quality}
    return {}


def reencode_image(
    data: bytes,
    dest: Path,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> None:
    """
    decode → EXIF orientation 적용 → 원본 포맷으로 저장.

    Args:
        data: 원본 파일 bytes
        dest: 출력 경로
        jpeg_quality: JPEG 인코더 품질

    Raises:
        DashboardError: IMAGE_DECODE_FAILED, IMAGE_WRITE_FAILED
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            fmt = _SAVE_FORMAT_ALIASES.get(img.format or "", img.format or "PNG")
            oriented = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DashboardError(
            ErrorCodes.IMAGE_DECODE_FAILED,
            dest=dest.name,
            cause=e,
        ) from e

    try:
        with atomic_output(dest) as tmp_path:
            oriented.save(tmp_path, format=fmt, **_save_kwargs(fmt, jpeg_quality))
    except (OSError, ValueError, KeyError) as e:
        raise DashboardError(
            ErrorCodes.IMAGE_WRITE_FAILED,
            dest=dest.name,
            format=fmt,
            cause=e,
        ) from e


# =============================================================================
# Resize
# =============================================================================

def resize_image(
    src: Path,
    dest: Path,
    width: int | None = None,
    height: int | None = None,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> None:
    """
    저장된 artifact의 리사이즈 버전 생성.

    - width, height 모두: 정확히 채우도록 crop (ImageOps.fit)
    - 하나만: 비율 유지 스케일

    Args:
        src: 저장된 artifact
        dest: 리사이즈 결과 경로
        width: 목표 너비 (px)
        height: 목표 높이 (px)

    Raises:
        DashboardError: IMAGE_DECODE_FAILED
    """
    try:
        with Image.open(src) as img:
            img.load()
            fmt = _SAVE_FORMAT_ALIASES.get(img.format or "", img.format or "PNG")
            src_w, src_h = img.size

            if width and height:
                out = ImageOps.fit(img, (width, height), Image.Resampling.LANCZOS)
            elif width:
                new_h = max(1, round(src_h * width / src_w))
                out = img.resize((width, new_h), Image.Resampling.LANCZOS)
            elif height:
                new_w = max(1, round(src_w * height / src_h))
                out = img.resize((new_w, height), Image.Resampling.LANCZOS)
            else:
                out = img.copy()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DashboardError(
            ErrorCodes.IMAGE_DECODE_FAILED,
            src=src.name,
            cause=e,
        ) from e

    dest.parent.mkdir(parents=True, exist_ok=True)
    # 같은 rendition을 동시에 요청해도 partial 파일은 보이지 않음
    with atomic_output(dest) as tmp_path:
        out.save(tmp_path, format=fmt, **_save_kwargs(fmt, jpeg_quality))
    logger.debug("Resized %s to %sx%s", src.name, width, height)

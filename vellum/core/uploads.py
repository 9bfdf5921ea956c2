"""
업로드 수집: digest 파일명, verbatim/재인코딩 쓰기, 다중 값 슬롯

규칙:
- Artifact 이름 = snake_case(stem) + "-" + md5(bytes) + ext
  → 같은 bytes + 같은 base name ⇒ 같은 이름 (자연스러운 dedup)
- 애니메이션 이미지와 .svg는 byte 단위 그대로 복사
- 그 외는 EXIF orientation 적용 후 재인코딩
- 같은 이름 재저장은 temp 파일 → os.replace (읽는 쪽에 partial 파일 노출 없음)
- 다중 값 필드: 중복 skip → 빈 슬롯 채움 → 인덱스 슬롯 교체 → append
- 잘못된 필드 이름은 raise하지 않음 (없으면 append)
"""

import logging
import re
from pathlib import Path

from vellum.core.hashing import compute_file_hash
from vellum.core.images import atomic_output, is_animated, reencode_image
from vellum.domain.constants import (
    CONTENT_PARAM,
    DEFAULT_JPEG_QUALITY,
    VERBATIM_EXTENSIONS,
)
from vellum.domain.schemas import StoredArtifact, UploadedFile

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+|[^\W\d_A-Za-z]+")
_FIELD_RE = re.compile(rf"^{CONTENT_PARAM}\[([^\]]*)\]")
_SLOT_RE = re.compile(rf"^{CONTENT_PARAM}\[[^\]]*\]\[(\d*)\]")
_EXT_JUNK_RE = re.compile(r"[^A-Za-z0-9.]")


# =============================================================================
# Naming
# =============================================================================

def snake_case(value: str) -> str:
    """
    base name 정규화: 단어 분리 (camelCase, 숫자, 구분자) → 소문자 → "_" 연결.

    Examples:
        "My Photo" → "my_photo", "IMG-0042" → "img_0042", "heroBanner2" → "hero_banner_2"
    """
    return "_".join(word.lower() for word in _WORD_RE.findall(value))


def artifact_name(filename: str, checksum: str) -> str:
    """
    원본 파일명과 checksum으로 저장 이름 생성.

    Args:
        filename: 클라이언트가 보낸 파일명
        checksum: 내용 digest

    Returns:
        <snake_case stem>-<checksum><ext>
    """
    # 클라이언트 파일명에 디렉터리가 섞여 올 수 있음 ("C:\\x\\a.jpg", "../a.jpg")
    base = re.split(r"[\\/]", filename)[-1]
    path = Path(base)
    stem = snake_case(path.stem) or "file"
    ext = _EXT_JUNK_RE.sub("", path.suffix)
    return f"{stem}-{checksum}{ext}"


def file_digest(upload: UploadedFile) -> str:
    """
    업로드의 결정적 artifact 이름.

    Args:
        upload: 제출된 파일 (bytes는 upload.path에서 읽음)

    Returns:
        artifact 이름
    """
    return artifact_name(upload.filename, compute_file_hash(upload.path))


# =============================================================================
# Field Name Parsing
# =============================================================================

def parse_field_name(form_field: str) -> str | None:
    """
    multipart 필드 이름이 가리키는 content 필드.

    content[hero] → "hero", content[photos][2] → "photos", 그 외 → None
    """
    match = _FIELD_RE.match(form_field)
    return match.group(1) if match else None


def parse_slot_index(form_field: str) -> int | None:
    """
    다중 값 필드 이름이 가리키는 슬롯.

    content[photos][2] → 2, content[photos][] → None, 잘못된 형식 → None
    """
    match = _SLOT_RE.match(form_field)
    if not match or not match.group(1):
        return None
    return int(match.group(1))


# =============================================================================
# Writing
# =============================================================================

def write_artifact(
    upload: UploadedFile,
    dest: Path,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> bool:
    """
    업로드 하나를 목적지에 기록.

    보장:
    - 원자성: dest가 이미 있어도 읽는 쪽은 이전 내용 전체 또는 새 내용 전체만 봄

    Args:
        upload: 제출된 파일
        dest: 목적지 경로 (uploads_dir / artifact 이름)
        jpeg_quality: 재인코딩 시 JPEG 품질

    Returns:
        verbatim 복사면 True, 재인코딩이면 False

    Raises:
        DashboardError: IMAGE_DECODE_FAILED, IMAGE_WRITE_FAILED
    """
    data = upload.path.read_bytes()
    dest.parent.mkdir(parents=True, exist_ok=True)

    # Pillow는 SVG를 쓸 수 없고, 재인코딩하면 애니메이션 프레임이 사라짐
    if is_animated(data) or Path(upload.filename).suffix.lower() in VERBATIM_EXTENSIONS:
        with atomic_output(dest) as tmp_path:
            tmp_path.write_bytes(data)
        return True

    reencode_image(data, dest, jpeg_quality=jpeg_quality)
    return False


def store_artifact(
    upload: UploadedFile,
    file_name: str,
    uploads_dir: Path,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> StoredArtifact:
    """
    이미 계산된 artifact 이름으로 업로드 저장.

    Returns:
        StoredArtifact
    """
    dest = uploads_dir / file_name
    verbatim = write_artifact(upload, dest, jpeg_quality)
    logger.info(
        "Stored %s as %s (%s)",
        upload.filename,
        file_name,
        "verbatim" if verbatim else "re-encoded",
    )
    return StoredArtifact(name=file_name, path=dest, verbatim=verbatim)


def save_file(
    upload: UploadedFile,
    uploads_dir: Path,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> str:
    """
    업로드 하나 수집: digest로 이름을 정하고 기록.

    Args:
        upload: 제출된 파일
        uploads_dir: 영구 업로드 디렉터리
        jpeg_quality: 재인코딩 시 JPEG 품질

    Returns:
        artifact 이름 (/uploads/ 기준 상대 경로)
    """
    return store_artifact(upload, file_digest(upload), uploads_dir, jpeg_quality).name


# =============================================================================
# Multi-value Slots
# =============================================================================

def place_file(values: list[str], file_name: str, slot_index: int | None) -> bool:
    """
    다중 값 필드의 리스트에 artifact 이름 배치 (in place).

    순서:
    1. 이미 있음 → 변경 없음
    2. 첫 번째 빈 슬롯 (비워졌거나 추가된 그룹의 "") → 채움
    3. slot_index가 기존 슬롯을 가리킴 → 교체
    4. append

    Args:
        values: 현재 값 목록 (변경됨)
        file_name: artifact 이름
        slot_index: 폼 필드 이름에서 파싱한 슬롯, 없으면 None

    Returns:
        리스트가 바뀌었으면 True
    """
    if file_name in values:
        return False

    if "" in values:
        values[values.index("")] = file_name
    elif slot_index is not None and slot_index < len(values):
        values[slot_index] = file_name
    else:
        values.append(file_name)
    return True

"""
대시보드 테스트용 pytest fixture

테스트 구성:
- unit: directives, core (hashing/images/uploads/store/sections), app 헬퍼
- e2e: tmp_path 기반 대시보드에 대한 FastAPI TestClient
"""

import io
from pathlib import Path

import pytest
import yaml
from PIL import Image

from vellum.app.config import DashboardSettings
from vellum.core.sections import parse_sections
from vellum.domain.schemas import SectionSchema, UploadedFile

# Orientation의 EXIF 태그 id
ORIENTATION_TAG = 0x0112


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    """빈 uploads 디렉터리."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


# =============================================================================
# Section Fixtures
# =============================================================================

@pytest.fixture
def sections_definition() -> dict:
    """섹션 두 개: 단일 레코드 general, 다중 레코드 gallery."""
    return {
        "sections": {
            "general": {
                "fields": {
                    "title": {"type": "text"},
                    "hero": {"type": "image", "required": False, "width": 800},
                },
            },
            "gallery": {
                "multiple": True,
                "sortable": True,
                "fields": {
                    "caption": {"type": "text", "required": False},
                    "photos": {"type": "image", "multiple": True},
                },
            },
        },
    }


@pytest.fixture
def sections(sections_definition: dict) -> dict[str, SectionSchema]:
    """파싱된 섹션."""
    return parse_sections(sections_definition)


@pytest.fixture
def sections_path(tmp_path: Path, sections_definition: dict) -> Path:
    """tmp_path에 기록된 sections.yaml."""
    path = tmp_path / "sections.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(sections_definition, f, sort_keys=False)
    return path


@pytest.fixture
def settings(tmp_path: Path, sections_path: Path) -> DashboardSettings:
    """모든 디렉터리가 tmp_path 아래에 있는 설정."""
    data_dir = tmp_path / "data"
    return DashboardSettings(
        site_name="Test Site",
        uploads_dir=data_dir / "uploads",
        data_dir=data_dir,
        sections_path=sections_path,
        tmp_dir=data_dir / "tmp",
        cache_dir=data_dir / "cache",
        log_level="WARNING",
        lock_retry_interval=0.01,
        lock_max_retries=3,
    )


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def jpeg_bytes() -> bytes:
    """EXIF orientation 6 (표시 시 시계 방향 90° 회전) 태그가 붙은 40x20 JPEG."""
    img = Image.new("RGB", (40, 20), (200, 30, 30))
    exif = Image.Exif()
    exif[ORIENTATION_TAG] = 6
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """일반 10x10 PNG."""
    buf = io.BytesIO()
    Image.new("RGBA", (10, 10), (0, 128, 255, 255)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def animated_gif_bytes() -> bytes:
    """프레임 2개짜리 GIF."""
    frames = [Image.new("RGB", (8, 8), color) for color in ((255, 0, 0), (0, 0, 255))]
    buf = io.BytesIO()
    frames[0].save(
        buf,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=100,
        loop=0,
    )
    return buf.getvalue()


@pytest.fixture
def svg_bytes() -> bytes:
    """최소 SVG 문서."""
    return (
        b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
        b'<rect width="10" height="10" fill="red"/></svg>'
    )


@pytest.fixture
def make_upload(tmp_path: Path):
    """
    UploadedFile 팩토리.

    사용법:
        upload = make_upload("content[hero]", "photo.jpg", jpeg_bytes)
    """
    spool = tmp_path / "spool"
    spool.mkdir()
    counter = iter(range(1_000_000))

    def _make(field_name: str, filename: str, data: bytes) -> UploadedFile:
        path = spool / f"upload_{next(counter)}{Path(filename).suffix}"
        path.write_bytes(data)
        return UploadedFile(field_name=field_name, filename=filename, path=path)

    return _make

"""
Domain Constants: 대시보드 전역 상수

directive, 업로드 수집 코드, 라우트가 공유하는 URL prefix, 폼 파라미터 이름,
저장 파일 이름.
"""

import os

# =============================================================================
# URLs
# =============================================================================
# 저장된 artifact는 /uploads/<name>[?w=<n>&h=<n>]로 참조

UPLOADS_URL_PREFIX = "/uploads/"
DASHBOARD_URL_PREFIX = "/dashboard"

# =============================================================================
# Form Parameters (폼 파라미터)
# =============================================================================
# content[<field>]            → 단일 값
# content[<field>][<n>]       → 다중 값 필드의 슬롯 n
# content[<field>][]          → 새 슬롯 (append)
# _destroy[<field>][<n>]=on   → 슬롯 n 삭제 / 필드 비우기

CONTENT_PARAM = "content"
DESTROY_PARAM = "_destroy"
DESTROY_MARKER = "on"

# =============================================================================
# Sections & Records (섹션/레코드)
# =============================================================================

DEFAULT_SECTION_NAME = "general"
RECORDS_JSON_FILENAME = "records.json"
DEFAULT_CONFIG_FILENAME = "default.yaml"
CONFIG_ENV_VAR = "VELLUM_CONFIG"

# =============================================================================
# Uploads (업로드)
# =============================================================================
# 재인코딩하면 안 되는 파일 (Pillow는 SVG를 쓸 수 없음)

VERBATIM_EXTENSIONS = (".svg",)
DEFAULT_JPEG_QUALITY = 90

# =============================================================================
# MIME Types
# =============================================================================

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def get_mime_type(filename: str) -> str:
    """
    파일 이름으로 MIME type 결정.

    Args:
        filename: 파일 이름 (확장자 포함)

    Returns:
        MIME type (모르면 octet-stream)
    """
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")

"""
Core layer: 업로드 수집과 저장.

uploads 디렉터리나 records.json을 건드리는 코드는 모두 여기에 두고
보수적으로 유지.

역할:
- artifact 이름 생성/쓰기, 슬롯 배치, 레코드 저장소, 섹션 정의
"""

from .hashing import compute_content_hash, compute_file_hash
from .images import atomic_output, is_animated, reencode_image, resize_image
from .sections import content_sections, load_sections
from .store import RecordStore, atomic_write_json, store_lock
from .uploads import (
    file_digest,
    parse_field_name,
    parse_slot_index,
    place_file,
    save_file,
    store_artifact,
    snake_case,
)

__all__ = [
    # hashing
    "compute_file_hash",
    "compute_content_hash",
    # images
    "atomic_output",
    "is_animated",
    "reencode_image",
    "resize_image",
    # sections
    "load_sections",
    "content_sections",
    # store
    "RecordStore",
    "atomic_write_json",
    "store_lock",
    # uploads
    "file_digest",
    "parse_field_name",
    "parse_slot_index",
    "place_file",
    "save_file",
    "store_artifact",
    "snake_case",
]

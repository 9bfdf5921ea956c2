"""
대시보드 데이터 스키마

규칙:
- 필드 스키마 항목은 설정에서 로드된 뒤 불변
- content 값은 파일 이름 하나 또는 순서 있는 파일 이름 리스트
- 업로드 파일은 일시적: 요청 하나에서 한 번만 소비
- required 여부는 directive가 params에서 직접 읽음 (스키마에 별도 속성 없음)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

# =============================================================================
# Section Schemas
# =============================================================================

@dataclass(frozen=True)
class FieldSchema:
    """
    섹션의 필드 선언 하나.

    params에는 HTML 속성 (class, alt, width, height, required, placeholder)과
    옵션 (tag, multiple, default, label, help)이 함께 들어 있고,
    각 directive가 인식하는 키만 골라 씀.
    """
    name: str
    type: str = "text"
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def multiple(self) -> bool:
        return bool(self.params.get("multiple", False))

    @property
    def label(self) -> str:
        return str(self.params.get("label") or self.name.replace("_", " ").title())


@dataclass(frozen=True)
class SectionSchema:
    """
    content 섹션 (같은 필드 스키마를 공유하는 레코드 묶음).

    multiple=True 섹션은 레코드 여러 개 (예: gallery),
    그 외에는 레코드 하나.
    """
    name: str
    fields: Mapping[str, FieldSchema] = field(default_factory=dict)
    label: str = ""
    label_singular: str = ""
    multiple: bool = False
    sortable: bool = False
    priority: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        if not self.label:
            object.__setattr__(self, "label", self.name.replace("_", " ").title())
        if not self.label_singular:
            singular = self.label[:-1] if self.label.endswith("s") else self.label
            object.__setattr__(self, "label_singular", singular)

    @property
    def field_names(self) -> list[str]:
        return list(self.fields)


# =============================================================================
# Upload Schemas
# =============================================================================

@dataclass(frozen=True)
class UploadedFile:
    """
    제출된 파일 하나.

    field_name은 multipart 원본 이름 (예: content[photos][1]),
    path는 bytes를 담은 요청 범위 temp 파일.
    """
    field_name: str
    filename: str
    path: Path


@dataclass
class StoredArtifact:
    """업로드 하나를 uploads 디렉터리에 기록한 결과."""
    name: str
    path: Path
    verbatim: bool  # True: bytes 그대로 복사 (animated/SVG)


# =============================================================================
# Record Schemas
# =============================================================================

@dataclass
class Record:
    """저장된 레코드: 섹션 하나의 content 매핑."""
    id: int
    section: str
    content: dict[str, Any] = field(default_factory=dict)
    position: int = 0
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화."""
        return {
            "id": self.id,
            "section": self.section,
            "content": self.content,
            "position": self.position,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        return cls(
            id=int(data["id"]),
            section=data["section"],
            content=dict(data.get("content") or {}),
            position=int(data.get("position", 0)),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )

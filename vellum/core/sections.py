"""
섹션 정의: sections.yaml → SectionSchema

형식:
    sections:
      general:
        fields:
          title: {type: text}
          hero: {type: image, required: false, width: 800}
      gallery:
        multiple: true
        sortable: true
        fields:
          photos: {type: image, multiple: true}
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from vellum.domain.constants import DEFAULT_SECTION_NAME
from vellum.domain.errors import DashboardError, ErrorCodes
from vellum.domain.schemas import FieldSchema, SectionSchema

logger = logging.getLogger(__name__)


def _parse_field(name: str, raw: Any) -> FieldSchema:
    params = dict(raw or {})
    field_type = str(params.pop("type", "text") or "text")
    return FieldSchema(name=name, type=field_type, params=params)


def parse_sections(definition: dict[str, Any]) -> dict[str, SectionSchema]:
    """
    파싱된 정의로부터 섹션 스키마 생성.

    Args:
        definition: "sections" 키를 가진 매핑

    Returns:
        {섹션 이름: SectionSchema} (선언 순서)

    Raises:
        DashboardError: CONFIG_INVALID
    """
    sections_config = (definition or {}).get("sections") or {}
    if not isinstance(sections_config, dict):
        raise DashboardError(ErrorCodes.CONFIG_INVALID, key="sections")

    sections: dict[str, SectionSchema] = {}
    for name, raw in sections_config.items():
        raw = raw or {}
        fields_config = raw.get("fields") or {}
        if not isinstance(fields_config, dict):
            raise DashboardError(ErrorCodes.CONFIG_INVALID, section=name, key="fields")

        sections[name] = SectionSchema(
            name=name,
            fields={
                field_name: _parse_field(field_name, field_raw)
                for field_name, field_raw in fields_config.items()
            },
            label=raw.get("label", ""),
            label_singular=raw.get("label_singular", ""),
            multiple=bool(raw.get("multiple", False)),
            sortable=bool(raw.get("sortable", False)),
            priority=int(raw.get("priority", 0)),
        )

    return sections


def load_sections(definition_path: Path) -> dict[str, SectionSchema]:
    """
    sections.yaml에서 섹션 스키마 로드.

    Args:
        definition_path: sections.yaml 경로

    Returns:
        {섹션 이름: SectionSchema} (파일이 없으면 {})
    """
    if not definition_path.exists():
        logger.warning("Section definition not found: %s", definition_path)
        return {}

    with open(definition_path, encoding="utf-8") as f:
        definition = yaml.safe_load(f) or {}

    sections = parse_sections(definition)
    logger.info("Loaded %d sections from %s", len(sections), definition_path)
    return sections


def content_sections(sections: dict[str, SectionSchema]) -> list[SectionSchema]:
    """
    대시보드 내비게이션에 표시되는 섹션.

    필드가 없는 섹션은 제외. 순서: general 섹션 먼저,
    단일 레코드 → 다중 레코드, 그다음 priority, 이름.
    """
    visible = [s for s in sections.values() if s.fields]
    return sorted(
        visible,
        key=lambda s: (s.name != DEFAULT_SECTION_NAME, s.multiple, s.priority, s.name),
    )

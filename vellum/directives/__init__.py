"""
Directives: 교체 가능한 필드 타입 핸들러

각 directive는 input / render / preview를 제공하며, 필드에 선언된 타입으로
선택됨. 모르는 타입은 text로 fallback.
"""

from collections.abc import Mapping
from typing import Any

from vellum.domain.schemas import FieldSchema

from .base import BaseDirective, DirectiveConfig
from .image import ImageDirective
from .text import TextDirective

DIRECTIVES: dict[str, type[BaseDirective]] = {
    TextDirective.type_name: TextDirective,
    ImageDirective.type_name: ImageDirective,
}

DEFAULT_DIRECTIVE = TextDirective


def build_directive(
    field_type: str | None,
    params: Mapping[str, Any] | None = None,
) -> BaseDirective:
    """
    선언된 타입의 directive.

    Args:
        field_type: 선언된 타입 (None/모르는 타입 → text)
        params: 필드 선언의 params

    Returns:
        directive 인스턴스
    """
    directive_cls = DIRECTIVES.get((field_type or "").lower(), DEFAULT_DIRECTIVE)
    return directive_cls(params)


def directive_for(field: FieldSchema) -> BaseDirective:
    """섹션 필드의 directive."""
    return build_directive(field.type, field.params)


__all__ = [
    "BaseDirective",
    "DirectiveConfig",
    "TextDirective",
    "ImageDirective",
    "DIRECTIVES",
    "build_directive",
    "directive_for",
]

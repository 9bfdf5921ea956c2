"""Text directive: 한 줄 텍스트 content."""

from typing import Any, ClassVar

from .base import BaseDirective


class TextDirective(BaseDirective):
    """일반 텍스트; 타입 미선언/모르는 타입의 fallback이기도 함."""

    type_name: ClassVar[str] = "text"

    DEFAULT_ATTRS: ClassVar[dict[str, Any]] = {
        **BaseDirective.DEFAULT_ATTRS,
        "maxlength": "",
    }

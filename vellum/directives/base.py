"""
Directive 기본 클래스: 필드 스키마 항목 → 폼 컨트롤과 표시용 마크업

규칙:
- params는 타입이 인식하는 attrs/options만 남기고, 모르는 키는 에러 없이 버림
- 기본값: required=True, multiple=False
- directive는 자기 설정을 절대 변경하지 않음 (preview 포함)
- 마크업에 들어가는 값은 항상 HTML escape (작은따옴표 → &#39;)
- 값이 없을 때 options.default를 렌더링할지는 RENDERS_DEFAULT로 결정
"""

import html
import json
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar

# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class DirectiveConfig:
    """읽기 전용 attrs (HTML 속성)와 options (동작 스위치)."""
    attrs: Mapping[str, Any]
    options: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        default_attrs: Mapping[str, Any],
        default_options: Mapping[str, Any],
        params: Mapping[str, Any],
    ) -> "DirectiveConfig":
        """
        기본값 위에 params를 병합 (인식하는 키만 유지).

        Args:
            default_attrs: 인식하는 속성 키와 기본값
            default_options: 인식하는 옵션 키와 기본값
            params: 필드 선언의 params

        Returns:
            DirectiveConfig
        """
        attrs = {key: params.get(key, value) for key, value in default_attrs.items()}
        options = {key: params.get(key, value) for key, value in default_options.items()}
        return cls(attrs=MappingProxyType(attrs), options=MappingProxyType(options))


def escape(value: Any) -> str:
    """임의의 값을 HTML escape (None → "", 작은따옴표는 &#39;)."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True).replace("&#x27;", "&#39;")


# =============================================================================
# Base Directive
# =============================================================================

class BaseDirective:
    """
    directive 공통 동작; 일반 text input을 렌더링.

    하위 클래스는 single_input/render_single과
    DEFAULT_ATTRS / DEFAULT_OPTIONS 테이블을 override.
    """

    type_name: ClassVar[str] = "base"

    # 값이 없을 때 render/preview가 options.default를 대신 렌더링
    RENDERS_DEFAULT: ClassVar[bool] = True

    DEFAULT_ATTRS: ClassVar[dict[str, Any]] = {
        "required": True,
        "placeholder": "",
    }
    DEFAULT_OPTIONS: ClassVar[dict[str, Any]] = {
        "default": "",
        "label": "",
        "help": "",
        "multiple": False,
    }

    def __init__(self, params: Mapping[str, Any] | None = None):
        self.config = DirectiveConfig.build(
            self.DEFAULT_ATTRS, self.DEFAULT_OPTIONS, params or {}
        )

    @property
    def attrs(self) -> Mapping[str, Any]:
        return self.config.attrs

    @property
    def options(self) -> Mapping[str, Any]:
        return self.config.options

    @property
    def multiple(self) -> bool:
        return bool(self.options.get("multiple"))

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def input(self, name: str, value: Any = None) -> str:
        """
        필드 하나의 편집용 컨트롤.

        Args:
            name: 폼 필드 이름 (예: content[title])
            value: 저장된 값 (None이면 options.default)

        Returns:
            HTML
        """
        if self.multiple:
            return self.multiple_inputs(name, value)
        return self.single_input(name, self.options["default"] if value is None else value)

    def multiple_inputs(self, name: str, values: Any = None) -> str:
        """
        값마다 삭제 가능한 그룹 하나 + "Add new" adder.

        adder의 data-template에는 빈 그룹 하나 (이름 name[])가
        escape된 JSON으로 들어감 (프론트엔드가 복제).
        """
        groups = "".join(
            self.single_input(f"{name}[{index}]", value, removable=True)
            for index, value in enumerate(self._input_values(values))
        )
        template = json.dumps(self.single_input(f"{name}[]", "", removable=True))
        return (
            '<div class="multiple-input">'
            f"{groups}"
            f'<div class="adder button" data-template="{escape(template)}">Add new</div>'
            "</div>"
        )

    def single_input(self, name: str, value: Any = "", removable: bool = False) -> str:
        """text input; 삭제 가능한 그룹은 required가 아님."""
        return (
            f'<input type="text" name="{escape(name)}" value="{escape(value)}"'
            f"{self.html_attrs(required=not removable)}>"
        )

    def html_attrs(self, required: bool = True) -> str:
        """
        attrs → HTML 속성 문자열 (앞에 공백, 없으면 "").

        True → 값 없는 속성, falsy → 생략.
        """
        parts = []
        for key, value in self.attrs.items():
            if key == "required" and not required:
                continue
            if value is True:
                parts.append(key)
            elif value:
                parts.append(f'{key}="{escape(value)}"')
        return "".join(f" {part}" for part in parts)

    def _input_values(self, values: Any) -> list[Any]:
        if values is None:
            values = []
        elif not isinstance(values, list):
            values = [values]
        values = list(values)
        if not values:
            values.append(self.options["default"])
        return values

    # -------------------------------------------------------------------------
    # Render / Preview
    # -------------------------------------------------------------------------

    def render(self, value: Any = None) -> Any:
        """
        현재 값의 표시용 렌더링.

        Returns:
            str, 값이 없으면 None, multiple 필드는 list
        """
        return self._render(value, tag=bool(self.options.get("tag", True)))

    def preview(self, value: Any = None) -> Any:
        """render와 같지만 항상 tag 형태."""
        return self._render(value, tag=True)

    def _render(self, value: Any, tag: bool) -> Any:
        if self.multiple:
            if value is None:
                return []
            values = value if isinstance(value, list) else [value]
            rendered = (self.render_single(v, tag) for v in values)
            return [r for r in rendered if r is not None]

        if value is None and self.RENDERS_DEFAULT:
            value = self.options["default"]
        return self.render_single(value, tag)

    def render_single(self, value: Any, tag: bool = True) -> str | None:
        if value is None or value == "":
            return None
        return escape(value)

"""
Image directive: 이미지 업로드, 미리보기, 렌더링

Attrs:
- class, alt: <img> 태그에 그대로 복사
- width, height: <img> 속성 + ?w=/&h= 리사이즈 쿼리

Options:
- tag (True): <img> 태그 렌더링, False면 /uploads/ src만 반환
- multiple (False): 순서 있는 이미지 리스트를 담는 필드
- default: 편집 폼의 초기 값으로만 사용 (render/preview는 값이 없으면 None)
"""

from typing import Any, ClassVar

from vellum.domain.constants import CONTENT_PARAM, DESTROY_PARAM, UPLOADS_URL_PREFIX

from .base import BaseDirective, escape

# 렌더링된 <img> 태그에 복사되는 속성
TAG_ATTRS = ("class", "alt", "width", "height")


def _to_number(value: Any) -> int | None:
    try:
        return int(float(str(value)))
    except (TypeError, ValueError):
        return None


class ImageDirective(BaseDirective):
    """파일 선택 + hidden 값 input; <img> 렌더링."""

    type_name: ClassVar[str] = "image"

    # 값이 없는 이미지는 default가 있어도 렌더링하지 않음
    RENDERS_DEFAULT: ClassVar[bool] = False

    DEFAULT_ATTRS: ClassVar[dict[str, Any]] = {
        "required": True,
        "class": "",
        "alt": "",
        "width": "",
        "height": "",
    }
    DEFAULT_OPTIONS: ClassVar[dict[str, Any]] = {
        "default": "",
        "label": "",
        "help": "",
        "tag": True,
        "multiple": False,
    }

    def single_input(self, name: str, value: Any = "", removable: bool = False) -> str:
        """
        파일 선택 + 현재 값을 담은 hidden input.

        값이 있으면 인라인 미리보기를, 삭제 가능하면 삭제 체크박스
        (content[...] → _destroy[...])를 추가.
        """
        value = value or ""
        required = bool(self.attrs["required"]) and not removable

        inputs = (
            f'<input type="file" name="{escape(name)}" accept="image/*">'
            f'<input type="hidden" name="{escape(name)}" value="{escape(value)}">'
        )
        preview = (
            f'<img class="preview" src="{escape(UPLOADS_URL_PREFIX + str(value))}">'
            if value
            else ""
        )
        destroy = ""
        if preview and not required:
            destroy_name = name.replace(CONTENT_PARAM, DESTROY_PARAM, 1)
            destroy = (
                '<div class="ui checkbox">'
                f'<input type="checkbox" name="{escape(destroy_name)}">'
                "<label>Delete</label>"
                "</div>"
            )

        return f'<div class="previewable">{inputs}{preview}{destroy}</div>'

    def render_single(self, value: Any, tag: bool = True) -> str | None:
        if not value:
            return None

        src = f"{UPLOADS_URL_PREFIX}{value}{self.query_string}"
        if not tag:
            return src

        attrs = self.tag_attrs
        return f'<img src="{escape(src)}"{" " + attrs if attrs else ""}>'

    @property
    def tag_attrs(self) -> str:
        """class/alt/width/height → escape된 <img> 속성."""
        return " ".join(
            f'{key}="{escape(self.attrs[key])}"'
            for key in TAG_ATTRS
            if self.attrs.get(key)
        )

    @property
    def query_string(self) -> str:
        """width/height → ?w=<n>&h=<n> (둘 다 숫자가 아니면 "")."""
        parts = []
        for key in ("width", "height"):
            number = _to_number(self.attrs.get(key)) if self.attrs.get(key) else None
            if number:
                parts.append(f"{key[0]}={number}")
        return f"?{'&'.join(parts)}" if parts else ""

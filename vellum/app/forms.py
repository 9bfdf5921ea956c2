"""
폼 헬퍼: bracket 표기 파싱과 필드 마크업

파싱:
- content[title]=x            → {"content": {"title": "x"}}
- content[photos][1]=b        → {"content": {"photos": [None, "b"]}}
- content[photos][]=c         → 가장 큰 인덱스 다음에 append
- 숫자 인덱스는 위치 유지 (빈 자리는 None)
"""

import re
from collections.abc import Iterable
from typing import Any

from vellum.directives import directive_for
from vellum.directives.base import escape
from vellum.domain.constants import CONTENT_PARAM
from vellum.domain.schemas import FieldSchema

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")

# 이보다 큰 인덱스는 None으로 채우지 않고 압축
MAX_LIST_INDEX = 1000


# =============================================================================
# Bracket Notation
# =============================================================================

def split_key(key: str) -> list[str]:
    """content[photos][0] → ["content", "photos", "0"]; 파싱 불가한 키는 그대로."""
    match = _KEY_RE.match(key)
    if not match:
        return [key]
    return [match.group(1), *_SEGMENT_RE.findall(match.group(2))]


def _segment_key(container: dict, segment: str) -> str | int:
    if segment == "":
        indices = [k for k in container if isinstance(k, int)]
        return max(indices) + 1 if indices else 0
    if segment.isdigit():
        return int(segment)
    return segment


def _assign(container: dict, segments: list[str], value: Any) -> None:
    key = _segment_key(container, segments[0])
    if len(segments) == 1:
        container[key] = value
        return

    child = container.get(key)
    if not isinstance(child, dict):
        child = {}
        container[key] = child
    _assign(child, segments[1:], value)


def _finalize(node: Any) -> Any:
    if not isinstance(node, dict):
        return node

    node = {key: _finalize(value) for key, value in node.items()}
    if node and all(isinstance(key, int) for key in node):
        highest = max(node)
        if highest >= MAX_LIST_INDEX:
            return [node[key] for key in sorted(node)]
        return [node.get(index) for index in range(highest + 1)]
    return {str(key): value for key, value in node.items()}


def parse_nested_form(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """
    평평한 multipart/urlencoded 쌍 → 중첩 dict/list.

    Args:
        items: 제출 순서의 (이름, 값) 쌍

    Returns:
        중첩 구조 (중복 키는 나중 값 우선)
    """
    root: dict = {}
    for key, value in items:
        _assign(root, split_key(key), value)
    return {str(key): _finalize(value) for key, value in root.items()}


# =============================================================================
# Field Markup
# =============================================================================

def field_name(name: str) -> str:
    """content 필드의 폼 이름: title → content[title]."""
    return f"{CONTENT_PARAM}[{name}]"


def render_field(field: FieldSchema, value: Any = None, error: str | None = None) -> str:
    """
    content 필드 하나의 label, directive input, 도움말, 에러 메시지.

    Args:
        field: 섹션 필드 스키마
        value: 저장된 값 (None → directive default)
        error: 이 필드의 검증 메시지

    Returns:
        HTML
    """
    directive = directive_for(field)
    classes = ["field"]
    if directive.attrs.get("required") and not directive.multiple:
        classes.append("required")
    if error:
        classes.append("error")

    help_text = directive.options.get("help")
    parts = [
        f'<div class="{" ".join(classes)}">',
        f"<label>{escape(directive.options.get('label') or field.label)}</label>",
        directive.input(field_name(field.name), value),
    ]
    if help_text:
        parts.append(f'<small class="help">{escape(help_text)}</small>')
    if error:
        parts.append(f'<div class="ui pointing red basic label">{escape(error)}</div>')
    parts.append("</div>")
    return "".join(parts)

"""
test_base_directive.py - base/text directive 테스트

DoD:
- 모르는 params는 버림, 기본값 (required=True, multiple=False)은 override 가능
- input → value 속성이 전달된 값을 그대로 복원
- render/preview는 HTML escape (작은따옴표 → &#39;), render(None) → None / []
- base/text는 값이 없으면 default를 렌더링
- multiple input: 삭제 가능한 그룹 + 파싱 가능한 template의 "Add new" adder
- input/render/preview가 설정을 변경하지 않음
"""

import html
import json
import re

import pytest

from vellum.directives import (
    BaseDirective,
    ImageDirective,
    TextDirective,
    build_directive,
    directive_for,
)
from vellum.directives.base import DirectiveConfig, escape
from vellum.domain.schemas import FieldSchema

VALUE_RE = re.compile(r'value="([^"]*)"')
TEMPLATE_RE = re.compile(r'data-template="([^"]*)"')


@pytest.fixture
def vanilla() -> BaseDirective:
    return BaseDirective()


# =============================================================================
# Configuration
# =============================================================================

class TestConfiguration:
    """DirectiveConfig 생성."""

    def test_ignores_unknown_params(self):
        """모르는 키는 에러 없이 버림."""
        directive = BaseDirective({"junk": True})

        assert "junk" not in directive.attrs
        assert "junk" not in directive.options

    def test_required_by_default(self, vanilla: BaseDirective):
        assert vanilla.attrs["required"] is True

    def test_required_can_be_overridden(self):
        directive = BaseDirective({"required": False})

        assert not directive.attrs["required"]

    def test_default_value(self):
        """default 옵션은 render와 input 모두에 사용."""
        directive = BaseDirective({"default": "testing"})

        assert directive.render() == "testing"
        assert 'value="testing"' in directive.input("test")

    def test_single_valued_by_default(self, vanilla: BaseDirective):
        assert not vanilla.options["multiple"]
        assert not vanilla.multiple

    def test_accepts_multiple(self):
        directive = BaseDirective({"multiple": True})

        assert directive.options["multiple"] is True

    def test_config_is_read_only(self, vanilla: BaseDirective):
        with pytest.raises(TypeError):
            vanilla.attrs["required"] = False  # type: ignore[index]

    def test_build_keeps_declared_keys_only(self):
        config = DirectiveConfig.build(
            {"class": ""}, {"tag": True}, {"class": "x", "tag": False, "other": 1}
        )

        assert dict(config.attrs) == {"class": "x"}
        assert dict(config.options) == {"tag": False}


# =============================================================================
# HTML Attributes
# =============================================================================

class TestHtmlAttrs:
    """attrs → HTML 속성 문자열."""

    def test_renders_attribute_pairs(self):
        directive = BaseDirective({"placeholder": "test"})

        assert 'placeholder="test"' in directive.html_attrs()

    def test_true_is_bare_attribute(self, vanilla: BaseDirective):
        assert " required" in vanilla.html_attrs()
        assert 'required="' not in vanilla.html_attrs()

    def test_falsy_values_omitted(self):
        directive = BaseDirective({"required": False, "placeholder": ""})

        assert directive.html_attrs() == ""

    def test_attribute_values_escaped(self):
        directive = BaseDirective({"placeholder": '"><script>'})

        assert "<script>" not in directive.html_attrs()
        assert "&quot;&gt;&lt;script&gt;" in directive.html_attrs()


# =============================================================================
# Input
# =============================================================================

class TestInput:
    """input() 마크업."""

    def test_text_input_by_default(self, vanilla: BaseDirective):
        assert 'input type="text"' in vanilla.input("test")

    def test_field_name_in_markup(self, vanilla: BaseDirective):
        assert 'name="content[title]"' in vanilla.input("content[title]")

    @pytest.mark.parametrize("value", ["plain", "a & b", '<b>"quoted"</b>', "it's"])
    def test_value_round_trips(self, vanilla: BaseDirective, value: str):
        """value 속성을 unescape하면 전달한 값이 그대로 나옴."""
        markup = vanilla.input("content[title]", value)

        assert [html.unescape(v) for v in VALUE_RE.findall(markup)] == [value]

    def test_multiple_renders_add_button(self):
        directive = BaseDirective({"multiple": True})

        assert "Add new" in directive.input("test")

    def test_multiple_renders_one_group_per_value(self):
        directive = BaseDirective({"multiple": True})
        markup = directive.input("content[tags]", ["one", "two"])

        assert 'name="content[tags][0]" value="one"' in markup
        assert 'name="content[tags][1]" value="two"' in markup

    def test_multiple_empty_renders_one_default_group(self):
        directive = BaseDirective({"multiple": True, "default": "x"})
        markup = directive.input("content[tags]", None)

        assert 'name="content[tags][0]" value="x"' in markup

    def test_multiple_groups_are_not_required(self):
        directive = BaseDirective({"multiple": True})
        markup = directive.input("content[tags]", ["one"])

        assert "required" not in markup

    def test_adder_template_is_one_parseable_group(self):
        """data-template에는 name[] 이름의 빈 그룹 하나가 JSON으로 들어감."""
        directive = BaseDirective({"multiple": True})
        markup = directive.input("content[tags]", ["one"])

        template = json.loads(html.unescape(TEMPLATE_RE.search(markup).group(1)))

        assert template == directive.single_input("content[tags][]", "", removable=True)
        assert 'name="content[tags][]"' in template
        assert 'value=""' in template


# =============================================================================
# Render / Preview
# =============================================================================

class TestRender:
    """render() / preview()."""

    def test_escapes_html(self, vanilla: BaseDirective):
        assert vanilla.render("&<>\"'") == "&amp;&lt;&gt;&quot;&#39;"

    def test_preview_escapes_html(self, vanilla: BaseDirective):
        assert vanilla.preview("&<>\"'") == "&amp;&lt;&gt;&quot;&#39;"

    def test_absent_value_single(self, vanilla: BaseDirective):
        assert vanilla.render(None) is None
        assert vanilla.render("") is None

    def test_absent_value_multiple(self):
        directive = BaseDirective({"multiple": True})

        assert directive.render(None) == []

    def test_multiple_filters_empty_values(self):
        directive = BaseDirective({"multiple": True})

        assert directive.render(["a", "", "b"]) == ["a", "b"]

    def test_render_does_not_mutate_config(self):
        directive = BaseDirective({"multiple": True, "default": "x"})
        before = (dict(directive.attrs), dict(directive.options))

        directive.input("content[tags]", ["a"])
        directive.render(["a"])
        directive.preview(["a"])

        assert (dict(directive.attrs), dict(directive.options)) == before


class TestEscape:
    def test_none_is_empty(self):
        assert escape(None) == ""

    def test_non_strings_are_stringified(self):
        assert escape(100) == "100"

    def test_apostrophe_uses_decimal_entity(self):
        assert escape("can't") == "can&#39;t"
        assert escape("&#x27;") == "&amp;#x27;"


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:
    """선언된 타입으로 directive 조회."""

    def test_text_type(self):
        assert isinstance(build_directive("text"), TextDirective)

    def test_image_type(self):
        assert isinstance(build_directive("image", {"width": 10}), ImageDirective)

    def test_type_lookup_ignores_case(self):
        assert isinstance(build_directive("Image"), ImageDirective)

    @pytest.mark.parametrize("field_type", [None, "", "markdown"])
    def test_unknown_type_falls_back_to_text(self, field_type):
        assert isinstance(build_directive(field_type), TextDirective)

    def test_directive_for_field(self):
        field = FieldSchema(name="hero", type="image", params={"alt": "Hero"})
        directive = directive_for(field)

        assert isinstance(directive, ImageDirective)
        assert directive.attrs["alt"] == "Hero"

    def test_text_accepts_maxlength(self):
        directive = TextDirective({"maxlength": 40})

        assert 'maxlength="40"' in directive.input("content[title]")

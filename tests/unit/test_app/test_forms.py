"""
test_forms.py - bracket 표기 파싱과 필드 마크업 테스트

DoD:
- content[f]=v → 중첩 dict, 숫자 인덱스는 위치 유지 (빈 자리 None)
- [] 는 가장 큰 인덱스 다음에 append
- destroy 마커는 인덱스 유지 (압축 없음)
- render_field: label, required/error 클래스, 도움말, directive input
"""

from vellum.app.forms import field_name, parse_nested_form, render_field, split_key
from vellum.domain.schemas import FieldSchema


class TestSplitKey:
    def test_plain(self):
        assert split_key("title") == ["title"]

    def test_nested(self):
        assert split_key("content[photos][0]") == ["content", "photos", "0"]

    def test_empty_segment(self):
        assert split_key("content[photos][]") == ["content", "photos", ""]

    def test_unparseable_kept_whole(self):
        assert split_key("content[photos") == ["content[photos"]


class TestParseNestedForm:
    def test_single_values(self):
        body = parse_nested_form([("content[title]", "Home"), ("content[hero]", "a.jpg")])

        assert body == {"content": {"title": "Home", "hero": "a.jpg"}}

    def test_indexed_list(self):
        body = parse_nested_form(
            [("content[photos][0]", "a.jpg"), ("content[photos][1]", ""), ("content[photos][2]", "c.jpg")]
        )

        assert body["content"]["photos"] == ["a.jpg", "", "c.jpg"]

    def test_sparse_indices_keep_position(self):
        """_destroy[photos][2]=on 은 인덱스 2에 그대로."""
        body = parse_nested_form([("_destroy[photos][2]", "on")])

        assert body["_destroy"]["photos"] == [None, None, "on"]

    def test_append_segment(self):
        body = parse_nested_form(
            [("content[photos][0]", "a.jpg"), ("content[photos][]", "b.jpg"), ("content[photos][]", "c.jpg")]
        )

        assert body["content"]["photos"] == ["a.jpg", "b.jpg", "c.jpg"]

    def test_huge_index_compacted(self):
        body = parse_nested_form([("content[photos][5000]", "a.jpg")])

        assert body["content"]["photos"] == ["a.jpg"]

    def test_later_duplicate_wins(self):
        body = parse_nested_form([("content[title]", "one"), ("content[title]", "two")])

        assert body["content"]["title"] == "two"

    def test_numeric_root_key_stays_mapping(self):
        assert parse_nested_form([("0", "x")]) == {"0": "x"}

    def test_mixed_keys_stay_mapping(self):
        body = parse_nested_form([("content[0]", "x"), ("content[title]", "y")])

        assert body["content"] == {"0": "x", "title": "y"}


class TestRenderField:
    def test_field_name(self):
        assert field_name("title") == "content[title]"

    def test_required_text_field(self):
        markup = render_field(FieldSchema(name="page_title"))

        assert markup.startswith('<div class="field required">')
        assert "<label>Page Title</label>" in markup
        assert 'name="content[page_title]"' in markup

    def test_declared_label_and_help(self):
        field = FieldSchema(name="hero", type="image", params={"label": "Banner", "help": "Wide images"})

        markup = render_field(field, "hero.jpg")

        assert "<label>Banner</label>" in markup
        assert '<small class="help">Wide images</small>' in markup
        assert 'src="/uploads/hero.jpg"' in markup

    def test_error(self):
        markup = render_field(FieldSchema(name="title"), None, "can't be blank")

        assert 'class="field required error"' in markup
        assert "can&#39;t be blank" in markup

    def test_multiple_not_marked_required(self):
        field = FieldSchema(name="photos", type="image", params={"multiple": True})

        assert 'class="field"' in render_field(field, ["a.jpg"])

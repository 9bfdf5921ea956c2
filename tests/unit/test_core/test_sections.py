"""
test_sections.py - 섹션 정의 테스트

DoD:
- sections.yaml → SectionSchema (선언 순서, 필드 params 유지)
- label 미선언 시 이름에서 생성
- 내비게이션 순서: general → 단일 → 다중, 그다음 priority, 이름
- 잘못된 형태 → CONFIG_INVALID, 파일 없음 → {}
"""

from pathlib import Path

import pytest

from vellum.core.sections import content_sections, load_sections, parse_sections
from vellum.directives import directive_for
from vellum.domain.errors import DashboardError, ErrorCodes


class TestParseSections:
    def test_parses_fields(self, sections):
        general = sections["general"]

        assert general.field_names == ["title", "hero"]
        assert general.fields["hero"].type == "image"
        assert general.fields["hero"].params == {"required": False, "width": 800}
        assert not general.multiple

    def test_type_defaults_to_text(self):
        sections = parse_sections({"sections": {"about": {"fields": {"body": None}}}})

        assert sections["about"].fields["body"].type == "text"

    def test_section_flags(self, sections):
        gallery = sections["gallery"]

        assert gallery.multiple is True
        assert gallery.sortable is True
        assert gallery.fields["photos"].multiple is True

    def test_required_read_by_directive(self, sections):
        """required는 스키마가 아니라 directive attrs에서 결정 (기본 True)."""
        general = sections["general"]

        assert directive_for(general.fields["hero"]).attrs["required"] is False
        assert directive_for(general.fields["title"]).attrs["required"] is True

    def test_derived_labels(self, sections):
        assert sections["gallery"].label == "Gallery"
        assert sections["gallery"].label_singular == "Gallery"
        assert sections["general"].fields["title"].label == "Title"

    def test_singular_label_strips_plural(self):
        sections = parse_sections({"sections": {"team_members": {"multiple": True}}})

        assert sections["team_members"].label == "Team Members"
        assert sections["team_members"].label_singular == "Team Member"

    def test_declared_labels_win(self):
        sections = parse_sections(
            {"sections": {"news": {"label": "News", "label_singular": "Article"}}}
        )

        assert sections["news"].label_singular == "Article"

    def test_empty_definition(self):
        assert parse_sections({}) == {}

    def test_sections_not_a_mapping(self):
        with pytest.raises(DashboardError) as exc_info:
            parse_sections({"sections": ["general"]})

        assert exc_info.value.code == ErrorCodes.CONFIG_INVALID

    def test_fields_not_a_mapping(self):
        with pytest.raises(DashboardError) as exc_info:
            parse_sections({"sections": {"general": {"fields": ["title"]}}})

        assert exc_info.value.context["section"] == "general"


class TestLoadSections:
    def test_loads_yaml(self, sections_path: Path):
        sections = load_sections(sections_path)

        assert list(sections) == ["general", "gallery"]

    def test_missing_file(self, tmp_path: Path):
        assert load_sections(tmp_path / "nope.yaml") == {}

    def test_project_sections_file(self, project_root: Path):
        """배포되는 sections.yaml이 파싱됨."""
        sections = load_sections(project_root / "sections.yaml")

        assert "general" in sections


class TestContentSections:
    def test_navigation_order(self):
        sections = parse_sections(
            {
                "sections": {
                    "gallery": {"multiple": True, "fields": {"a": {}}},
                    "team": {"multiple": True, "priority": -1, "fields": {"a": {}}},
                    "contact": {"fields": {"a": {}}},
                    "general": {"fields": {"a": {}}},
                    "about": {"fields": {"a": {}}},
                }
            }
        )

        names = [s.name for s in content_sections(sections)]

        assert names == ["general", "about", "contact", "team", "gallery"]

    def test_skips_sections_without_fields(self):
        sections = parse_sections({"sections": {"empty": {}, "general": {"fields": {"a": {}}}}})

        assert [s.name for s in content_sections(sections)] == ["general"]

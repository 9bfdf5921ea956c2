"""
대시보드 context: 요청 핸들러에 명시적으로 주입되는 의존성 묶음

애플리케이션 lifespan에서 한 번 생성하고 app.state에서 읽음.
모듈 레벨의 가변 상태는 두지 않음.
"""

from dataclasses import dataclass
from pathlib import Path

from fastapi import Request

from vellum.app.config import DashboardSettings
from vellum.core.sections import content_sections, load_sections
from vellum.core.store import RecordStore
from vellum.domain.errors import DashboardError, ErrorCodes
from vellum.domain.schemas import SectionSchema


@dataclass
class DashboardContext:
    """설정, 섹션 스키마, 레코드 저장소."""
    settings: DashboardSettings
    sections: dict[str, SectionSchema]
    store: RecordStore

    @classmethod
    def from_settings(cls, settings: DashboardSettings) -> "DashboardContext":
        for directory in (settings.uploads_dir, settings.data_dir, settings.tmp_dir):
            directory.mkdir(parents=True, exist_ok=True)

        return cls(
            settings=settings,
            sections=load_sections(settings.sections_path),
            store=RecordStore(
                settings.data_dir,
                lock_retry_interval=settings.lock_retry_interval,
                lock_max_retries=settings.lock_max_retries,
            ),
        )

    @property
    def uploads_dir(self) -> Path:
        return self.settings.uploads_dir

    def get_section(self, name: str) -> SectionSchema:
        """
        Raises:
            DashboardError: SECTION_NOT_FOUND
        """
        section = self.sections.get(name)
        if section is None:
            raise DashboardError(ErrorCodes.SECTION_NOT_FOUND, section=name)
        return section

    def navigation(self) -> list[SectionSchema]:
        return content_sections(self.sections)


def get_context(request: Request) -> DashboardContext:
    """lifespan이 app에 저장한 context."""
    return request.app.state.context

"""
Content 조립: 제출된 폼 + 업로드 → 레코드 content

단계 (create/update 요청마다):
1. 섹션에 선언된 필드의 content[...] 값 선택
2. 업로드 동시 처리 (digest + 쓰기, 반환 전에 모두 join)
3. _destroy[...] 마커 적용 (다중 값: 인덱스 역순)

슬롯 배치는 이벤트 루프에서 제출 순서대로 실행되고,
digest 계산과 디스크 쓰기만 worker thread에서 실행됨.
하나가 실패해도 나머지 작업이 모두 끝난 뒤에 예외가 전파됨.
"""

import asyncio
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Any

from vellum.core.uploads import (
    file_digest,
    parse_field_name,
    parse_slot_index,
    place_file,
    store_artifact,
)
from vellum.directives import directive_for
from vellum.domain.constants import (
    CONTENT_PARAM,
    DEFAULT_JPEG_QUALITY,
    DESTROY_MARKER,
    DESTROY_PARAM,
)
from vellum.domain.schemas import FieldSchema, SectionSchema, StoredArtifact, UploadedFile

logger = logging.getLogger(__name__)

BLANK_MESSAGE = "can't be blank"


def _as_values(value: Any) -> list[str]:
    """다중 값 content → 문자열 리스트 (None 슬롯은 빈 문자열)."""
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return ["" if v is None else str(v) for v in value if not isinstance(v, (dict, list))]


def _normalize(field: FieldSchema, value: Any) -> Any:
    if field.multiple:
        return _as_values(value)
    if isinstance(value, (dict, list)):
        return None
    return value


async def join_all(*aws: Awaitable[Any]) -> list[Any]:
    """
    모든 작업이 끝날 때까지 기다린 뒤 결과를 순서대로 반환.

    실패한 작업이 있으면 나머지가 모두 끝난 다음 첫 번째 예외를 raise
    (실행 중인 쓰기를 남겨둔 채 요청이 끝나지 않음).

    Raises:
        제출 순서상 첫 번째로 실패한 작업의 예외
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def apply_destroys(section: SectionSchema, content: dict[str, Any], destroy: Any) -> None:
    """
    content에서 destroy 표시된 값 제거 (in place).

    - 다중 값 필드: 표시된 인덱스를 뒤에서부터 삭제
    - 단일 값 필드: 필드 자체를 제거

    Args:
        section: 섹션 스키마
        content: 조립된 content
        destroy: 파싱된 _destroy 매핑 (그 외 타입은 무시)
    """
    if not isinstance(destroy, dict):
        return

    for name, markers in destroy.items():
        field = section.fields.get(name)
        if field is None:
            continue

        if not field.multiple:
            content.pop(name, None)
            continue

        values = content.get(name)
        if not isinstance(values, list) or not isinstance(markers, list):
            continue
        # 뒤에서부터 지워야 앞쪽 인덱스가 유지됨
        for index in range(len(markers) - 1, -1, -1):
            if markers[index] == DESTROY_MARKER and index < len(values):
                del values[index]


def validate_content(section: SectionSchema, content: dict[str, Any]) -> dict[str, str]:
    """
    required 단일 값 필드는 값이 있어야 함.

    Returns:
        {필드 이름: 메시지} (유효하면 빈 dict)
    """
    errors: dict[str, str] = {}
    for name, field in section.fields.items():
        directive = directive_for(field)
        if directive.multiple or not directive.attrs.get("required"):
            continue
        if content.get(name) in (None, ""):
            errors[name] = BLANK_MESSAGE
    return errors


class ContentService:
    """
    제출 하나로부터 레코드 content 생성.

    업로드 디렉터리와 인코더 설정은 주입받고,
    요청 사이에 상태를 유지하지 않음.
    """

    def __init__(self, uploads_dir: Path, jpeg_quality: int = DEFAULT_JPEG_QUALITY):
        self.uploads_dir = uploads_dir
        self.jpeg_quality = jpeg_quality

    async def assemble(
        self,
        section: SectionSchema,
        body: dict[str, Any],
        uploads: list[UploadedFile],
    ) -> dict[str, Any]:
        """
        create/update 요청의 content.

        Args:
            section: 대상 섹션
            body: 파싱된 폼 (content[...], _destroy[...])
            uploads: 비어 있지 않은 제출 파일들

        Returns:
            content 매핑

        Raises:
            DashboardError: IMAGE_DECODE_FAILED, IMAGE_WRITE_FAILED
        """
        submitted = body.get(CONTENT_PARAM)
        if not isinstance(submitted, dict):
            submitted = {}

        content: dict[str, Any] = {
            name: _normalize(section.fields[name], value)
            for name, value in submitted.items()
            if name in section.fields
        }

        await self.ingest_uploads(section, content, uploads)
        apply_destroys(section, content, body.get(DESTROY_PARAM))
        return content

    async def ingest_uploads(
        self,
        section: SectionSchema,
        content: dict[str, Any],
        uploads: list[UploadedFile],
    ) -> list[StoredArtifact]:
        """
        업로드의 digest 계산, 배치, 쓰기 (content는 in place 갱신).

        Returns:
            이번 호출에서 기록한 artifact 목록

        Raises:
            DashboardError: 모든 쓰기가 끝난 뒤, 첫 번째 실패
        """
        targets: list[tuple[UploadedFile, FieldSchema]] = []
        for upload in uploads:
            name = parse_field_name(upload.field_name)
            field = section.fields.get(name) if name is not None else None
            if field is None:
                logger.debug("Ignoring upload for undeclared field %s", upload.field_name)
                continue
            targets.append((upload, field))

        if not targets:
            return []

        names = await join_all(
            *(asyncio.to_thread(file_digest, upload) for upload, _ in targets)
        )

        pending: dict[str, UploadedFile] = {}
        for (upload, field), file_name in zip(targets, names):
            if field.multiple:
                values = _as_values(content.get(field.name))
                content[field.name] = values
                if place_file(values, file_name, parse_slot_index(upload.field_name)):
                    pending.setdefault(file_name, upload)
            else:
                content[field.name] = file_name
                pending.setdefault(file_name, upload)

        return await join_all(
            *(
                asyncio.to_thread(
                    store_artifact, upload, file_name, self.uploads_dir, self.jpeg_quality
                )
                for file_name, upload in pending.items()
            )
        )

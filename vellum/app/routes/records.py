"""
Records Routes: 섹션 내비게이션과 레코드 CRUD

- GET  /dashboard                              → 첫 번째 content 섹션
- GET  /dashboard/sections/{name}              → new / index / edit 리다이렉트
- GET  /dashboard/sections/{name}/records      → 레코드 목록
- GET  /dashboard/sections/{name}/records/new  → 새 레코드 폼
- POST /dashboard/sections/{name}/records      → create
- POST /dashboard/sections/{name}/records/reorder
- GET  /dashboard/records/{id}                 → edit 리다이렉트
- GET  /dashboard/records/{id}/edit            → 편집 폼
- POST /dashboard/records/{id}                 → update
- GET  /dashboard/records/{id}/delete          → 삭제 확인 페이지
- POST /dashboard/records/{id}/delete          → delete
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from vellum.app.context import DashboardContext, get_context
from vellum.app.forms import parse_nested_form, render_field
from vellum.app.services.content import ContentService, validate_content
from vellum.app.services.uploads import split_form_items, spooled_uploads
from vellum.directives import directive_for
from vellum.domain.constants import DASHBOARD_URL_PREFIX
from vellum.domain.errors import DashboardError, ErrorCodes
from vellum.domain.schemas import Record, SectionSchema

logger = logging.getLogger(__name__)

_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

router = APIRouter()

# 목록 페이지에서 행마다 미리보기할 필드 수
INDEX_PREVIEW_FIELDS = 3


# =============================================================================
# URLs
# =============================================================================

def section_url(section: SectionSchema, suffix: str = "") -> str:
    return f"{DASHBOARD_URL_PREFIX}/sections/{section.name}{suffix}"


def record_url(record: Record, suffix: str = "") -> str:
    return f"{DASHBOARD_URL_PREFIX}/records/{record.id}{suffix}"


def after_save_url(section: SectionSchema, record: Record) -> str:
    """다중 레코드 섹션은 목록으로, 그 외는 폼에 머무름."""
    if section.multiple:
        return section_url(section, "/records")
    return record_url(record, "/edit")


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


# =============================================================================
# Rendering
# =============================================================================

def _page(
    request: Request,
    template: str,
    title: str,
    status_code: int = 200,
    **context: Any,
) -> HTMLResponse:
    ctx = get_context(request)
    return jinja_templates.TemplateResponse(
        request,
        template,
        {
            "title": title,
            "site_name": ctx.settings.site_name,
            "navigation": ctx.navigation(),
            "dashboard_url": DASHBOARD_URL_PREFIX,
            **context,
        },
        status_code=status_code,
    )


def _form_page(
    request: Request,
    section: SectionSchema,
    content: dict[str, Any],
    action: str,
    title: str,
    errors: dict[str, str] | None = None,
    record: Record | None = None,
) -> HTMLResponse:
    errors = errors or {}
    fields_html = [
        render_field(field, content.get(name), errors.get(name))
        for name, field in section.fields.items()
    ]
    return _page(
        request,
        "records/form.html",
        title,
        status_code=422 if errors else 200,
        section=section,
        record=record,
        action=action,
        fields_html=fields_html,
        errors=errors,
        delete_url=record_url(record, "/delete") if record else None,
    )


def _preview(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


async def _submitted_content(
    request: Request, ctx: DashboardContext, section: SectionSchema
) -> dict[str, Any]:
    form = await request.form()
    values, files = split_form_items(form.multi_items())
    body = parse_nested_form(values)

    service = ContentService(ctx.uploads_dir, ctx.settings.jpeg_quality)
    async with spooled_uploads(files, ctx.settings.tmp_dir) as uploads:
        return await service.assemble(section, body, uploads)


# =============================================================================
# Sections
# =============================================================================

@router.get("")
async def dashboard_root(request: Request) -> RedirectResponse:
    """첫 번째 content 섹션."""
    navigation = get_context(request).navigation()
    if not navigation:
        raise DashboardError(ErrorCodes.SECTION_NOT_FOUND, section="(none defined)")
    return _redirect(section_url(navigation[0]))


@router.get("/sections/{name}")
async def show_section(request: Request, name: str) -> RedirectResponse:
    """
    섹션 형태에 따른 리다이렉트:
    - 레코드 없음 → 새 레코드 폼
    - multiple → 목록
    - 그 외 → 단일 레코드 편집
    """
    ctx = get_context(request)
    section = ctx.get_section(name)
    records = ctx.store.list_records(section.name)

    if not records:
        return _redirect(section_url(section, "/records/new"))
    if section.multiple:
        return _redirect(section_url(section, "/records"))
    return _redirect(record_url(records[0], "/edit"))


# =============================================================================
# Records
# =============================================================================

@router.get("/sections/{name}/records", response_class=HTMLResponse)
async def list_records(request: Request, name: str) -> HTMLResponse:
    """앞쪽 필드 미리보기가 있는 레코드 목록."""
    ctx = get_context(request)
    section = ctx.get_section(name)
    fields = list(section.fields.values())[:INDEX_PREVIEW_FIELDS]
    directives = [directive_for(field) for field in fields]

    rows = [
        {
            "record": record,
            "edit_url": record_url(record, "/edit"),
            "cells": [
                _preview(directive.preview(record.content.get(field.name)))
                for field, directive in zip(fields, directives)
            ],
        }
        for record in ctx.store.list_records(section.name)
    ]

    return _page(
        request,
        "records/index.html",
        section.label,
        section=section,
        fields=fields,
        rows=rows,
        new_url=section_url(section, "/records/new"),
        table_action="draggable" if section.sortable else "sortable",
    )


@router.get("/sections/{name}/records/new", response_class=HTMLResponse)
async def new_record(request: Request, name: str) -> HTMLResponse:
    ctx = get_context(request)
    section = ctx.get_section(name)
    title = f"New {section.label_singular}" if section.multiple else section.label
    return _form_page(request, section, {}, section_url(section, "/records"), title)


@router.post("/sections/{name}/records", response_model=None)
async def create_record(request: Request, name: str) -> HTMLResponse | RedirectResponse:
    """레코드 생성; content가 유효하지 않으면 폼을 다시 렌더링 (422)."""
    ctx = get_context(request)
    section = ctx.get_section(name)
    content = await _submitted_content(request, ctx, section)

    errors = validate_content(section, content)
    if errors:
        title = f"New {section.label_singular}" if section.multiple else section.label
        return _form_page(
            request, section, content, section_url(section, "/records"), title, errors
        )

    record = ctx.store.create(section.name, content)
    return _redirect(after_save_url(section, record))


@router.post("/sections/{name}/records/reorder")
async def reorder_records(
    request: Request,
    name: str,
    record_id: int = Form(..., alias="id"),
    to: int = Form(...),
) -> dict[str, Any]:
    """sortable 섹션 안에서 레코드 이동."""
    ctx = get_context(request)
    section = ctx.get_section(name)
    record = ctx.store.get(record_id)
    if record.section != section.name:
        raise DashboardError(ErrorCodes.RECORD_NOT_FOUND, record_id=record_id, section=name)

    records = ctx.store.reorder(record_id, to)
    return {"order": [r.id for r in records]}


def _record_and_section(ctx: DashboardContext, record_id: int) -> tuple[Record, SectionSchema]:
    record = ctx.store.get(record_id)
    return record, ctx.get_section(record.section)


@router.get("/records/{record_id}")
async def show_record(request: Request, record_id: int) -> RedirectResponse:
    record, _ = _record_and_section(get_context(request), record_id)
    return _redirect(record_url(record, "/edit"))


@router.get("/records/{record_id}/edit", response_class=HTMLResponse)
async def edit_record(request: Request, record_id: int) -> HTMLResponse:
    record, section = _record_and_section(get_context(request), record_id)
    return _form_page(
        request,
        section,
        record.content,
        record_url(record),
        section.label_singular,
        record=record,
    )


@router.post("/records/{record_id}", response_model=None)
async def update_record(request: Request, record_id: int) -> HTMLResponse | RedirectResponse:
    """레코드 수정; content가 같으면 다시 쓰지 않음."""
    ctx = get_context(request)
    record, section = _record_and_section(ctx, record_id)
    content = await _submitted_content(request, ctx, section)

    errors = validate_content(section, content)
    if errors:
        return _form_page(
            request,
            section,
            content,
            record_url(record),
            section.label_singular,
            errors,
            record=record,
        )

    record, changed = ctx.store.update(record.id, content)
    if not changed:
        logger.debug("Record %s unchanged", record.id)
    return _redirect(after_save_url(section, record))


@router.get("/records/{record_id}/delete", response_class=HTMLResponse)
async def confirm_delete(request: Request, record_id: int) -> HTMLResponse:
    record, section = _record_and_section(get_context(request), record_id)
    return _page(
        request,
        "records/delete.html",
        f"Delete {section.label_singular}",
        section=section,
        record=record,
        action=record_url(record, "/delete"),
    )


@router.post("/records/{record_id}/delete")
async def delete_record(request: Request, record_id: int) -> RedirectResponse:
    ctx = get_context(request)
    record, section = _record_and_section(ctx, record_id)
    ctx.store.delete(record.id)
    return _redirect(section_url(section, "/records"))

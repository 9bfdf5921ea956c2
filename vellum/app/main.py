"""
FastAPI 애플리케이션 엔트리포인트

실행:
- dev: uvicorn vellum.app.main:app --reload
- prod: uvicorn vellum.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from vellum.app.config import DashboardSettings, load_settings
from vellum.app.context import DashboardContext
from vellum.app.routes import records, uploads
from vellum.core.logging import setup_logging
from vellum.domain.constants import DASHBOARD_URL_PREFIX, UPLOADS_URL_PREFIX
from vellum.domain.errors import DashboardError, status_for

logger = logging.getLogger(__name__)


# =============================================================================
# Error Handling
# =============================================================================


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """DashboardError → 에러 코드와 context를 담은 JSON 응답."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


# =============================================================================
# App Factory
# =============================================================================


def create_app(settings: DashboardSettings | None = None) -> FastAPI:
    """
    대시보드 애플리케이션 생성.

    Args:
        settings: 확정된 설정 (기본: 시작 시 default.yaml에서 로드)

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Startup: 설정, 로깅, 섹션, 레코드 저장소
        Shutdown: 해제할 리소스 없음
        """
        resolved = settings or load_settings()
        setup_logging(resolved.log_level)
        app.state.context = DashboardContext.from_settings(resolved)
        logger.info(
            "Dashboard ready: %d sections, uploads in %s",
            len(app.state.context.sections),
            resolved.uploads_dir,
        )
        yield

    app = FastAPI(
        title="Vellum Dashboard",
        description="Content dashboard: sections, records, and image uploads",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(DashboardError, dashboard_error_handler)

    app.include_router(records.router, prefix=DASHBOARD_URL_PREFIX, tags=["Dashboard"])
    app.include_router(uploads.router, prefix=UPLOADS_URL_PREFIX.rstrip("/"), tags=["Uploads"])

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(DASHBOARD_URL_PREFIX, status_code=303)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vellum.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )

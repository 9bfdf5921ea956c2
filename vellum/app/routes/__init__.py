"""
FastAPI Routes.

대시보드 페이지 (records) + 저장된 artifact 서빙 (uploads)
"""

from . import records, uploads

__all__ = ["records", "uploads"]

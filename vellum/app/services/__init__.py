"""
App services: content 조립과 요청 업로드 처리.
"""

from .content import ContentService, apply_destroys, join_all, validate_content
from .uploads import split_form_items, spooled_uploads

__all__ = [
    "ContentService",
    "apply_destroys",
    "join_all",
    "validate_content",
    "split_form_items",
    "spooled_uploads",
]

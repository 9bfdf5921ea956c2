"""Domain layer: 에러, 상수, 스키마."""

from .errors import DashboardError, ErrorCodes
from .schemas import (
    FieldSchema,
    Record,
    SectionSchema,
    StoredArtifact,
    UploadedFile,
)

__all__ = [
    "DashboardError",
    "ErrorCodes",
    "FieldSchema",
    "SectionSchema",
    "UploadedFile",
    "StoredArtifact",
    "Record",
]

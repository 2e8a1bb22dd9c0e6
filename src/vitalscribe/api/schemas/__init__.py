"""
API schemas.
"""

from .common import ApiResponse, ErrorResponse
from .interchange import BatchResultSchema, ImportIssueSchema

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "BatchResultSchema",
    "ImportIssueSchema",
]

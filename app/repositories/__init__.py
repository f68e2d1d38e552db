"""
Metadata repositories for uploaded files.
"""

from app.repositories.base import FileRecordRepository
from app.repositories.sql import SQLFileRecordRepository

__all__ = [
    "FileRecordRepository",
    "SQLFileRecordRepository",
]

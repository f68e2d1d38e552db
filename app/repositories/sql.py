"""
SQLAlchemy implementation of the file record repository.
"""
from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, RecordNotFoundError
from app.logging_config import setup_logging
from app.models.file_record import FileRecord
from app.repositories.base import FileRecordRepository
from app.utils.datetime import utc_now

logger = setup_logging()


class SQLFileRecordRepository(FileRecordRepository):
    """File record repository backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, record: FileRecord) -> FileRecord:
        now = utc_now()
        record.created_at = now
        record.uploaded_at = now
        if record.is_active is None:
            record.is_active = True

        try:
            self.db.add(record)
            self.db.commit()
            # 重新讀取資料庫產生的欄位（id等）
            self.db.refresh(record)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"Stored file name collision while adding record: {record.stored_file_name}"
            )
            raise ConflictError(record.stored_file_name) from e

        logger.info(f"File record added: {record.id} - {record.stored_file_name}")
        return record

    def get_by_id(self, record_id: int) -> FileRecord | None:
        return self.db.get(FileRecord, record_id)

    def get_by_stored_name(self, stored_file_name: str) -> FileRecord | None:
        return self.db.execute(
            select(FileRecord).where(FileRecord.stored_file_name == stored_file_name)
        ).scalar_one_or_none()

    def get_all_active(self) -> list[FileRecord]:
        stmt = self._active_newest_first()
        return list(self.db.execute(stmt).scalars().all())

    def get_by_user(self, user_id: str) -> list[FileRecord]:
        stmt = self._active_newest_first().where(FileRecord.uploaded_by_user == user_id)
        return list(self.db.execute(stmt).scalars().all())

    def get_recent(self, count: int = 10) -> list[FileRecord]:
        stmt = self._active_newest_first().limit(count)
        return list(self.db.execute(stmt).scalars().all())

    def search_by_title(self, search_term: str) -> list[FileRecord]:
        stmt = self._active_newest_first().where(
            FileRecord.title.icontains(search_term, autoescape=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def update(self, record: FileRecord) -> FileRecord:
        if record.id is None or self.db.get(FileRecord, record.id) is None:
            raise RecordNotFoundError(record.id if record.id is not None else "<unsaved>")

        merged = self.db.merge(record)
        merged.updated_at = utc_now()

        try:
            self.db.commit()
            self.db.refresh(merged)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(merged.stored_file_name) from e

        logger.info(f"File record updated: {merged.id} - {merged.stored_file_name}")
        return merged

    def soft_delete(self, record_id: int, updated_by: str | None = None) -> bool:
        record = self.get_by_id(record_id)
        if record is None:
            return False

        record.is_active = False
        record.updated_at = utc_now()
        if updated_by is not None:
            record.updated_by_user = updated_by
        self.db.commit()

        logger.info(f"File record soft deleted: {record_id}")
        return True

    def hard_delete(self, record_id: int) -> bool:
        record = self.get_by_id(record_id)
        if record is None:
            return False

        self.db.delete(record)
        self.db.commit()

        logger.info(f"File record deleted from database: {record_id}")
        return True

    def exists(self, record_id: int) -> bool:
        return self.db.execute(
            select(FileRecord.id).where(FileRecord.id == record_id)
        ).first() is not None

    def exists_by_stored_name(self, stored_file_name: str) -> bool:
        return self.db.execute(
            select(FileRecord.id).where(FileRecord.stored_file_name == stored_file_name)
        ).first() is not None

    def get_total_size_by_user(self, user_id: str) -> int:
        total = self.db.execute(
            select(func.coalesce(func.sum(FileRecord.file_size_in_bytes), 0)).where(
                FileRecord.uploaded_by_user == user_id,
                FileRecord.is_active.is_(True),
            )
        ).scalar_one()
        return int(total)

    def get_count_by_user(self, user_id: str) -> int:
        return self.db.execute(
            select(func.count(FileRecord.id)).where(
                FileRecord.uploaded_by_user == user_id,
                FileRecord.is_active.is_(True),
            )
        ).scalar_one()

    @staticmethod
    def _active_newest_first() -> Select:
        return (
            select(FileRecord)
            .where(FileRecord.is_active.is_(True))
            .order_by(FileRecord.uploaded_at.desc(), FileRecord.id.desc())
        )

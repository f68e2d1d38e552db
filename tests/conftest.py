import os

# 測試用設定必須在匯入app之前寫入環境變數
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_file_store.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, get_db
from app.dependencies.storage import get_storage
from app.exceptions import ConflictError, RecordNotFoundError
from app.main import app
from app.models.file_record import FileRecord
from app.repositories.base import FileRecordRepository
from app.storage.local import LocalStorageBackend
from app.utils.datetime import utc_now


class InMemoryFileRecordRepository(FileRecordRepository):
    """
    Dict-backed repository for service tests.

    Mirrors the SQL repository's semantics (unique stored names, soft delete,
    newest-first ordering) without a database.
    """

    def __init__(self):
        self.records: dict[int, FileRecord] = {}
        self._next_id = 1

    def add(self, record: FileRecord) -> FileRecord:
        if self.exists_by_stored_name(record.stored_file_name):
            raise ConflictError(record.stored_file_name)
        now = utc_now()
        record.id = self._next_id
        record.created_at = now
        record.uploaded_at = now
        if record.is_active is None:
            record.is_active = True
        self.records[record.id] = record
        self._next_id += 1
        return record

    def get_by_id(self, record_id: int) -> FileRecord | None:
        return self.records.get(record_id)

    def get_by_stored_name(self, stored_file_name: str) -> FileRecord | None:
        for record in self.records.values():
            if record.stored_file_name == stored_file_name:
                return record
        return None

    def get_all_active(self) -> list[FileRecord]:
        active = [r for r in self.records.values() if r.is_active]
        return sorted(active, key=lambda r: (r.uploaded_at, r.id), reverse=True)

    def get_by_user(self, user_id: str) -> list[FileRecord]:
        return [r for r in self.get_all_active() if r.uploaded_by_user == user_id]

    def get_recent(self, count: int = 10) -> list[FileRecord]:
        return self.get_all_active()[:count]

    def search_by_title(self, search_term: str) -> list[FileRecord]:
        term = search_term.lower()
        return [r for r in self.get_all_active() if term in r.title.lower()]

    def update(self, record: FileRecord) -> FileRecord:
        if record.id not in self.records:
            raise RecordNotFoundError(record.id)
        record.updated_at = utc_now()
        self.records[record.id] = record
        return record

    def soft_delete(self, record_id: int, updated_by: str | None = None) -> bool:
        record = self.records.get(record_id)
        if record is None:
            return False
        record.is_active = False
        record.updated_at = utc_now()
        if updated_by is not None:
            record.updated_by_user = updated_by
        return True

    def hard_delete(self, record_id: int) -> bool:
        return self.records.pop(record_id, None) is not None

    def exists(self, record_id: int) -> bool:
        return record_id in self.records

    def exists_by_stored_name(self, stored_file_name: str) -> bool:
        return self.get_by_stored_name(stored_file_name) is not None

    def get_total_size_by_user(self, user_id: str) -> int:
        return sum(r.file_size_in_bytes for r in self.get_by_user(user_id))

    def get_count_by_user(self, user_id: str) -> int:
        return len(self.get_by_user(user_id))


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Run Alembic migrations at the start of the test session."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.path.join(os.getcwd(), "alembic.ini"))

    # Run all migrations to head
    # This ensures migrations are tested and matches production environment
    command.upgrade(alembic_cfg, "head")

    yield

    command.downgrade(alembic_cfg, "base")


@pytest.fixture
def db():
    """Session for one test; every table is emptied afterwards."""
    session = SessionLocal()

    yield session

    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def storage(tmp_path):
    """Local storage rooted in a not-yet-existing directory under tmp_path."""
    return LocalStorageBackend(base_path=str(tmp_path / "files"))


@pytest.fixture
def repository():
    return InMemoryFileRecordRepository()


@pytest.fixture
def client(db, storage):
    """Test client with database and storage dependency overrides."""

    def override_get_db():
        yield db

    def override_get_storage():
        return storage

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = override_get_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

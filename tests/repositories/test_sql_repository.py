"""
Tests for the SQLAlchemy file record repository.
"""
import pytest

from app.exceptions import ConflictError, RecordNotFoundError
from app.models.file_record import FileRecord
from app.repositories.sql import SQLFileRecordRepository


def _make_record(stored_file_name: str, title: str = "Report", owner: str = "1", size: int = 100):
    return FileRecord(
        title=title,
        original_file_name="report.pdf",
        stored_file_name=stored_file_name,
        file_extension=".pdf",
        file_size_in_bytes=size,
        content_type="application/pdf",
        storage_path=f"/tmp/{stored_file_name}",
        file_hash="hash",
        uploaded_by_user=owner,
        ip_address="127.0.0.1",
    )


@pytest.fixture
def repo(db):
    return SQLFileRecordRepository(db)


def test_add_assigns_id_and_timestamps(repo):
    record = repo.add(_make_record("a.pdf"))

    assert record.id is not None
    assert record.is_active is True
    assert record.uploaded_at is not None
    assert record.created_at == record.uploaded_at


def test_add_duplicate_stored_name_raises_conflict(repo):
    repo.add(_make_record("a.pdf"))

    with pytest.raises(ConflictError):
        repo.add(_make_record("a.pdf"))

    # Session is still usable after the rollback
    assert repo.exists_by_stored_name("a.pdf") is True


def test_soft_deleted_record_hidden_from_queries(repo):
    kept = repo.add(_make_record("kept.pdf", title="Kept", size=10))
    gone = repo.add(_make_record("gone.pdf", title="Gone", size=20))

    assert repo.soft_delete(gone.id, updated_by="1") is True

    assert [r.id for r in repo.get_all_active()] == [kept.id]
    assert repo.get_by_user("1") == [kept]
    assert repo.get_recent(10) == [kept]
    assert repo.search_by_title("gone") == []
    assert repo.get_count_by_user("1") == 1
    assert repo.get_total_size_by_user("1") == 10

    # Direct lookups still see the inactive record
    deleted = repo.get_by_id(gone.id)
    assert deleted.is_active is False
    assert deleted.updated_by_user == "1"
    assert deleted.updated_at is not None
    assert repo.get_by_stored_name("gone.pdf").id == gone.id


def test_soft_delete_missing_record_returns_false(repo):
    assert repo.soft_delete(9999) is False


def test_hard_delete_removes_row(repo):
    record = repo.add(_make_record("a.pdf"))

    assert repo.hard_delete(record.id) is True
    assert repo.exists(record.id) is False
    assert repo.hard_delete(record.id) is False


def test_get_all_active_newest_first(repo):
    first = repo.add(_make_record("1.pdf"))
    second = repo.add(_make_record("2.pdf"))
    third = repo.add(_make_record("3.pdf"))

    assert [r.id for r in repo.get_all_active()] == [third.id, second.id, first.id]
    assert [r.id for r in repo.get_recent(2)] == [third.id, second.id]


def test_search_by_title_case_insensitive(repo):
    repo.add(_make_record("a.pdf", title="Quarterly REPORT"))
    repo.add(_make_record("b.pdf", title="Holiday photo"))

    results = repo.search_by_title("report")

    assert [r.title for r in results] == ["Quarterly REPORT"]


def test_search_treats_wildcards_literally(repo):
    repo.add(_make_record("a.pdf", title="100% done"))
    repo.add(_make_record("b.pdf", title="1000 done"))

    assert [r.title for r in repo.search_by_title("0%")] == ["100% done"]


def test_usage_by_user(repo):
    repo.add(_make_record("a.pdf", owner="1", size=100))
    repo.add(_make_record("b.pdf", owner="1", size=50))
    repo.add(_make_record("c.pdf", owner="2", size=1000))

    assert repo.get_count_by_user("1") == 2
    assert repo.get_total_size_by_user("1") == 150
    assert repo.get_total_size_by_user("nobody") == 0


def test_update_changes_fields(repo):
    record = repo.add(_make_record("a.pdf", title="Old"))
    record.title = "New"

    updated = repo.update(record)

    assert updated.title == "New"
    assert updated.updated_at is not None


def test_update_missing_record_raises(repo):
    record = _make_record("never-added.pdf")
    record.id = 9999

    with pytest.raises(RecordNotFoundError):
        repo.update(record)

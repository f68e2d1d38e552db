"""
Tests for the file API endpoints.

This module covers the full request path, including:
- Upload validation and status codes
- Ownership checks on info / serve / download / delete
- Soft delete visibility
- Listing, search, statistics and usage
- Administrator-only maintenance endpoints
"""
import os

import pytest
from fastapi import status

from app.services.auth import ensure_default_admin
from tests.constants import URLs

PASSWORD = "Password123"


def _get_jwt_with_email(client, email: str, password: str = PASSWORD) -> str:
    client.post(URLs.REGISTER, json={"email": email, "password": password})
    response = client.post(URLs.LOGIN, json={"email": email, "password": password})
    return response.json()["data"]["access_token"]


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _upload(
    client,
    token: str,
    file_name: str = "report.pdf",
    content: bytes = b"%PDF-1.4 test content",
    content_type: str = "application/pdf",
    title: str = "Quarterly report",
    **data,
):
    return client.post(
        URLs.FILES_UPLOAD,
        headers=_auth(token),
        data={"title": title, **data},
        files={"file": (file_name, content, content_type)},
    )


@pytest.fixture
def alice(client):
    return _get_jwt_with_email(client, "alice@example.com")


@pytest.fixture
def bob(client):
    return _get_jwt_with_email(client, "bob@example.com")


@pytest.fixture
def admin(client, db):
    ensure_default_admin(db, "admin@example.com", "Admin123")
    response = client.post(
        URLs.LOGIN, json={"email": "admin@example.com", "password": "Admin123"}
    )
    return response.json()["data"]["access_token"]


class TestUpload:
    def test_upload_success(self, client, alice):
        content = os.urandom(1024)

        response = _upload(client, alice, content=content, description="Q1 numbers")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["title"] == "Quarterly report"
        assert data["original_file_name"] == "report.pdf"
        assert data["file_extension"] == ".pdf"
        assert data["file_size_in_bytes"] == 1024
        assert data["description"] == "Q1 numbers"
        assert data["is_active"] is True
        assert data["stored_file_name"] != "report.pdf"
        assert "storage_path" not in data

    def test_upload_records_owner(self, client, alice):
        me = client.get(URLs.FILES_USAGE, headers=_auth(alice)).json()["data"]["user_id"]

        data = _upload(client, alice).json()["data"]

        assert data["uploaded_by_user"] == me

    def test_upload_without_token_returns_401(self, client):
        response = client.post(
            URLs.FILES_UPLOAD,
            data={"title": "x"},
            files={"file": ("report.pdf", b"data", "application/pdf")},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_upload_with_invalid_token_returns_401(self, client):
        response = _upload(client, "not-a-jwt")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unsupported_type_returns_415(self, client, alice, storage):
        response = _upload(client, alice, file_name="setup.exe", content_type="application/octet-stream")

        assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
        assert response.json()["success"] is False
        assert storage.list_files() == []
        assert client.get(URLs.FILES, headers=_auth(alice)).json()["data"]["files"] == []

    def test_empty_file_returns_400(self, client, alice):
        response = _upload(client, alice, content=b"")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_blank_title_returns_400(self, client, alice):
        response = _upload(client, alice, title="   ")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_too_large_returns_413(self, client, alice, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)

        response = _upload(client, alice, content=b"x" * 10)

        assert response.status_code == status.HTTP_413_CONTENT_TOO_LARGE

    def test_oversized_content_type_returns_400(self, client, alice, storage):
        response = _upload(client, alice, content_type="application/" + "x" * 100)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert storage.list_files() == []

    def test_same_stored_name_returns_409(self, client, alice, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "GENERATE_UNIQUE_NAMES", False)

        assert _upload(client, alice).status_code == status.HTTP_201_CREATED
        response = _upload(client, alice)

        assert response.status_code == status.HTTP_409_CONFLICT


class TestOwnership:
    def test_owner_can_get_info(self, client, alice):
        file_id = _upload(client, alice).json()["data"]["id"]

        response = client.get(URLs.FILE_INFO.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["exists"] is True
        assert data["serve_url"] == URLs.FILE_SERVE.format(file_id)
        assert data["download_url"] == URLs.FILE_DOWNLOAD.format(file_id)

    def test_non_owner_gets_403(self, client, alice, bob):
        file_id = _upload(client, alice).json()["data"]["id"]

        for url in (URLs.FILE_INFO, URLs.FILE_SERVE, URLs.FILE_DOWNLOAD):
            response = client.get(url.format(file_id), headers=_auth(bob))
            assert response.status_code == status.HTTP_403_FORBIDDEN
            assert response.json()["message"] == "You do not have access to this file"

        response = client.delete(URLs.FILE.format(file_id), headers=_auth(bob))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_can_access_any_file(self, client, alice, admin):
        file_id = _upload(client, alice).json()["data"]["id"]

        response = client.get(URLs.FILE_DOWNLOAD.format(file_id), headers=_auth(admin))

        assert response.status_code == status.HTTP_200_OK

    def test_no_token_returns_401_before_lookup(self, client):
        """Unauthenticated callers get 401 even for files that do not exist."""
        response = client.get(URLs.FILE_INFO.format(99999))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unknown_file_returns_404(self, client, alice):
        response = client.get(URLs.FILE_INFO.format(99999), headers=_auth(alice))
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestServeAndDownload:
    def test_download_streams_content_as_attachment(self, client, alice):
        content = os.urandom(200 * 1024)
        file_id = _upload(client, alice, content=content).json()["data"]["id"]

        response = client.get(URLs.FILE_DOWNLOAD.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_200_OK
        assert response.content == content
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="report.pdf"'

    def test_serve_is_inline(self, client, alice):
        file_id = _upload(client, alice, file_name="photo.png", content_type="image/png").json()["data"]["id"]

        response = client.get(URLs.FILE_SERVE.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"].startswith("inline")

    def test_non_ascii_file_name_is_encoded(self, client, alice):
        file_id = _upload(client, alice, file_name="報告.pdf").json()["data"]["id"]

        response = client.get(URLs.FILE_DOWNLOAD.format(file_id), headers=_auth(alice))

        assert "filename*=utf-8''" in response.headers["content-disposition"]

    def test_download_by_stored_name(self, client, alice, bob):
        stored_file_name = _upload(client, alice).json()["data"]["stored_file_name"]
        url = URLs.STORED_FILE_DOWNLOAD.format(stored_file_name)

        assert client.get(url, headers=_auth(alice)).status_code == status.HTTP_200_OK
        assert client.get(url, headers=_auth(bob)).status_code == status.HTTP_403_FORBIDDEN

    def test_missing_content_returns_404(self, client, alice, storage):
        data = _upload(client, alice).json()["data"]
        os.remove(storage.get_file_path(data["stored_file_name"]))

        response = client.get(URLs.FILE_DOWNLOAD.format(data["id"]), headers=_auth(alice))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "File not available"

        info = client.get(URLs.FILE_INFO.format(data["id"]), headers=_auth(alice)).json()["data"]
        assert info["exists"] is False


class TestDelete:
    def test_owner_delete_hides_file(self, client, alice, storage):
        data = _upload(client, alice).json()["data"]
        file_id = data["id"]

        response = client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {"id": file_id, "deleted": True}
        assert storage.file_exists(data["stored_file_name"]) is False

        for url in (URLs.FILE_INFO, URLs.FILE_DOWNLOAD):
            assert client.get(url.format(file_id), headers=_auth(alice)).status_code == 404
        stored_url = URLs.STORED_FILE_DOWNLOAD.format(data["stored_file_name"])
        assert client.get(stored_url, headers=_auth(alice)).status_code == 404
        assert client.get(URLs.FILES, headers=_auth(alice)).json()["data"]["files"] == []

    def test_delete_twice_returns_404(self, client, alice):
        file_id = _upload(client, alice).json()["data"]["id"]
        client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        response = client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_deleted_record_keeps_metadata(self, client, db, alice):
        from app.models.file_record import FileRecord

        file_id = _upload(client, alice).json()["data"]["id"]
        client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        db.expire_all()
        record = db.get(FileRecord, file_id)
        assert record.is_active is False
        assert record.updated_by_user == record.uploaded_by_user

    def test_purge_requires_admin(self, client, alice):
        file_id = _upload(client, alice).json()["data"]["id"]

        response = client.delete(URLs.FILE_PURGE.format(file_id), headers=_auth(alice))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_purge_removes_record(self, client, db, alice, admin):
        from app.models.file_record import FileRecord

        file_id = _upload(client, alice).json()["data"]["id"]
        client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        response = client.delete(URLs.FILE_PURGE.format(file_id), headers=_auth(admin))
        assert response.status_code == status.HTTP_200_OK

        db.expire_all()
        assert db.get(FileRecord, file_id) is None
        response = client.delete(URLs.FILE_PURGE.format(file_id), headers=_auth(admin))
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestListing:
    def test_list_files_with_statistics(self, client, alice, bob):
        _upload(client, alice, content=b"a" * 1024, title="First")
        _upload(client, bob, content=b"b" * 512, title="Second")

        response = client.get(URLs.FILES, headers=_auth(alice))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert [f["title"] for f in data["files"]] == ["Second", "First"]
        assert data["statistics"] == {
            "total_files": 2,
            "total_size_in_bytes": 1536,
            "total_size_formatted": "1.5 KB",
        }
        first = data["files"][0]
        assert first["info_url"] == URLs.FILE_INFO.format(first["id"])

    def test_list_requires_authentication(self, client):
        assert client.get(URLs.FILES).status_code == status.HTTP_401_UNAUTHORIZED

    def test_search_is_case_insensitive(self, client, alice):
        _upload(client, alice, title="Quarterly Report")
        _upload(client, alice, title="Holiday", file_name="photo.jpg", content_type="image/jpeg")

        response = client.get(URLs.FILES_SEARCH, params={"q": "report"}, headers=_auth(alice))

        assert [f["title"] for f in response.json()["data"]] == ["Quarterly Report"]

    def test_search_requires_term(self, client, alice):
        response = client.get(URLs.FILES_SEARCH, headers=_auth(alice))
        assert response.status_code == 422

    def test_recent_respects_count(self, client, alice):
        for i in range(3):
            _upload(client, alice, title=f"File {i}")

        response = client.get(URLs.FILES_RECENT, params={"count": 2}, headers=_auth(alice))

        assert [f["title"] for f in response.json()["data"]] == ["File 2", "File 1"]

    def test_stats(self, client, alice):
        _upload(client, alice, content=b"a" * 100, file_name="a.pdf")
        _upload(client, alice, content=b"b" * 300, file_name="b.pdf")
        _upload(client, alice, content=b"c" * 200, file_name="c.txt", content_type="text/plain")

        data = client.get(URLs.FILES_STATS, headers=_auth(alice)).json()["data"]

        assert data["total_active_files"] == 3
        assert data["total_size_in_bytes"] == 600
        assert data["average_file_size"] == 200
        assert data["largest_file_size"] == 300
        assert data["smallest_file_size"] == 100
        assert data["most_common_extensions"][0] == {"extension": ".pdf", "count": 2}

    def test_usage_counts_only_own_active_files(self, client, alice, bob):
        file_id = _upload(client, alice, content=b"a" * 100).json()["data"]["id"]
        _upload(client, alice, content=b"a" * 50)
        _upload(client, bob, content=b"b" * 1000)
        client.delete(URLs.FILE.format(file_id), headers=_auth(alice))

        data = client.get(URLs.FILES_USAGE, headers=_auth(alice)).json()["data"]

        assert data["file_count"] == 1
        assert data["total_size_in_bytes"] == 50
        assert data["total_size_formatted"] == "50 B"


class TestOrphans:
    def test_orphans_requires_admin(self, client, alice):
        response = client.get(URLs.FILES_ORPHANS, headers=_auth(alice))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_orphans_lists_files_without_record(self, client, alice, admin, storage):
        _upload(client, alice)
        with open(os.path.join(storage.base_path, "20250101_000000_deadbeef.pdf"), "wb") as f:
            f.write(b"stray")

        data = client.get(URLs.FILES_ORPHANS, headers=_auth(admin)).json()["data"]

        assert data == {"count": 1, "stored_file_names": ["20250101_000000_deadbeef.pdf"]}

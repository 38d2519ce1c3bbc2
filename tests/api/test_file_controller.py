"""
API tests for the file endpoints.
"""

import os
import uuid

import pytest

from app.core.security import TokenAuthenticator
from tests.conftest import PNG_BYTES


async def upload(client, name="photo.png", content=PNG_BYTES, content_type="image/png", **kwargs):
    return await client.post(
        "/api/files/upload", files={"file": (name, content, content_type)}, **kwargs
    )


@pytest.fixture
def other_headers(test_user_2, test_settings):
    token = TokenAuthenticator(test_settings).create_access_token(test_user_2.id)
    return {"Authorization": f"Bearer {token}"}


class TestUpload:
    """Test cases for POST /api/files/upload."""

    @pytest.mark.asyncio
    async def test_upload(self, authenticated_client, test_user, test_settings):
        response = await upload(authenticated_client)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        data = body["data"]
        assert data["name"] == "photo.png"
        assert data["size"] == len(PNG_BYTES)
        assert data["mime_type"] == "image/png"
        assert data["user_id"] == str(test_user.id)
        assert data["storage_provider"] == "local"
        assert os.path.isfile(data["path"])
        # Staged temp files are cleaned up
        assert os.listdir(test_settings.upload_temp_directory) == []

    @pytest.mark.asyncio
    async def test_upload_requires_auth(self, client):
        response = await upload(client)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_disallowed_type(self, authenticated_client, test_settings):
        response = await upload(
            authenticated_client, "run.sh", b"#!/bin/sh", "application/x-sh"
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "FILE_TYPE_NOT_ALLOWED"
        assert os.listdir(test_settings.upload_temp_directory) == []

    @pytest.mark.asyncio
    async def test_upload_over_quota(self, authenticated_client, test_settings):
        test_settings.storage_quota_bytes = len(PNG_BYTES) + 10
        first = await upload(authenticated_client)
        assert first.status_code == 201

        response = await upload(authenticated_client, "second.png")

        assert response.status_code == 413
        assert response.json()["error_code"] == "STORAGE_QUOTA_EXCEEDED"

    @pytest.mark.asyncio
    async def test_oversized_body_is_cut_off_while_staging(
        self, authenticated_client, test_settings
    ):
        test_settings.max_file_size = 16
        test_settings.max_video_size = 32

        response = await upload(authenticated_client, "big.png", b"x" * 100)

        assert response.status_code == 422
        assert response.json()["error_code"] == "FILE_TOO_LARGE"
        assert os.listdir(test_settings.upload_temp_directory) == []

    @pytest.mark.asyncio
    async def test_upload_without_file(self, authenticated_client):
        response = await authenticated_client.post("/api/files/upload")

        assert response.status_code == 422


class TestListAndGet:
    """Test cases for listing and fetching files."""

    @pytest.mark.asyncio
    async def test_list_omits_owner(self, authenticated_client):
        await upload(authenticated_client)
        await upload(authenticated_client, "doc.pdf", b"%PDF-1.4", "application/pdf")

        response = await authenticated_client.get("/api/files")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 2
        assert data["files"][0]["name"] == "doc.pdf"
        assert all("user_id" not in f for f in data["files"])

    @pytest.mark.asyncio
    async def test_list_by_type(self, authenticated_client):
        await upload(authenticated_client)
        await upload(authenticated_client, "doc.pdf", b"%PDF-1.4", "application/pdf")

        response = await authenticated_client.get("/api/files", params={"type": "image"})

        assert [f["name"] for f in response.json()["data"]["files"]] == ["photo.png"]

    @pytest.mark.asyncio
    async def test_list_unknown_type(self, authenticated_client):
        response = await authenticated_client.get("/api/files", params={"type": "music"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "FILE_VALIDATION_FAILED"

    @pytest.mark.asyncio
    async def test_get_file(self, authenticated_client, client, other_headers):
        file_id = (await upload(authenticated_client)).json()["data"]["id"]

        own = await authenticated_client.get(f"/api/files/{file_id}")
        assert own.status_code == 200
        assert own.json()["data"]["id"] == file_id

        other = await client.get(f"/api/files/{file_id}", headers=other_headers)
        assert other.status_code == 403
        assert other.json()["error_code"] == "FILE_NOT_OWNER"

        missing = await authenticated_client.get(f"/api/files/{uuid.uuid4()}")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "FILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_id(self, authenticated_client):
        response = await authenticated_client.get("/api/files/not-a-uuid")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stats(self, authenticated_client):
        await upload(authenticated_client)

        response = await authenticated_client.get("/api/files/stats")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_files"] == 1
        assert data["by_category"]["image"]["size"] == len(PNG_BYTES)


class TestDownload:
    @pytest.mark.asyncio
    async def test_download_url_local(self, authenticated_client):
        data = (await upload(authenticated_client)).json()["data"]

        response = await authenticated_client.get(f"/api/files/{data['id']}/download-url")

        assert response.status_code == 200
        assert response.json()["data"] == {"url": data["path"], "expires_in": None, "signed": False}

    @pytest.mark.asyncio
    async def test_download_streams_local_file(self, authenticated_client):
        file_id = (await upload(authenticated_client)).json()["data"]["id"]

        response = await authenticated_client.get(f"/api/files/{file_id}/download")

        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"
        assert "photo.png" in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_download_missing_content(self, authenticated_client):
        data = (await upload(authenticated_client)).json()["data"]
        os.remove(data["path"])

        response = await authenticated_client.get(f"/api/files/{data['id']}/download")

        assert response.status_code == 404
        assert response.json()["error_code"] == "FILE_CONTENT_MISSING"


class TestDelete:
    """Test cases for deleting and restoring files."""

    @pytest.mark.asyncio
    async def test_delete(self, authenticated_client):
        data = (await upload(authenticated_client)).json()["data"]

        response = await authenticated_client.delete(f"/api/files/{data['id']}")

        assert response.status_code == 200
        assert not os.path.exists(data["path"])
        assert (await authenticated_client.get(f"/api/files/{data['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_other_users_file(self, authenticated_client, client, other_headers):
        data = (await upload(authenticated_client)).json()["data"]

        response = await client.delete(f"/api/files/{data['id']}", headers=other_headers)

        assert response.status_code == 403
        assert os.path.exists(data["path"])

    @pytest.mark.asyncio
    async def test_delete_multiple(self, authenticated_client):
        ids = [(await upload(authenticated_client, f"{i}.png")).json()["data"]["id"] for i in range(2)]
        missing = str(uuid.uuid4())

        response = await authenticated_client.post(
            "/api/files/delete-multiple", json={"file_ids": ids + [missing]}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["deleted_count"] == 2
        assert data["failures"] == [{"file_id": missing, "reason": "not found"}]

    @pytest.mark.asyncio
    async def test_delete_multiple_requires_ids(self, authenticated_client):
        response = await authenticated_client.post("/api/files/delete-multiple", json={"file_ids": []})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_restore_after_delete_conflicts(self, authenticated_client):
        file_id = (await upload(authenticated_client)).json()["data"]["id"]
        await authenticated_client.delete(f"/api/files/{file_id}")

        response = await authenticated_client.post(f"/api/files/{file_id}/restore")

        assert response.status_code == 409
        assert response.json()["error_code"] == "FILE_RESTORE_FAILED"

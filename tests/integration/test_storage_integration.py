"""
Integration tests spanning the HTTP layer, FileService, the storage router
and the database, with the S3 client mocked at the boto3 boundary.
"""

import os
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError, EndpointConnectionError
from httpx import ASGITransport, AsyncClient

from app.core.config import StorageProviderEnum, get_settings
from app.core.dependencies import get_storage_service
from app.database import get_db
from app.main import app
from app.repositories import FileRepository, UserRepository
from app.storage.s3 import S3StorageProvider
from app.storage.service import StorageService
from tests.conftest import PNG_BYTES


def not_found() -> ClientError:
    return ClientError(
        {"Error": {"Code": "404"}, "ResponseMetadata": {"HTTPStatusCode": 404}}, "HeadObject"
    )


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://signed.example/object"
    return client


@pytest.fixture
def s3_settings(test_settings):
    return test_settings.model_copy(
        update={
            "storage_provider": StorageProviderEnum.s3,
            "s3_bucket_name": "bucket",
            "s3_region": "us-east-1",
            "aws_access_key_id": "key",
            "aws_secret_access_key": "secret",
        }
    )


@pytest.fixture
def s3_storage(s3_settings, s3_client):
    return StorageService(
        s3_settings, remote_provider=S3StorageProvider(s3_settings, client=s3_client)
    )


@pytest_asyncio.fixture
async def s3_api(test_db, s3_storage, s3_settings, auth_headers):
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_storage_service] = lambda: s3_storage
    app.dependency_overrides[get_settings] = lambda: s3_settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", headers=auth_headers
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def upload(client, name="photo.png"):
    return await client.post("/api/files/upload", files={"file": (name, PNG_BYTES, "image/png")})


class TestRemoteStorageFlow:
    """Upload, download and delete with S3 active."""

    @pytest.mark.asyncio
    async def test_upload_lands_in_bucket(self, s3_api, s3_client):
        response = await upload(s3_api)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["storage_provider"] == "s3"
        assert data["path"].startswith("https://bucket.s3.us-east-1.amazonaws.com/users/")
        s3_client.put_object.assert_called_once()

    @pytest.mark.asyncio
    async def test_download_redirects_to_signed_url(self, s3_api):
        file_id = (await upload(s3_api)).json()["data"]["id"]

        url_response = await s3_api.get(f"/api/files/{file_id}/download-url")
        assert url_response.json()["data"]["signed"] is True
        assert url_response.json()["data"]["expires_in"] == 3600

        download = await s3_api.get(f"/api/files/{file_id}/download")
        assert download.status_code == 307
        assert download.headers["location"] == "https://signed.example/object"

    @pytest.mark.asyncio
    async def test_fallback_upload_is_recorded_as_local(self, s3_api, s3_client, s3_storage):
        s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

        response = await upload(s3_api)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["storage_provider"] == "local"
        assert os.path.isfile(data["path"])

        # The bucket no longer knows the key; deletion still finds the local copy
        s3_client.head_object.side_effect = not_found()
        deleted = await s3_api.delete(f"/api/files/{data['id']}")

        assert deleted.status_code == 200
        assert not os.path.exists(data["path"])

    @pytest.mark.asyncio
    async def test_bucket_permission_error_keeps_metadata(self, s3_api, s3_client):
        file_id = (await upload(s3_api)).json()["data"]["id"]
        s3_client.head_object.side_effect = ClientError(
            {"Error": {"Code": "403"}, "ResponseMetadata": {"HTTPStatusCode": 403}}, "HeadObject"
        )

        response = await s3_api.delete(f"/api/files/{file_id}")

        assert response.status_code == 500
        assert response.json()["error_code"] == "FILE_DELETE_FAILED"
        s3_client.head_object.side_effect = None
        assert (await s3_api.get(f"/api/files/{file_id}")).status_code == 200


class TestAccountLifecycle:
    """Deleting an account hides its files; an operator can bring both back."""

    @pytest.mark.asyncio
    async def test_delete_account_then_restore(self, authenticated_client, test_db, test_user):
        data = (await upload(authenticated_client)).json()["data"]

        assert (await authenticated_client.delete("/api/auth/me")).status_code == 200
        assert os.path.isfile(data["path"])
        assert await FileRepository(test_db).get(data["id"]) is None

        await UserRepository(test_db).restore(test_user.id)
        restored = await authenticated_client.post(f"/api/files/{data['id']}/restore")

        assert restored.status_code == 200
        listing = await authenticated_client.get("/api/files")
        assert [f["id"] for f in listing.json()["data"]["files"]] == [data["id"]]

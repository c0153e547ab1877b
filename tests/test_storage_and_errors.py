import pytest
from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
)
from pymongo.errors import (
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from presx.adapters.storage.azure_blob_service import AzureBlobAudioStorage
from presx.application.services import backend_errors
from presx.application.services.backend_errors import describe_backend_error
from presx.core.config import AzureBlobSettings
from presx.domain.entities.recording import AudioBlob
from presx.domain.errors import PatientNotFoundError, StorageError

CONNECTION_STRING = (
    "DefaultEndpointsProtocol=https;AccountName=presxtest;"
    "AccountKey=dGVzdGtleXRlc3RrZXk=;EndpointSuffix=core.windows.net"
)


class FakeBlobClient:
    def __init__(self, container, blob, fail_with=None):
        self.container = container
        self.blob = blob
        self.url = f"https://presxtest.blob.core.windows.net/{container}/{blob}"
        self.fail_with = fail_with
        self.uploads = []
        self.deleted = False

    def upload_blob(self, data, overwrite=True, content_settings=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.uploads.append((data, overwrite, content_settings))

    def delete_blob(self):
        if self.fail_with is not None:
            raise self.fail_with
        self.deleted = True


class FakeServiceClient:
    account_name = "presxtest"

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.clients = []

    def get_blob_client(self, container, blob):
        client = FakeBlobClient(container, blob, self.fail_with)
        self.clients.append(client)
        return client


def make_storage(fail_with=None):
    storage = AzureBlobAudioStorage(AzureBlobSettings(connection_string=CONNECTION_STRING))
    storage._service_client = FakeServiceClient(fail_with)
    return storage


async def test_upload_recording_never_overwrites():
    storage = make_storage()
    stored = await storage.upload_recording(
        AudioBlob(data=b"webm-bytes", chunk_count=2), "consultation_p1_1700000000000.webm"
    )

    client = storage._service_client.clients[0]
    assert client.container == "voice"
    data, overwrite, content_settings = client.uploads[0]
    assert data == b"webm-bytes"
    assert overwrite is False
    assert content_settings.content_type == "audio/webm"
    assert content_settings.cache_control == "max-age=3600"
    assert stored.audio_url == client.url
    assert stored.file_size == len(b"webm-bytes")


async def test_upload_existing_recording_raises_storage_error():
    storage = make_storage(fail_with=ResourceExistsError("exists"))
    with pytest.raises(StorageError):
        await storage.upload_recording(AudioBlob(data=b"x", chunk_count=1), "dup.webm")


async def test_store_upload_path():
    storage = make_storage()
    path = await storage.store_upload(b"audio", "visit.mp3", "audio/mpeg")

    client = storage._service_client.clients[0]
    assert client.container == "uploads"
    assert path.startswith("audio/")
    assert path.endswith("-visit.mp3")
    assert path.split("/")[1].split("-")[0].isdigit()
    assert client.uploads[0][2].content_type == "audio/mpeg"


async def test_delete_recording():
    storage = make_storage()
    await storage.delete_recording("old.webm")
    assert storage._service_client.clients[0].deleted


async def test_delete_recording_failure():
    storage = make_storage(fail_with=ResourceNotFoundError("missing"))
    with pytest.raises(StorageError):
        await storage.delete_recording("missing.webm")


async def test_signed_url_has_sas_token():
    storage = make_storage()
    url = await storage.get_signed_url("rec.webm", expires_in=60)
    assert url.startswith("https://presxtest.blob.core.windows.net/voice/rec.webm?")
    assert "sig=" in url
    assert "sp=r" in url


async def test_missing_connection_string():
    storage = AzureBlobAudioStorage(AzureBlobSettings(connection_string=""))
    with pytest.raises(StorageError):
        await storage.store_upload(b"x", "a.mp3", "audio/mpeg")


def http_error(status):
    error = HttpResponseError(message=f"status {status}")
    error.status_code = status
    return error


@pytest.mark.parametrize(
    "error, expected",
    [
        (PatientNotFoundError("abc"), "Patient not found: abc"),
        (DuplicateKeyError("E11000"), backend_errors.ALREADY_EXISTS),
        (ServerSelectionTimeoutError("timeout"), backend_errors.UNAVAILABLE),
        (OperationFailure("denied", code=13), backend_errors.PERMISSION_DENIED),
        (OperationFailure("auth", code=18), backend_errors.UNAUTHENTICATED),
        (OperationFailure("full", code=14031), backend_errors.QUOTA_EXCEEDED),
        (OperationFailure("other", code=2), backend_errors.UNEXPECTED),
        (ClientAuthenticationError("bad key"), backend_errors.UNAUTHENTICATED),
        (ResourceNotFoundError("gone"), backend_errors.NOT_FOUND),
        (ServiceRequestError("dns"), backend_errors.UNAVAILABLE),
        (http_error(403), backend_errors.PERMISSION_DENIED),
        (http_error(429), backend_errors.QUOTA_EXCEEDED),
        (http_error(503), backend_errors.UNAVAILABLE),
        (http_error(418), backend_errors.UNEXPECTED),
        (RuntimeError("boom"), backend_errors.UNEXPECTED),
    ],
)
def test_describe_backend_error(error, expected):
    assert describe_backend_error(error) == expected


def test_user_messages():
    assert backend_errors.PERMISSION_DENIED == "You do not have permission to perform this action."
    assert backend_errors.QUOTA_EXCEEDED == "Quota exceeded. Please try again later."
    assert backend_errors.UNEXPECTED == "An unexpected error occurred. Please try again."

from __future__ import annotations

import pytest

from suite_gateway.clients import google_drive
from suite_gateway.clients.google_drive import FOLDER_MIME_TYPE, GoogleDriveClient


class _Call:
    def __init__(self, result):
        self._result = result

    def execute(self):
        return self._result


class FakeFiles:
    def __init__(self) -> None:
        self.created: list[dict] = []
        self.deleted: list[str] = []

    def create(self, **kwargs):
        self.created.append(kwargs)
        return _Call({"id": "new-id", "name": kwargs["body"]["name"]})

    def delete(self, fileId: str):
        self.deleted.append(fileId)
        return _Call("")


class FakeDriveService:
    def __init__(self) -> None:
        self.file_calls = FakeFiles()

    def files(self) -> FakeFiles:
        return self.file_calls


@pytest.fixture
def service(monkeypatch) -> FakeDriveService:
    fake = FakeDriveService()
    monkeypatch.setattr(google_drive, "build", lambda *args, **kwargs: fake)
    return fake


@pytest.mark.asyncio
async def test_create_folder_sets_folder_mime_type_and_parent(service) -> None:
    folder = await GoogleDriveClient().create_folder(object(), name="Reports", parent_id="p1")

    assert folder == {"id": "new-id", "name": "Reports"}
    body = service.file_calls.created[0]["body"]
    assert body == {"name": "Reports", "mimeType": FOLDER_MIME_TYPE, "parents": ["p1"]}


@pytest.mark.asyncio
async def test_upload_sends_content_as_media(service) -> None:
    await GoogleDriveClient().upload_file(
        object(), file_name="notes.txt", mime_type="text/plain", content=b"hello"
    )

    call = service.file_calls.created[0]
    assert call["body"] == {"name": "notes.txt"}
    media = call["media_body"]
    assert media.mimetype() == "text/plain"
    assert media.getbytes(0, 5) == b"hello"


@pytest.mark.asyncio
async def test_delete_file(service) -> None:
    await GoogleDriveClient().delete_file(object(), "f1")

    assert service.file_calls.deleted == ["f1"]

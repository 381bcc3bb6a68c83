"""Tests for the Drive v3 storage provider."""

import json
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from core.drive import (
    FOLDER_MIME,
    DriveClient,
    FolderHandle,
    folder_id_from_url,
    folder_url,
)
from core.errors import AccessError, NotFoundError


def http_error(status):
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": "boom"}}).encode()
    return HttpError(resp, content)


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def client(service):
    return DriveClient(service)


def folder_item(folder_id, name="N", **extra):
    item = {
        "id": folder_id,
        "name": name,
        "mimeType": FOLDER_MIME,
        "webViewLink": f"https://drive.google.com/drive/folders/{folder_id}",
        "createdTime": "2024-01-01T00:00:00.000Z",
        "modifiedTime": "2024-02-01T00:00:00.000Z",
    }
    item.update(extra)
    return item


class TestResolve:

    def test_returns_handle(self, client, service):
        service.files.return_value.get.return_value.execute.return_value = folder_item("abc", "Docs")

        handle = client.resolve("abc")

        assert handle == FolderHandle(
            id="abc",
            name="Docs",
            url="https://drive.google.com/drive/folders/abc",
            created_at="2024-01-01T00:00:00.000Z",
            modified_at="2024-02-01T00:00:00.000Z",
        )
        kwargs = service.files.return_value.get.call_args.kwargs
        assert kwargs["fileId"] == "abc"
        assert kwargs["supportsAllDrives"] is True

    def test_404_is_not_found(self, client, service):
        service.files.return_value.get.return_value.execute.side_effect = http_error(404)

        with pytest.raises(NotFoundError):
            client.resolve("gone")

    def test_403_is_access_error(self, client, service):
        service.files.return_value.get.return_value.execute.side_effect = http_error(403)

        with pytest.raises(AccessError) as exc_info:
            client.resolve("secret")
        assert not isinstance(exc_info.value, NotFoundError)

    def test_other_http_errors_propagate(self, client, service):
        service.files.return_value.get.return_value.execute.side_effect = http_error(500)

        with pytest.raises(HttpError):
            client.resolve("abc")

    def test_trashed_folder_is_not_found(self, client, service):
        service.files.return_value.get.return_value.execute.return_value = folder_item("abc", trashed=True)

        with pytest.raises(NotFoundError):
            client.resolve("abc")

    def test_file_is_not_a_folder(self, client, service):
        service.files.return_value.get.return_value.execute.return_value = folder_item(
            "abc", mimeType="application/pdf"
        )

        with pytest.raises(AccessError):
            client.resolve("abc")

    def test_missing_link_falls_back_to_folder_url(self, client, service):
        item = folder_item("abc")
        del item["webViewLink"]
        service.files.return_value.get.return_value.execute.return_value = item

        assert client.resolve("abc").url == folder_url("abc")


class TestListing:

    def test_children_follow_page_tokens(self, client, service):
        execute = service.files.return_value.list.return_value.execute
        execute.side_effect = [
            {"files": [folder_item("a", "A")], "nextPageToken": "t1"},
            {"files": [folder_item("b", "B")]},
        ]

        children = client.list_children(FolderHandle(id="p", name="P", url=""))

        assert [c.id for c in children] == ["a", "b"]
        calls = service.files.return_value.list.call_args_list
        assert calls[0].kwargs["pageToken"] is None
        assert calls[1].kwargs["pageToken"] == "t1"
        assert "'p' in parents" in calls[0].kwargs["q"]
        assert f"mimeType = '{FOLDER_MIME}'" in calls[0].kwargs["q"]

    def test_files_limit_stops_paging(self, client, service):
        execute = service.files.return_value.list.return_value.execute
        execute.side_effect = [
            {"files": [{"id": "f1", "name": "one.txt", "mimeType": "text/plain"}], "nextPageToken": "t1"},
        ]

        files = client.list_files(FolderHandle(id="p", name="P", url=""), limit=1)

        assert [f.id for f in files] == ["f1"]
        assert execute.call_count == 1
        assert service.files.return_value.list.call_args.kwargs["pageSize"] == 1

    def test_listing_denied(self, client, service):
        service.files.return_value.list.return_value.execute.side_effect = http_error(403)

        with pytest.raises(AccessError):
            client.list_children(FolderHandle(id="p", name="P", url=""))

    def test_trash_sets_flag(self, client, service):
        client.trash(FolderHandle(id="p", name="P", url=""))

        kwargs = service.files.return_value.update.call_args.kwargs
        assert kwargs["fileId"] == "p"
        assert kwargs["body"] == {"trashed": True}

    def test_trash_missing_folder(self, client, service):
        service.files.return_value.update.return_value.execute.side_effect = http_error(404)

        with pytest.raises(NotFoundError):
            client.trash(FolderHandle(id="p", name="P", url=""))


@pytest.mark.parametrize("value,expected", [
    ("https://drive.google.com/drive/folders/1AbCdEfGhIjK", "1AbCdEfGhIjK"),
    ("https://drive.google.com/drive/u/0/folders/1AbC-dEf_GhIjK?usp=sharing", "1AbC-dEf_GhIjK"),
    ("https://drive.google.com/open?id=1AbCdEfGhIjK", "1AbCdEfGhIjK"),
    ("1AbCdEfGhIjKlMn", "1AbCdEfGhIjKlMn"),
    ("", None),
    ("not a url", None),
])
def test_folder_id_from_url(value, expected):
    assert folder_id_from_url(value) == expected

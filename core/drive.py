"""
================================================================================
DRIVE.PY - GOOGLE DRIVE FOLDER ACCESS
================================================================================
PURPOSE: Thin storage-provider layer over the Drive v3 API. Resolves folder
         ids, lists child folders and files page by page, and moves folders
         to the trash.

FEATURES:
  - Service construction from the shared service-account credentials
  - Paginated listing (nextPageToken loop)
  - HTTP error mapping (404 -> NotFoundError, 401/403 -> AccessError)
  - Built-in request retries for 429/5xx responses
================================================================================
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

try:
    from .config import DRIVE_FOLDER_URL
    from .errors import AccessError, NotFoundError
    from .logger import log_msg
except ImportError:
    from core.config import DRIVE_FOLDER_URL
    from core.errors import AccessError, NotFoundError
    from core.logger import log_msg

FOLDER_MIME = "application/vnd.google-apps.folder"
FOLDER_FIELDS = "id,name,mimeType,webViewLink,createdTime,modifiedTime,trashed"
PAGE_SIZE = 1000
NUM_RETRIES = 3

_URL_ID_PATTERNS = [
    re.compile(r"/folders/([\w-]+)"),
    re.compile(r"[?&]id=([\w-]+)"),
]
_BARE_ID = re.compile(r"^[\w-]{10,}$")


@dataclass(frozen=True)
class FolderHandle:
    id: str
    name: str
    url: str
    created_at: str = ""
    modified_at: str = ""


@dataclass(frozen=True)
class FileHandle:
    id: str
    name: str
    mime_type: str = ""


def folder_url(folder_id: str) -> str:
    return f"{DRIVE_FOLDER_URL}{folder_id}"


def folder_id_from_url(url: str) -> Optional[str]:
    """
    PURPOSE: Extract a Drive folder id from a sheet URL cell.

    ARGS:
      url (str): Folder URL (or a bare folder id)

    RETURNS:
      str or None: Folder id, None if the cell holds no recognizable id
    """
    text = (url or "").strip()
    if not text:
        return None
    for pattern in _URL_ID_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    if _BARE_ID.match(text):
        return text
    return None


def build_drive_service(credentials):
    """Build a Drive v3 service object from google-auth credentials."""
    log_msg("[API] Building Google Drive service...")
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


def _handle_from_item(item: dict) -> FolderHandle:
    return FolderHandle(
        id=item["id"],
        name=item.get("name", ""),
        url=item.get("webViewLink") or folder_url(item["id"]),
        created_at=item.get("createdTime", ""),
        modified_at=item.get("modifiedTime", ""),
    )


def _map_http_error(folder_id: str, exc: HttpError):
    status = getattr(exc.resp, "status", None)
    reason = exc.reason if hasattr(exc, "reason") else str(exc)
    if status == 404:
        return NotFoundError(folder_id, f"not found ({reason})")
    if status in (401, 403):
        return AccessError(folder_id, f"access denied ({reason})")
    return None


class DriveClient:
    """
    PURPOSE: Storage provider used by the scanner and maintenance passes.

    ATTRIBUTES:
      service: googleapiclient Drive v3 resource
    """

    def __init__(self, service):
        self.service = service

    def resolve(self, folder_id: str) -> FolderHandle:
        """
        PURPOSE: Resolve a folder id to a handle.

        RAISES:
          NotFoundError: id unknown, deleted or trashed
          AccessError: permission denied or the id is not a folder
        """
        try:
            item = self.service.files().get(
                fileId=folder_id,
                fields=FOLDER_FIELDS,
                supportsAllDrives=True,
            ).execute(num_retries=NUM_RETRIES)
        except HttpError as exc:
            mapped = _map_http_error(folder_id, exc)
            if mapped is None:
                raise
            raise mapped from exc

        if item.get("trashed"):
            raise NotFoundError(folder_id, "folder is in the trash")
        if item.get("mimeType") != FOLDER_MIME:
            raise AccessError(folder_id, "not a folder")
        return _handle_from_item(item)

    def list_children(self, handle: FolderHandle) -> List[FolderHandle]:
        """Return the immediate (non-trashed) subfolders of ``handle``, sorted by name."""
        query = f"'{handle.id}' in parents and mimeType = '{FOLDER_MIME}' and trashed = false"
        items = self._list(handle.id, query, "id,name,webViewLink,createdTime,modifiedTime")
        return [_handle_from_item(item) for item in items]

    def list_files(self, handle: FolderHandle, limit: Optional[int] = None) -> List[FileHandle]:
        """Return the non-folder items directly inside ``handle``.

        ``limit`` stops paging early; ``list_files(h, limit=1)`` is the cheap
        "does it hold anything" probe used by the empty check.
        """
        query = f"'{handle.id}' in parents and mimeType != '{FOLDER_MIME}' and trashed = false"
        items = self._list(handle.id, query, "id,name,mimeType", limit=limit)
        return [
            FileHandle(id=item["id"], name=item.get("name", ""), mime_type=item.get("mimeType", ""))
            for item in items
        ]

    def trash(self, handle: FolderHandle) -> None:
        """Move a folder to the Drive trash."""
        try:
            self.service.files().update(
                fileId=handle.id,
                body={"trashed": True},
                supportsAllDrives=True,
            ).execute(num_retries=NUM_RETRIES)
        except HttpError as exc:
            mapped = _map_http_error(handle.id, exc)
            if mapped is None:
                raise
            raise mapped from exc

    def _list(self, folder_id: str, query: str, item_fields: str, limit: Optional[int] = None) -> List[dict]:
        results = []
        page_token = None
        page_size = min(limit, PAGE_SIZE) if limit else PAGE_SIZE

        while True:
            try:
                response = self.service.files().list(
                    q=query,
                    fields=f"nextPageToken, files({item_fields})",
                    orderBy="name",
                    pageSize=page_size,
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                ).execute(num_retries=NUM_RETRIES)
            except HttpError as exc:
                mapped = _map_http_error(folder_id, exc)
                if mapped is None:
                    raise
                raise mapped from exc

            results.extend(response.get("files", []))
            if limit and len(results) >= limit:
                return results[:limit]

            page_token = response.get("nextPageToken")
            if not page_token:
                return results

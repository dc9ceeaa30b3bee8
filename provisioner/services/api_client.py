"""HTTP adapter for the Drive v3 REST API (implements IRemoteStore)."""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Optional

import httpx

from ..errors import RemoteStoreError
from ..models import FOLDER_MIME_TYPE, FileMetadata, RemoteFile, RemoteFolder

logger = logging.getLogger(__name__)

FILE_FIELDS = "id,name,mimeType,parents,webContentLink,webViewLink"
FOLDER_FIELDS = "id,name,parents"
METADATA_FIELDS = "id,name,mimeType,parents,driveId,shortcutDetails"

# Only these are retried; POSTs create folders, files and permissions.
RETRYABLE_METHODS = frozenset({"GET", "HEAD"})


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveAPIClient:
    """
    Drive client adapter over httpx.

    One instance holds one authenticated session and is shared by every
    component; nothing mutates it after ``__aenter__``.
    """

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com",
        access_token: Optional[str] = None,
        timeout: float = 60,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._access_token = access_token
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def find_folder(self, name: str, parent_id: str) -> Optional[RemoteFolder]:
        query = (
            f"name = '{_escape_query_value(name)}' and mimeType = '{FOLDER_MIME_TYPE}' "
            f"and '{_escape_query_value(parent_id)}' in parents and trashed = false"
        )
        data = await self._request(
            "GET",
            "/drive/v3/files",
            operation="find_folder",
            params={
                "q": query,
                "fields": f"files({FOLDER_FIELDS})",
                "pageSize": 1,
                "includeItemsFromAllDrives": "true",
                "supportsAllDrives": "true",
            },
        )
        files = data.get("files") or []
        if not files:
            return None
        return RemoteFolder(id=files[0]["id"], name=files[0].get("name", name), parent_id=parent_id)

    async def create_folder(self, name: str, parent_id: str) -> RemoteFolder:
        data = await self._request(
            "POST",
            "/drive/v3/files",
            operation="create_folder",
            params={"fields": FOLDER_FIELDS, "supportsAllDrives": "true"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
        )
        return RemoteFolder(id=data["id"], name=data.get("name", name), parent_id=parent_id)

    async def create_file(
        self,
        name: str,
        parent_id: str,
        mime_type: str,
        payload: bytes,
    ) -> RemoteFile:
        boundary = f"provisioner-{uuid.uuid4().hex}"
        metadata = json.dumps({"name": name, "parents": [parent_id]}).encode("utf-8")
        body = b"".join([
            f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode(),
            metadata,
            f"\r\n--{boundary}\r\nContent-Type: {mime_type}\r\n\r\n".encode(),
            payload,
            f"\r\n--{boundary}--\r\n".encode(),
        ])
        data = await self._request(
            "POST",
            "/upload/drive/v3/files",
            operation="create_file",
            params={"uploadType": "multipart", "fields": FILE_FIELDS, "supportsAllDrives": "true"},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        parents = data.get("parents") or [parent_id]
        return RemoteFile(
            id=data["id"],
            name=data.get("name", name),
            mime_type=data.get("mimeType", mime_type),
            parent_id=parents[0],
            download_link=data.get("webContentLink"),
            view_link=data.get("webViewLink"),
        )

    async def get_file_metadata(self, file_id: str) -> FileMetadata:
        data = await self._request(
            "GET",
            f"/drive/v3/files/{file_id}",
            operation="get_file_metadata",
            params={"fields": METADATA_FIELDS, "supportsAllDrives": "true"},
        )
        shortcut = data.get("shortcutDetails") or {}
        return FileMetadata(
            id=data["id"],
            name=data.get("name", ""),
            mime_type=data.get("mimeType", ""),
            parents=tuple(data.get("parents") or ()),
            drive_id=data.get("driveId"),
            shortcut_target=shortcut.get("targetId"),
        )

    async def grant_public_read(self, file_id: str) -> None:
        await self._request(
            "POST",
            f"/drive/v3/files/{file_id}/permissions",
            operation="grant_public_read",
            params={"supportsAllDrives": "true"},
            json={"role": "reader", "type": "anyone"},
        )

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("DriveAPIClient not initialized. Use 'async with' context.")

        attempts = self._max_retries if method in RETRYABLE_METHODS else 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = await self._client.request(method, url, **kwargs)
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                if not last_attempt:
                    logger.debug(f"{operation}: transport error, retrying ({attempt + 1}): {exc}")
                    await asyncio.sleep(0.5 * (attempt + 1))
                    continue
                raise RemoteStoreError(
                    f"{operation} failed: {str(exc) or type(exc).__name__}",
                    status_code=503,
                    operation=operation,
                ) from exc

            if (response.status_code >= 500 or response.status_code == 429) and not last_attempt:
                logger.debug(f"{operation}: HTTP {response.status_code}, retrying ({attempt + 1})")
                await asyncio.sleep(0.5 * (attempt + 1))
                continue

            if response.status_code >= 400:
                raise RemoteStoreError(
                    f"Drive API error {response.status_code} on {operation}: {_error_detail(response)}",
                    status_code=response.status_code,
                    operation=operation,
                )

            if not response.content:
                return {}
            return response.json()

        raise RemoteStoreError(
            f"{operation} failed after {attempts} attempts", operation=operation
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or json.dumps(error)
    return str(error or body)

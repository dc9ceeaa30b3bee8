"""Shared fixtures: an in-memory remote store."""
import asyncio
import itertools
from typing import Dict, List, Optional, Set, Tuple

import pytest

from provisioner.errors import RemoteStoreError
from provisioner.models import FOLDER_MIME_TYPE, FileMetadata, RemoteFile, RemoteFolder


class FakeRemoteStore:
    """
    In-memory IRemoteStore.

    Records every call in ``calls`` and the (start, end) loop time of each
    create_file in ``upload_spans``. ``delay`` yields to the event loop inside
    every call so concurrent callers interleave.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.folders: Dict[str, RemoteFolder] = {}
        self.files: Dict[str, RemoteFile] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.upload_spans: Dict[str, Tuple[float, float]] = {}
        self.granted: List[str] = []
        self.fail_uploads: Set[str] = set()
        self.fail_grants: Set[str] = set()
        self.fail_find: Optional[Exception] = None
        self.upload_delays: Dict[str, float] = {}
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    async def _pause(self, seconds: Optional[float] = None):
        await asyncio.sleep(self.delay if seconds is None else seconds)

    def add_folder(self, name: str, parent_id: str) -> RemoteFolder:
        folder = RemoteFolder(id=self._next_id("folder-"), name=name, parent_id=parent_id)
        self.folders[folder.id] = folder
        return folder

    def children(self, parent_id: str, name: Optional[str] = None) -> List[RemoteFolder]:
        return [
            f for f in self.folders.values()
            if f.parent_id == parent_id and (name is None or f.name == name)
        ]

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def find_folder(self, name: str, parent_id: str) -> Optional[RemoteFolder]:
        self.calls.append(("find_folder", (name, parent_id)))
        await self._pause()
        if self.fail_find:
            raise self.fail_find
        matches = self.children(parent_id, name)
        return matches[0] if matches else None

    async def create_folder(self, name: str, parent_id: str) -> RemoteFolder:
        self.calls.append(("create_folder", (name, parent_id)))
        await self._pause()
        return self.add_folder(name, parent_id)

    async def create_file(self, name: str, parent_id: str, mime_type: str, payload: bytes) -> RemoteFile:
        self.calls.append(("create_file", (name, parent_id)))
        loop = asyncio.get_running_loop()
        start = loop.time()
        await self._pause(self.upload_delays.get(name))
        if name in self.fail_uploads:
            self.upload_spans[name] = (start, loop.time())
            raise RemoteStoreError(f"quota exceeded for {name}", status_code=403)
        file = RemoteFile(
            id=self._next_id("file-"),
            name=name,
            mime_type=mime_type,
            parent_id=parent_id,
            download_link=f"https://drive.example/download/{name}",
            view_link=f"https://drive.example/view/{name}",
        )
        self.files[file.id] = file
        self.upload_spans[name] = (start, loop.time())
        return file

    async def get_file_metadata(self, file_id: str) -> FileMetadata:
        self.calls.append(("get_file_metadata", (file_id,)))
        await self._pause()
        if file_id in self.folders:
            folder = self.folders[file_id]
            return FileMetadata(folder.id, folder.name, FOLDER_MIME_TYPE, (folder.parent_id,))
        if file_id in self.files:
            file = self.files[file_id]
            return FileMetadata(file.id, file.name, file.mime_type, (file.parent_id,))
        raise RemoteStoreError(f"File not found: {file_id}", status_code=404)

    async def grant_public_read(self, file_id: str) -> None:
        self.calls.append(("grant_public_read", (file_id,)))
        await self._pause()
        file = self.files.get(file_id)
        if file_id in self.fail_grants or (file and file.name in self.fail_grants):
            raise RemoteStoreError(f"permission denied for {file_id}", status_code=403)
        self.granted.append(file_id)


@pytest.fixture
def store():
    return FakeRemoteStore()


@pytest.fixture
def slow_store():
    return FakeRemoteStore(delay=0.01)


@pytest.fixture
def store_factory():
    return FakeRemoteStore

"""
Protocols (Interfaces) for Dependency Inversion.

The remote store is an external collaborator: every component receives an
``IRemoteStore`` through its constructor so tests can substitute a fake.
"""
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .models import FileMetadata, RemoteFile, RemoteFolder


@runtime_checkable
class IRemoteStore(Protocol):
    """Interface for remote hierarchical store operations."""

    async def find_folder(self, name: str, parent_id: str) -> Optional[RemoteFolder]:
        """Find a non-trashed folder named exactly ``name`` under ``parent_id``."""
        ...

    async def create_folder(self, name: str, parent_id: str) -> RemoteFolder:
        """Create folder."""
        ...

    async def create_file(
        self,
        name: str,
        parent_id: str,
        mime_type: str,
        payload: bytes,
    ) -> RemoteFile:
        """Upload file content into ``parent_id``."""
        ...

    async def get_file_metadata(self, file_id: str) -> FileMetadata:
        """Get metadata including parents and type."""
        ...

    async def grant_public_read(self, file_id: str) -> None:
        """Grant anyone-with-link read access."""
        ...


class IClock(Protocol):
    """Callable returning the current instant."""

    def __call__(self) -> datetime:
        ...

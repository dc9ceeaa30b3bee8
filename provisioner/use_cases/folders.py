"""Use cases for folder provisioning."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..errors import ConfigurationError, ValidationError
from ..models import FileMetadata, FolderTreeSpec, RemoteFolder
from ..protocols import IClock, IRemoteStore
from ..services.deadline import DEFAULT_DEADLINE, with_deadline
from ..services.folders import FolderResolver, FolderTreeBuilder
from ..services.naming import DEFAULT_TIMEZONE, day_folder_name


class ResolveDayFolderUseCase:
    """Find or create today's ``DD-MM-YYYY`` folder under a parent."""

    def __init__(
        self,
        resolver: FolderResolver,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Optional[IClock] = None,
    ):
        self._resolver = resolver
        self._timezone = timezone
        self._clock = clock

    def folder_name(self) -> str:
        return day_folder_name(self._clock, self._timezone)

    async def execute(self, parent_id: str) -> RemoteFolder:
        name = self.folder_name()
        folder_id = await self._resolver.resolve(name, parent_id)
        return RemoteFolder(id=folder_id, name=name, parent_id=parent_id)


class CreateFolderStructureUseCase:
    """Create a whole folder tree from a ``{"name", "children"}`` structure."""

    def __init__(self, tree_builder: FolderTreeBuilder, main_folder_id: Optional[str] = None):
        self._tree_builder = tree_builder
        self._main_folder_id = main_folder_id

    async def execute(self, structure: Mapping[str, Any], parent_id: Optional[str] = None) -> str:
        if not structure or not isinstance(structure, Mapping) or not structure.get("name"):
            raise ValidationError("Missing a valid structure", fields=["structure"])
        spec = FolderTreeSpec.from_dict(structure)

        root = parent_id or self._main_folder_id
        if not root:
            raise ConfigurationError("Main folder id (DRIVE_ID) is not configured", key="DRIVE_ID")
        return await self._tree_builder.build_tree(spec, root)


class CheckFolderUseCase:
    """Look up metadata of a folder or file by id."""

    def __init__(self, store: IRemoteStore, deadline: Optional[float] = DEFAULT_DEADLINE):
        self._store = store
        self._deadline = deadline

    async def execute(self, file_id: Optional[str]) -> FileMetadata:
        if not file_id:
            raise ValidationError("Missing file or folder id", fields=["file_id"])
        return await with_deadline(
            self._store.get_file_metadata(file_id), self._deadline, "get_file_metadata"
        )

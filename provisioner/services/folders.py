"""
Folder services - find-or-create single folders and build folder trees.

Resolution is idempotent: it always queries the store before creating.
Tree building is one-shot: every node of the spec becomes a new folder.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import FolderTreeSpec, RemoteFolder, TreeBuildResult
from ..protocols import IRemoteStore
from .deadline import DEFAULT_DEADLINE, with_deadline

logger = logging.getLogger(__name__)


class _KeyedLocks:
    """asyncio locks keyed by (name, parent_id), dropped once nobody uses them."""

    def __init__(self):
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self._users: Dict[Tuple[str, str], int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    async def acquire(self, key: Tuple[str, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._release_user(key)
            raise
        return lock

    def release(self, key: Tuple[str, str], lock: asyncio.Lock) -> None:
        lock.release()
        self._release_user(key)

    def _release_user(self, key: Tuple[str, str]) -> None:
        self._users[key] -= 1
        if self._users[key] == 0:
            del self._users[key]
            del self._locks[key]


class FolderResolver:
    """
    Idempotent find-or-create of one folder under a parent.

    Concurrent resolutions of the same (name, parent_id) inside this process
    are serialized, so the second caller observes the folder the first one
    created. Separate processes can still race (no distributed lock).
    Folder ids are never cached: every call re-queries the store.
    """

    def __init__(self, store: IRemoteStore, deadline: Optional[float] = DEFAULT_DEADLINE):
        self._store = store
        self._deadline = deadline
        self._locks = _KeyedLocks()

    async def resolve(self, name: str, parent_id: str) -> str:
        """Return the id of folder ``name`` under ``parent_id``, creating it if missing."""
        key = (name, parent_id)
        lock = await self._locks.acquire(key)
        try:
            logger.debug(f"Checking if folder exists: {name} (parent: {parent_id})")
            existing = await with_deadline(
                self._store.find_folder(name, parent_id), self._deadline, "find_folder"
            )
            if existing:
                logger.debug(f"Folder already exists: {name} (id: {existing.id})")
                return existing.id

            logger.info(f"Creating folder: {name} in parent (id: {parent_id})")
            created = await with_deadline(
                self._store.create_folder(name, parent_id), self._deadline, "create_folder"
            )
            logger.info(f"Folder created successfully: {name} (id: {created.id})")
            return created.id
        finally:
            self._locks.release(key, lock)

    async def resolve_path(self, names: Sequence[str], parent_id: str) -> str:
        """
        Resolve a chain of nested folders (e.g. year -> month -> category).

        Returns the id of the last level; an empty chain returns ``parent_id``.
        """
        current = parent_id
        for name in names:
            current = await self.resolve(name, current)
        return current


class FolderTreeBuilder:
    """
    Materializes a declarative folder tree under a root folder.

    Depth-first, pre-order: a node's folder is created before its children,
    children in the order given. Calling it twice creates two trees.
    Holds no per-build state, so one builder serves concurrent builds.
    """

    def __init__(self, store: IRemoteStore, deadline: Optional[float] = DEFAULT_DEADLINE):
        self._store = store
        self._deadline = deadline

    async def build_tree(self, spec: FolderTreeSpec, root_parent_id: str) -> str:
        """Create every node of ``spec`` and return the id of the top folder."""
        result = await self.build(spec, root_parent_id)
        return result.root_id

    async def build(self, spec: FolderTreeSpec, root_parent_id: str) -> TreeBuildResult:
        """Create every node of ``spec`` and return the created folders with their paths."""
        created: List[Tuple[str, RemoteFolder]] = []
        top_id: Optional[str] = None

        logger.info(f"Creating folder structure: {spec.name} ({spec.count()} folders)")

        # (node, parent_id, path); children pushed reversed so they pop in order
        stack: List[Tuple[FolderTreeSpec, str, str]] = [(spec, root_parent_id, spec.name)]
        while stack:
            node, parent_id, path = stack.pop()
            folder = await with_deadline(
                self._store.create_folder(node.name, parent_id), self._deadline, "create_folder"
            )
            created.append((path, folder))
            logger.debug(f"Created folder: /{path} (id: {folder.id})")

            if top_id is None:
                top_id = folder.id
            for child in reversed(node.children):
                stack.append((child, folder.id, f"{path}/{child.name}"))

        logger.info(f"Folder structure created: /{spec.name} (id: {top_id})")
        return TreeBuildResult(root_id=top_id, created=tuple(created))

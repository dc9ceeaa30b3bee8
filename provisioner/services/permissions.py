"""Permission Manager - public-read visibility for created files/folders."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from ..models import ItemFailure
from ..protocols import IRemoteStore
from .deadline import DEFAULT_DEADLINE, with_deadline

logger = logging.getLogger(__name__)


class PermissionManager:
    """Grants anyone-with-link read access."""

    def __init__(self, store: IRemoteStore, deadline: Optional[float] = DEFAULT_DEADLINE):
        self._store = store
        self._deadline = deadline

    async def make_public_read(self, file_id: str) -> None:
        await with_deadline(
            self._store.grant_public_read(file_id), self._deadline, "grant_public_read"
        )
        logger.debug(f"Public read granted: {file_id}")

    async def make_public_read_many(self, file_ids: Iterable[str]) -> List[ItemFailure]:
        """
        Grant public read to every id concurrently and wait for all of them.

        Returns the failed grants (input order) instead of raising.
        """
        ids = list(file_ids)
        if not ids:
            return []

        results = await asyncio.gather(
            *(self.make_public_read(file_id) for file_id in ids),
            return_exceptions=True,
        )

        failures = [
            ItemFailure(file_id, str(result) or type(result).__name__)
            for file_id, result in zip(ids, results)
            if isinstance(result, Exception)
        ]
        if failures:
            logger.warning(f"Public read: {len(ids) - len(failures)} granted, {len(failures)} failed")
        else:
            logger.info(f"Public read granted to {len(ids)} item(s)")
        return failures

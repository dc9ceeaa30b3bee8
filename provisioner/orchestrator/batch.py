"""Upload Orchestrator - single and batch uploads into a resolved folder."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from ..errors import ValidationError
from ..models import (
    BatchResult,
    ItemFailure,
    RemoteFile,
    UploadItem,
    UploadMode,
    UploadResult,
    UploadStatus,
    classify,
)
from ..protocols import IRemoteStore
from ..services.deadline import DEFAULT_DEADLINE, with_deadline
from ..services.permissions import PermissionManager

logger = logging.getLogger(__name__)

__all__ = ["UploadOrchestrator", "classify"]


class UploadOrchestrator:
    """
    Uploads one or many payloads into an already resolved folder.

    - Concurrent mode: every item starts without waiting for the others;
      the batch returns once all of them have settled.
    - Sequential mode: item i+1 starts only after item i has settled
      (for stores that rate-limit bursts of creations in one parent).

    A failing item never cancels or blocks its siblings. Permission grants
    requested for a batch are joined before the result is returned.
    """

    def __init__(
        self,
        store: IRemoteStore,
        permissions: Optional[PermissionManager] = None,
        deadline: Optional[float] = DEFAULT_DEADLINE,
        max_parallel: Optional[int] = None,
    ):
        self._store = store
        self._permissions = permissions or PermissionManager(store, deadline)
        self._deadline = deadline
        self._semaphore = asyncio.Semaphore(max_parallel) if max_parallel else None

    async def upload_one(self, item: UploadItem, target_folder_id: str) -> RemoteFile:
        """Upload a single payload. Any store error propagates."""
        return await with_deadline(
            self._store.create_file(
                item.original_name, target_folder_id, item.mime_type, item.payload
            ),
            self._deadline,
            "create_file",
        )

    async def upload_batch(
        self,
        items: Sequence[UploadItem],
        target_folder_id: str,
        mode: UploadMode = UploadMode.CONCURRENT,
        make_public: bool = False,
        folder_name: Optional[str] = None,
    ) -> BatchResult:
        """
        Upload every item into ``target_folder_id`` and aggregate the outcome.

        Results keep input order, whatever the completion order was.
        """
        items = list(items)
        if not items:
            raise ValidationError("No files to upload", fields=["files"])

        total = len(items)
        grant_tasks: Dict[int, asyncio.Task] = {}
        mb = sum(item.size for item in items) / (1024 * 1024)
        logger.info(f"Starting upload: {total} file(s), {mb:.2f} MB, mode={mode.value}")

        async def run(index: int, item: UploadItem) -> UploadResult:
            result = await self._upload_item(index, total, item, target_folder_id)
            if make_public and result.success:
                grant_tasks[index] = asyncio.create_task(
                    self._permissions.make_public_read(result.file.id)
                )
            return result

        if mode is UploadMode.SEQUENTIAL:
            results: List[UploadResult] = []
            for index, item in enumerate(items):
                results.append(await run(index, item))
        else:
            results = list(
                await asyncio.gather(*(run(index, item) for index, item in enumerate(items)))
            )

        permission_failures = await self._join_grants(results, grant_tasks)

        batch = BatchResult.from_results(
            results, folder_name=folder_name, permission_failures=permission_failures
        )
        counts = batch.counts
        logger.info(
            f"Upload complete: {counts.succeeded} successful, {counts.failed} failed "
            f"({batch.outcome.value})"
        )
        return batch

    async def _upload_item(
        self,
        index: int,
        total: int,
        item: UploadItem,
        target_folder_id: str,
    ) -> UploadResult:
        """Upload one item of a batch, converting any failure into a failed result."""
        if self._semaphore:
            async with self._semaphore:
                return await self._upload_item_unbounded(index, total, item, target_folder_id)
        return await self._upload_item_unbounded(index, total, item, target_folder_id)

    async def _upload_item_unbounded(
        self,
        index: int,
        total: int,
        item: UploadItem,
        target_folder_id: str,
    ) -> UploadResult:
        logger.debug(f"[{index + 1}/{total}] {item.original_name}: {UploadStatus.UPLOADING.value}")
        try:
            file = await self.upload_one(item, target_folder_id)
        except Exception as e:
            error_msg = str(e) or f"{type(e).__name__}"
            logger.error(f"[{index + 1}/{total}] Error uploading {item.original_name}: {error_msg}")
            return UploadResult.fail(index, item.original_name, error_msg)

        logger.info(f"[{index + 1}/{total}] ✓ Success: {item.original_name} (id: {file.id})")
        return UploadResult.ok(index, item.original_name, file)

    async def _join_grants(
        self,
        results: List[UploadResult],
        grant_tasks: Dict[int, asyncio.Task],
    ) -> List[ItemFailure]:
        """Wait for every scheduled permission grant; report the failed ones."""
        if not grant_tasks:
            return []

        logger.info(f"Waiting for {len(grant_tasks)} permission grant(s) to complete...")
        indexes = sorted(grant_tasks)
        outcomes = await asyncio.gather(
            *(grant_tasks[i] for i in indexes), return_exceptions=True
        )

        failures: List[ItemFailure] = []
        for index, outcome in zip(indexes, outcomes):
            if isinstance(outcome, BaseException):
                failures.append(
                    ItemFailure(results[index].source_name, str(outcome) or type(outcome).__name__)
                )
            else:
                results[index] = replace(results[index], status=UploadStatus.PERMISSIONS_GRANTED)

        if failures:
            logger.warning(
                f"Permission grants: {len(indexes) - len(failures)} successful, {len(failures)} failed"
            )
        return failures

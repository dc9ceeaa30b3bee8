"""Use cases for order-status report submissions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, TYPE_CHECKING
import logging

from ..models import BatchResult, RemoteFile, UploadItem, UploadMode
from ..services.folder_ids import FolderIdRegistry
from .folders import ResolveDayFolderUseCase
from .validation import (
    EXCEL_MIME_TYPES,
    PDF_MIME_TYPES,
    require_item,
    require_items,
    require_mime_types,
)

if TYPE_CHECKING:
    from ..orchestrator.batch import UploadOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersaceStatusResult:
    dates_report: RemoteFile
    dirma: RemoteFile
    previous_report: RemoteFile
    new_report: RemoteFile

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dates_report_id": self.dates_report.id,
            "dirma_id": self.dirma.id,
            "previous_report_id": self.previous_report.id,
            "new_report_id": self.new_report.id,
        }


@dataclass(frozen=True)
class SWStatusResult:
    erp_reports: BatchResult
    planning: RemoteFile

    def to_dict(self) -> Dict[str, Any]:
        return {"erp_reports": self.erp_reports.to_dict(), "planning_id": self.planning.id}


class UploadOrderStatusUseCase:
    """Each file lands in today's folder under its own keyed root."""

    def __init__(
        self,
        uploader: UploadOrchestrator,
        day_folders: ResolveDayFolderUseCase,
        folder_ids: FolderIdRegistry,
    ):
        self._uploader = uploader
        self._day_folders = day_folders
        self._folder_ids = folder_ids

    async def _upload_to_day_folder(self, item: UploadItem, key: str) -> RemoteFile:
        day_folder = await self._day_folders.execute(self._folder_ids.get(key))
        file = await self._uploader.upload_one(item, day_folder.id)
        logger.info(f"{item.original_name} uploaded to {key}/{day_folder.name} (id: {file.id})")
        return file

    async def execute_versace(
        self,
        dates_report: Optional[UploadItem],
        dirma: Optional[UploadItem],
        previous_report: Optional[UploadItem],
        new_report: Optional[UploadItem],
    ) -> VersaceStatusResult:
        dates_report = require_item(dates_report, "dates_report")
        dirma = require_item(dirma, "dirma")
        previous_report = require_item(previous_report, "previous_report")
        new_report = require_item(new_report, "new_report")
        require_mime_types([dates_report], PDF_MIME_TYPES, "dates_report", "PDF", allow_octet_stream=True)
        for field, item in (("dirma", dirma), ("previous_report", previous_report), ("new_report", new_report)):
            require_mime_types([item], EXCEL_MIME_TYPES, field, "Excel (.xlsx, .xls, .xlsm)", allow_octet_stream=True)

        # One after another: several of these share a parent folder
        return VersaceStatusResult(
            dates_report=await self._upload_to_day_folder(dates_report, "situacion_pedidos_pdf"),
            dirma=await self._upload_to_day_folder(dirma, "situacion_pedidos_dirma"),
            previous_report=await self._upload_to_day_folder(previous_report, "situacion_pedidos_versace"),
            new_report=await self._upload_to_day_folder(new_report, "situacion_pedidos_versace"),
        )

    async def execute_sw(
        self,
        erp_reports: Optional[Sequence[UploadItem]],
        planning: Optional[UploadItem],
    ) -> SWStatusResult:
        erp_reports = require_items(erp_reports, "erp_reports")
        planning = require_item(planning, "planning")
        require_mime_types(erp_reports, PDF_MIME_TYPES, "erp_reports", "PDF", allow_octet_stream=True)
        require_mime_types([planning], EXCEL_MIME_TYPES, "planning", "Excel (.xlsx, .xls, .xlsm)", allow_octet_stream=True)

        # Resolved once for the whole loop; sequential to stay under the store rate limit
        day_folder = await self._day_folders.execute(self._folder_ids.get("situacion_pedidos_erp"))
        logger.info(f"Uploading {len(erp_reports)} ERP report(s) sequentially...")
        erp_batch = await self._uploader.upload_batch(
            erp_reports, day_folder.id, mode=UploadMode.SEQUENTIAL, folder_name=day_folder.name
        )

        planning_file = await self._upload_to_day_folder(planning, "situacion_pedidos_sw")
        return SWStatusResult(erp_reports=erp_batch, planning=planning_file)

"""Use case for payroll workbook trees (year -> month -> category)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union, TYPE_CHECKING
import asyncio
import logging

from ..models import BatchResult, FileSummary, UploadItem
from ..services.folder_ids import FolderIdRegistry
from ..services.folders import FolderResolver
from ..services.naming import year_month_path
from .validation import (
    EXCEL_MIME_TYPES,
    require_fields,
    require_item,
    require_items,
    require_mime_types,
)

if TYPE_CHECKING:
    from ..orchestrator.batch import UploadOrchestrator

logger = logging.getLogger(__name__)

ADVISORY_KEY = "nominas_asesorias"
PAYROLL_KEY = "nominas_nominas"

WITHHOLDINGS_FOLDER = "RETENCIONES"
SUMMARIES_FOLDER = "RESUMEN"
PAYROLL_FOLDER = "NOMINAS"


@dataclass(frozen=True)
class PayrollUploadResult:
    """Outcome of one payroll submission, one batch per category folder."""
    payroll: BatchResult
    summaries: BatchResult
    withholdings: BatchResult

    @property
    def payroll_file(self) -> Optional[FileSummary]:
        return self.payroll.succeeded[0] if self.payroll.succeeded else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payroll": self.payroll.to_dict(),
            "summaries": self.summaries.to_dict(),
            "withholdings": self.withholdings.to_dict(),
        }


class UploadPayrollUseCase:
    """
    Files a month of payroll workbooks.

    Layout (both roots get the same year/month levels):
        nominas_asesorias/<year>/<month>/RETENCIONES  <- withholdings
        nominas_asesorias/<year>/<month>/RESUMEN      <- summaries
        nominas_nominas/<year>/<month>/NOMINAS        <- payroll workbook
    """

    def __init__(
        self,
        uploader: UploadOrchestrator,
        resolver: FolderResolver,
        folder_ids: FolderIdRegistry,
    ):
        self._uploader = uploader
        self._resolver = resolver
        self._folder_ids = folder_ids

    async def execute(
        self,
        payroll: Optional[UploadItem],
        summaries: Optional[Sequence[UploadItem]],
        withholdings: Optional[Sequence[UploadItem]],
        year: Union[int, str, None],
        month: Union[int, str, None],
    ) -> PayrollUploadResult:
        payroll = require_item(payroll, "payroll")
        summaries = require_items(summaries, "summaries")
        withholdings = require_items(withholdings, "withholdings")
        require_fields({"year": year, "month": month}, "year", "month")
        year_name, month_name = year_month_path(year, month)
        require_mime_types([payroll, *summaries, *withholdings], EXCEL_MIME_TYPES, "files", "Excel")

        advisory_root = self._folder_ids.get(ADVISORY_KEY)
        payroll_root = self._folder_ids.get(PAYROLL_KEY)

        # Year/month levels first, then the category folders side by side
        advisory_month, payroll_month = await asyncio.gather(
            self._resolver.resolve_path([year_name, month_name], advisory_root),
            self._resolver.resolve_path([year_name, month_name], payroll_root),
        )
        withholdings_id, summaries_id, payroll_id = await asyncio.gather(
            self._resolver.resolve(WITHHOLDINGS_FOLDER, advisory_month),
            self._resolver.resolve(SUMMARIES_FOLDER, advisory_month),
            self._resolver.resolve(PAYROLL_FOLDER, payroll_month),
        )
        logger.info(f"Payroll folders ready for {year_name}/{month_name}")

        withholdings_batch, summaries_batch, payroll_batch = await asyncio.gather(
            self._uploader.upload_batch(withholdings, withholdings_id, folder_name=WITHHOLDINGS_FOLDER),
            self._uploader.upload_batch(summaries, summaries_id, folder_name=SUMMARIES_FOLDER),
            self._uploader.upload_batch([payroll], payroll_id, folder_name=PAYROLL_FOLDER),
        )
        return PayrollUploadResult(
            payroll=payroll_batch,
            summaries=summaries_batch,
            withholdings=withholdings_batch,
        )

"""Use cases for document/image uploads into keyed root folders."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Optional, Sequence, Tuple, TYPE_CHECKING
import logging

from ..errors import ValidationError
from ..models import BatchResult, ItemFailure, RemoteFile, UploadItem, UploadMode
from ..services.folder_ids import FolderIdRegistry
from ..services.folders import FolderResolver
from ..services.naming import sanitize_name
from ..services.permissions import PermissionManager
from .folders import ResolveDayFolderUseCase
from .validation import (
    EXCEL_MIME_TYPES,
    PDF_MIME_TYPES,
    require_choice,
    require_image,
    require_item,
    require_items,
    require_mime_types,
)

if TYPE_CHECKING:
    from ..orchestrator.batch import UploadOrchestrator

logger = logging.getLogger(__name__)

PROTOTYPE_BRAND_KEYS = {
    "STUART WEITZMAN": "sw_prototipos",
    "VERSACE": "versace_prototipos",
}

INTRASTAT_KEYS = {
    "COMPRA": "intrastat_compras",
    "VENTA": "intrastat_ventas",
}


def intrastat_key(kind: Optional[str]) -> str:
    """Folder key for an Intrastat operation kind (COMPRA / VENTA)."""
    return INTRASTAT_KEYS[require_choice(kind, INTRASTAT_KEYS, "kind")]


class UploadAlertImageUseCase:
    """Upload an alert image into today's folder and make it publicly readable."""

    FOLDER_KEY = "imgs_alertas"

    def __init__(
        self,
        uploader: UploadOrchestrator,
        permissions: PermissionManager,
        day_folders: ResolveDayFolderUseCase,
        folder_ids: FolderIdRegistry,
    ):
        self._uploader = uploader
        self._permissions = permissions
        self._day_folders = day_folders
        self._folder_ids = folder_ids

    async def execute(self, item: Optional[UploadItem]) -> RemoteFile:
        item = require_item(item, "file")
        require_image(item)

        root_id = self._folder_ids.get(self.FOLDER_KEY)
        day_folder = await self._day_folders.execute(root_id)
        file = await self._uploader.upload_one(item, day_folder.id)
        await self._permissions.make_public_read(file.id)
        logger.info(f"Alert image uploaded: {file.name} -> /{day_folder.name} (id: {file.id})")
        return file


class UploadDocumentUseCase:
    """Upload one document straight into a keyed root folder."""

    def __init__(self, uploader: UploadOrchestrator, folder_ids: FolderIdRegistry):
        self._uploader = uploader
        self._folder_ids = folder_ids

    async def execute(
        self,
        item: Optional[UploadItem],
        key: str,
        allowed_mime_types: Collection[str] = PDF_MIME_TYPES,
        kind: str = "PDF",
    ) -> RemoteFile:
        item = require_item(item, "file")
        require_mime_types([item], allowed_mime_types, "file", kind)
        return await self._uploader.upload_one(item, self._folder_ids.get(key))


@dataclass(frozen=True)
class PrototypeUploadResult:
    """Workbook upload plus the visibility outcome of its extracted images."""
    file: RemoteFile
    folder_id: str
    folder_name: str
    permission_failures: Tuple[ItemFailure, ...] = ()


class UploadPrototypeWorkbookUseCase:
    """
    Upload a prototype workbook into a folder named after the workbook.

    Images extracted from the workbook by the external extractor are made
    public; those grants are joined and their failures reported.
    """

    def __init__(
        self,
        uploader: UploadOrchestrator,
        resolver: FolderResolver,
        permissions: PermissionManager,
        folder_ids: FolderIdRegistry,
    ):
        self._uploader = uploader
        self._resolver = resolver
        self._permissions = permissions
        self._folder_ids = folder_ids

    async def execute(
        self,
        item: Optional[UploadItem],
        brand: Optional[str],
        extracted_file_ids: Sequence[str] = (),
    ) -> PrototypeUploadResult:
        item = require_item(item, "file")
        brand = require_choice(brand, PROTOTYPE_BRAND_KEYS, "brand")
        require_mime_types([item], EXCEL_MIME_TYPES, "file", "Excel (.xlsx, .xls, .xltx, .xltm)")
        folder_name = sanitize_name(item.original_name)
        if not folder_name:
            raise ValidationError("File name yields an empty folder name", fields=["file"])

        root_id = self._folder_ids.get(PROTOTYPE_BRAND_KEYS[brand])
        folder_id = await self._resolver.resolve(folder_name, root_id)
        file = await self._uploader.upload_one(item, folder_id)
        failures = await self._permissions.make_public_read_many(extracted_file_ids)

        return PrototypeUploadResult(
            file=file,
            folder_id=folder_id,
            folder_name=folder_name,
            permission_failures=tuple(failures),
        )


class UploadDayFolderBatchUseCase:
    """
    Upload many PDFs into today's folder under a keyed root.

    The day folder is resolved once, before any upload; if that fails no
    item is attempted.
    """

    def __init__(
        self,
        uploader: UploadOrchestrator,
        day_folders: ResolveDayFolderUseCase,
        folder_ids: FolderIdRegistry,
    ):
        self._uploader = uploader
        self._day_folders = day_folders
        self._folder_ids = folder_ids

    async def execute(
        self,
        items: Optional[Sequence[UploadItem]],
        key: str,
        mode: UploadMode = UploadMode.CONCURRENT,
        allowed_mime_types: Collection[str] = PDF_MIME_TYPES,
        kind: str = "PDF",
    ) -> BatchResult:
        items = require_items(items, "files")
        require_mime_types(items, allowed_mime_types, "files", kind)

        root_id = self._folder_ids.get(key)
        day_folder = await self._day_folders.execute(root_id)
        return await self._uploader.upload_batch(
            items, day_folder.id, mode=mode, folder_name=day_folder.name
        )

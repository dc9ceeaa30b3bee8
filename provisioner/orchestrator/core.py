"""Core service - wires the shared store client into every component."""
from typing import Optional, Sequence

from ..errors import ConfigurationError
from ..models import (
    BatchResult,
    FileMetadata,
    FolderTreeSpec,
    ProvisionConfig,
    RemoteFile,
    RemoteFolder,
    TreeBuildResult,
    UploadItem,
    UploadMode,
)
from ..protocols import IClock, IRemoteStore
from ..services.api_client import DriveAPIClient
from ..services.folder_ids import FolderIdRegistry
from ..services.folders import FolderResolver, FolderTreeBuilder
from ..services.permissions import PermissionManager
from ..use_cases import (
    CheckFolderUseCase,
    CreateFolderStructureUseCase,
    ResolveDayFolderUseCase,
    UploadAlertImageUseCase,
    UploadDayFolderBatchUseCase,
    UploadDocumentUseCase,
    UploadOrderStatusUseCase,
    UploadPayrollUseCase,
    UploadPrototypeWorkbookUseCase,
)
from .batch import UploadOrchestrator


class ProvisioningService:
    """
    Provisions folders and ingests files using injected services.

    Follows:
    - Dependency Injection (one store client, passed to every component)
    - Single Responsibility (delegates to services and use cases)

    Usage:
        # Drive REST client built from configuration
        async with ProvisioningService(ProvisionConfig.from_env()) as service:
            folder_id = await service.resolve_folder("2026", root_id)
            result = await service.upload_batch(items, folder_id)

        # Any IRemoteStore (e.g. a fake in tests)
        async with ProvisioningService(config, store=fake_store) as service:
            ...
    """

    def __init__(
        self,
        config: Optional[ProvisionConfig] = None,
        store: Optional[IRemoteStore] = None,
        folder_ids: Optional[FolderIdRegistry] = None,
        clock: Optional[IClock] = None,
    ):
        """
        Initialize service with dependencies.

        Args:
            config: Provisioning configuration
            store: Pre-built store client; a DriveAPIClient is created if omitted
            folder_ids: Folder key registry; loaded from config.folder_ids_path if omitted
            clock: Source of "now" for day folders (defaults to UTC now)
        """
        self._config = config or ProvisionConfig()
        self._external_store = store
        self._folder_ids = folder_ids
        self._clock = clock

        # Initialized in __aenter__
        self._api_client: Optional[DriveAPIClient] = None
        self._store: Optional[IRemoteStore] = None
        self.resolver: Optional[FolderResolver] = None
        self.tree_builder: Optional[FolderTreeBuilder] = None
        self.permissions: Optional[PermissionManager] = None
        self.uploader: Optional[UploadOrchestrator] = None

        self.day_folders: Optional[ResolveDayFolderUseCase] = None
        self.alert_images: Optional[UploadAlertImageUseCase] = None
        self.documents: Optional[UploadDocumentUseCase] = None
        self.prototypes: Optional[UploadPrototypeWorkbookUseCase] = None
        self.day_batches: Optional[UploadDayFolderBatchUseCase] = None
        self.payroll: Optional[UploadPayrollUseCase] = None
        self.order_status: Optional[UploadOrderStatusUseCase] = None
        self.folder_structure: Optional[CreateFolderStructureUseCase] = None
        self.folder_check: Optional[CheckFolderUseCase] = None

    async def __aenter__(self):
        """Initialize store client, services and use cases."""
        config = self._config

        if self._external_store is not None:
            self._store = self._external_store
        else:
            self._api_client = DriveAPIClient(
                base_url=config.api_url,
                access_token=config.access_token,
                timeout=config.request_timeout,
                max_retries=config.max_retries,
            )
            await self._api_client.__aenter__()
            self._store = self._api_client

        if self._folder_ids is None:
            if config.folder_ids_path:
                self._folder_ids = FolderIdRegistry.from_file(config.folder_ids_path)
            else:
                self._folder_ids = FolderIdRegistry()

        deadline = config.request_timeout
        self.resolver = FolderResolver(self._store, deadline)
        self.tree_builder = FolderTreeBuilder(self._store, deadline)
        self.permissions = PermissionManager(self._store, deadline)
        self.uploader = UploadOrchestrator(self._store, self.permissions, deadline)

        folder_ids = self._folder_ids
        self.day_folders = ResolveDayFolderUseCase(self.resolver, config.timezone, self._clock)
        self.alert_images = UploadAlertImageUseCase(
            self.uploader, self.permissions, self.day_folders, folder_ids
        )
        self.documents = UploadDocumentUseCase(self.uploader, folder_ids)
        self.prototypes = UploadPrototypeWorkbookUseCase(
            self.uploader, self.resolver, self.permissions, folder_ids
        )
        self.day_batches = UploadDayFolderBatchUseCase(self.uploader, self.day_folders, folder_ids)
        self.payroll = UploadPayrollUseCase(self.uploader, self.resolver, folder_ids)
        self.order_status = UploadOrderStatusUseCase(self.uploader, self.day_folders, folder_ids)
        self.folder_structure = CreateFolderStructureUseCase(self.tree_builder, config.main_folder_id)
        self.folder_check = CheckFolderUseCase(self._store, deadline)

        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        if self._api_client:
            await self._api_client.__aexit__(*args)
            self._api_client = None

    @property
    def folder_ids(self) -> FolderIdRegistry:
        assert self._folder_ids is not None
        return self._folder_ids

    async def resolve_folder(self, name: str, parent_id: str) -> str:
        """Find or create one folder."""
        assert self.resolver is not None
        return await self.resolver.resolve(name, parent_id)

    async def resolve_day_folder(self, parent_id: str) -> RemoteFolder:
        """Find or create today's folder under ``parent_id``."""
        assert self.day_folders is not None
        return await self.day_folders.execute(parent_id)

    async def build_tree(self, spec: FolderTreeSpec, parent_id: Optional[str] = None) -> str:
        """Create a folder tree under ``parent_id`` (default: the main folder)."""
        result = await self.build_tree_with_paths(spec, parent_id)
        return result.root_id

    async def build_tree_with_paths(
        self, spec: FolderTreeSpec, parent_id: Optional[str] = None
    ) -> TreeBuildResult:
        """Like ``build_tree`` but also returns every created folder with its path."""
        assert self.tree_builder is not None
        root = parent_id or self._config.main_folder_id
        if not root:
            raise ConfigurationError("Main folder id (DRIVE_ID) is not configured", key="DRIVE_ID")
        return await self.tree_builder.build(spec, root)

    async def upload_one(self, item: UploadItem, folder_id: str) -> RemoteFile:
        assert self.uploader is not None
        return await self.uploader.upload_one(item, folder_id)

    async def upload_batch(
        self,
        items: Sequence[UploadItem],
        folder_id: str,
        mode: UploadMode = UploadMode.CONCURRENT,
        make_public: bool = False,
        folder_name: Optional[str] = None,
    ) -> BatchResult:
        """Upload many items into one folder; see UploadOrchestrator.upload_batch."""
        assert self.uploader is not None
        return await self.uploader.upload_batch(
            items, folder_id, mode=mode, make_public=make_public, folder_name=folder_name
        )

    async def check(self, file_id: str) -> FileMetadata:
        assert self.folder_check is not None
        return await self.folder_check.execute(file_id)

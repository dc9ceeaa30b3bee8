"""
Provisioner - folder provisioning and batch ingestion for a remote file store.

Resolves or creates folders idempotently, builds folder trees from
declarative specs and uploads batches of files concurrently (or one at a
time), tolerating per-item failures.

Usage:
    from provisioner import ProvisioningService, ProvisionConfig, UploadItem

    async with ProvisioningService(ProvisionConfig.from_env()) as service:
        # Today's folder under a configured root
        root_id = service.folder_ids.get("inventario")
        day_folder = await service.resolve_day_folder(root_id)

        # Batch upload, classified as all/partial/none succeeded
        items = [UploadItem.from_path(p) for p in paths]
        result = await service.upload_batch(items, day_folder.id)
        print(result.outcome, result.counts)

        # Folder tree from a declarative structure
        spec = FolderTreeSpec.from_dict({"name": "A", "children": [{"name": "B"}]})
        await service.build_tree(spec, parent_id)
"""
from .errors import (
    ConfigurationError,
    ProvisionerError,
    RemoteStoreError,
    ValidationError,
    error_payload,
)
from .models import (
    BatchOutcome,
    BatchResult,
    FileMetadata,
    FileSummary,
    FolderTreeSpec,
    ItemFailure,
    ProvisionConfig,
    RemoteFile,
    RemoteFolder,
    TreeBuildResult,
    UploadItem,
    UploadMode,
    UploadResult,
    UploadStatus,
    classify,
)
from .orchestrator import ProvisioningService, UploadOrchestrator
from .services import (
    DriveAPIClient,
    FolderIdRegistry,
    FolderResolver,
    FolderTreeBuilder,
    PermissionManager,
    day_folder_name,
    sanitize_name,
)

__version__ = "0.1.0"
__all__ = [
    # Main
    "ProvisioningService",
    "UploadOrchestrator",
    # Models
    "BatchOutcome",
    "BatchResult",
    "FileMetadata",
    "FileSummary",
    "FolderTreeSpec",
    "ItemFailure",
    "ProvisionConfig",
    "RemoteFile",
    "RemoteFolder",
    "TreeBuildResult",
    "UploadItem",
    "UploadMode",
    "UploadResult",
    "UploadStatus",
    "classify",
    # Errors
    "ProvisionerError",
    "ValidationError",
    "ConfigurationError",
    "RemoteStoreError",
    "error_payload",
    # Services
    "DriveAPIClient",
    "FolderIdRegistry",
    "FolderResolver",
    "FolderTreeBuilder",
    "PermissionManager",
    "day_folder_name",
    "sanitize_name",
]

"""Services for provisioner module."""
from .api_client import DriveAPIClient
from .folder_ids import FolderIdRegistry
from .folders import FolderResolver, FolderTreeBuilder
from .naming import day_folder_name, sanitize_name, year_month_path
from .permissions import PermissionManager

__all__ = [
    "DriveAPIClient",
    "FolderIdRegistry",
    "FolderResolver",
    "FolderTreeBuilder",
    "PermissionManager",
    "day_folder_name",
    "sanitize_name",
    "year_month_path",
]

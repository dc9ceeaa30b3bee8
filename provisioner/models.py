"""
Models for provisioner module.

Immutable dataclasses describing remote folders/files, declarative folder
trees, upload inputs and aggregated batch outcomes.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple, Mapping
import math
import mimetypes
import os

from .errors import ConfigurationError, ValidationError


FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DEFAULT_TIMEZONE = "Europe/Madrid"


@dataclass(frozen=True)
class RemoteFolder:
    """Folder in the remote store. Identity is the store-assigned id."""
    id: str
    name: str
    parent_id: str


@dataclass(frozen=True)
class RemoteFile:
    """File created in the remote store."""
    id: str
    name: str
    mime_type: str
    parent_id: str
    download_link: Optional[str] = None
    view_link: Optional[str] = None


@dataclass(frozen=True)
class FileMetadata:
    """Metadata of any remote item (file, folder or shortcut)."""
    id: str
    name: str
    mime_type: str
    parents: Tuple[str, ...] = ()
    drive_id: Optional[str] = None
    shortcut_target: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "parents": list(self.parents),
            "driveId": self.drive_id,
            "shortcutTarget": self.shortcut_target,
        }


@dataclass(frozen=True)
class FolderTreeSpec:
    """Declarative folder tree node: a name plus ordered children."""
    name: str
    children: Tuple["FolderTreeSpec", ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FolderTreeSpec":
        """
        Build a tree from ``{"name": str, "children": [...]}``.

        Walks the input with an explicit stack so deeply nested structures
        do not hit the interpreter recursion limit.
        """
        built: Dict[int, FolderTreeSpec] = {}
        stack: List[Tuple[Any, str, bool]] = [(data, "structure", False)]

        while stack:
            node, path, expanded = stack.pop()
            if not expanded:
                if not isinstance(node, Mapping):
                    raise ValidationError(f"{path} must be an object", fields=[path])
                name = node.get("name")
                if not isinstance(name, str) or not name.strip():
                    raise ValidationError(f"{path}.name is required", fields=[f"{path}.name"])
                children = node.get("children") or []
                if not isinstance(children, (list, tuple)):
                    raise ValidationError(
                        f"{path}.children must be a list", fields=[f"{path}.children"]
                    )
                stack.append((node, path, True))
                for idx, child in enumerate(children):
                    stack.append((child, f"{path}.children[{idx}]", False))
            else:
                children = node.get("children") or []
                built[id(node)] = cls(
                    name=node["name"].strip(),
                    children=tuple(built[id(child)] for child in children),
                )

        return built[id(data)]

    def count(self) -> int:
        """Total number of nodes, this one included."""
        total = 0
        stack = [self]
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.children)
        return total


@dataclass(frozen=True)
class TreeBuildResult:
    """Folders created by one tree build, in creation (pre-order) order."""
    root_id: str
    created: Tuple[Tuple[str, RemoteFolder], ...] = ()


@dataclass(frozen=True)
class UploadItem:
    """Single payload to upload. Lives only for one batch call."""
    original_name: str
    mime_type: str
    payload: bytes = field(repr=False)

    _FALLBACK_MIMES = {
        ".pdf": "application/pdf",
        ".xls": "application/vnd.ms-excel",
        ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ".xlsm": "application/vnd.ms-excel.sheet.macroenabled.12",
        ".xltx": "application/vnd.openxmlformats-officedocument.spreadsheetml.template",
        ".xltm": "application/vnd.ms-excel.template.macroenabled.12",
    }

    @property
    def size(self) -> int:
        return len(self.payload)

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "UploadItem":
        """Read a local file into an upload item, guessing its MIME type."""
        path = Path(path)
        if not mime_type:
            mime_type, _ = mimetypes.guess_type(str(path))
        if not mime_type:
            mime_type = cls._FALLBACK_MIMES.get(path.suffix.lower(), "application/octet-stream")
        return cls(original_name=path.name, mime_type=mime_type, payload=path.read_bytes())


class UploadMode(Enum):
    """How a batch schedules its uploads."""
    CONCURRENT = "concurrent"
    SEQUENTIAL = "sequential"


class UploadStatus(Enum):
    """Per-item upload state."""
    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PERMISSIONS_GRANTED = "permissions_granted"


@dataclass(frozen=True)
class UploadResult:
    """Immutable result of one item of a batch."""
    index: int
    source_name: str
    status: UploadStatus
    file: Optional[RemoteFile] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (UploadStatus.SUCCEEDED, UploadStatus.PERMISSIONS_GRANTED)

    @classmethod
    def ok(cls, index: int, source_name: str, file: RemoteFile):
        return cls(index=index, source_name=source_name, status=UploadStatus.SUCCEEDED, file=file)

    @classmethod
    def fail(cls, index: int, source_name: str, error: str):
        return cls(index=index, source_name=source_name, status=UploadStatus.FAILED, error=error)


@dataclass(frozen=True)
class FileSummary:
    """Caller-facing summary of an uploaded file."""
    id: str
    name: str
    view_link: Optional[str]
    download_link: Optional[str]
    folder_id: str
    folder_name: Optional[str] = None

    @classmethod
    def from_file(cls, file: RemoteFile, folder_name: Optional[str] = None) -> "FileSummary":
        return cls(
            id=file.id,
            name=file.name,
            view_link=file.view_link,
            download_link=file.download_link,
            folder_id=file.parent_id,
            folder_name=folder_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "webViewLink": self.view_link,
            "webContentLink": self.download_link,
            "folderId": self.folder_id,
            "folderName": self.folder_name,
        }


@dataclass(frozen=True)
class ItemFailure:
    """An item that could not be processed, with the reason."""
    source_name: str
    error_message: str

    def to_dict(self) -> Dict[str, str]:
        return {"file": self.source_name, "error": self.error_message}


@dataclass(frozen=True)
class BatchCounts:
    total: int
    succeeded: int
    failed: int


class BatchOutcome(Enum):
    """Three-way classification of a batch."""
    ALL_SUCCEEDED = "all_succeeded"
    ALL_FAILED = "all_failed"
    PARTIAL_SUCCESS = "partial_success"

    @property
    def status_code(self) -> int:
        return _OUTCOME_STATUS[self]


_OUTCOME_STATUS = {
    BatchOutcome.ALL_SUCCEEDED: 201,
    BatchOutcome.ALL_FAILED: 500,
    BatchOutcome.PARTIAL_SUCCESS: 207,
}


def classify(succeeded: int, failed: int) -> BatchOutcome:
    """Classify a batch from its success/failure counts."""
    if succeeded < 0 or failed < 0:
        raise ValueError("Counts cannot be negative")
    if succeeded == 0 and failed == 0:
        raise ValueError("Cannot classify an empty batch")
    if failed == 0:
        return BatchOutcome.ALL_SUCCEEDED
    if succeeded == 0:
        return BatchOutcome.ALL_FAILED
    return BatchOutcome.PARTIAL_SUCCESS


@dataclass(frozen=True)
class BatchResult:
    """Aggregate outcome of a multi-item upload, in input order."""
    succeeded: Tuple[FileSummary, ...] = ()
    failed: Tuple[ItemFailure, ...] = ()
    permission_failures: Tuple[ItemFailure, ...] = ()

    @property
    def counts(self) -> BatchCounts:
        return BatchCounts(
            total=len(self.succeeded) + len(self.failed),
            succeeded=len(self.succeeded),
            failed=len(self.failed),
        )

    @property
    def outcome(self) -> BatchOutcome:
        return classify(len(self.succeeded), len(self.failed))

    @property
    def message(self) -> str:
        counts = self.counts
        return f"{counts.succeeded} of {counts.total} file(s) uploaded successfully"

    @classmethod
    def from_results(
        cls,
        results: List[UploadResult],
        folder_name: Optional[str] = None,
        permission_failures: Tuple[ItemFailure, ...] = (),
    ) -> "BatchResult":
        ordered = sorted(results, key=lambda r: r.index)
        return cls(
            succeeded=tuple(
                FileSummary.from_file(r.file, folder_name) for r in ordered if r.success and r.file
            ),
            failed=tuple(
                ItemFailure(r.source_name, r.error or "Unknown error") for r in ordered if not r.success
            ),
            permission_failures=tuple(permission_failures),
        )

    def to_dict(self) -> Dict[str, Any]:
        counts = self.counts
        payload: Dict[str, Any] = {
            "message": self.message,
            "outcome": self.outcome.value,
            "succeeded": [s.to_dict() for s in self.succeeded],
            "counts": {
                "total": counts.total,
                "succeeded": counts.succeeded,
                "failed": counts.failed,
            },
        }
        if self.failed:
            payload["failed"] = [f.to_dict() for f in self.failed]
        if self.permission_failures:
            payload["permission_failures"] = [f.to_dict() for f in self.permission_failures]
        return payload


@dataclass(frozen=True)
class ProvisionConfig:
    """Immutable configuration for provisioning operations."""
    access_token: Optional[str] = None
    api_url: str = "https://www.googleapis.com"
    main_folder_id: Optional[str] = None
    folder_ids_path: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    request_timeout: float = 60.0
    max_retries: int = 3

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProvisionConfig":
        """
        Build configuration from ``DRIVE_*`` environment variables.

        Raises:
            ConfigurationError: a numeric setting is malformed or not positive
        """
        env = os.environ if environ is None else environ
        return cls(
            access_token=env.get("DRIVE_ACCESS_TOKEN") or None,
            api_url=env.get("DRIVE_API_URL") or "https://www.googleapis.com",
            main_folder_id=env.get("DRIVE_ID") or None,
            folder_ids_path=env.get("DRIVE_IDS_PATH") or None,
            timezone=env.get("DRIVE_TIMEZONE") or DEFAULT_TIMEZONE,
            request_timeout=_positive_number(env, "DRIVE_REQUEST_TIMEOUT", 60.0, float),
            max_retries=_positive_number(env, "DRIVE_MAX_RETRIES", 3, int),
        )


def _positive_number(env: Mapping[str, str], key: str, default, parse):
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = parse(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}", key=key) from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{key} must be greater than zero, got {raw!r}", key=key)
    return value

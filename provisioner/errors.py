"""Exception hierarchy for provisioning and ingestion."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple


class ProvisionerError(Exception):
    """Base exception for all provisioner errors."""

    status_code: int = 500


class ValidationError(ProvisionerError):
    """Raised when input is missing or invalid, before any store call."""

    status_code = 400

    def __init__(self, message: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class ConfigurationError(ProvisionerError):
    """Raised when a required folder-id mapping or setting is absent."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class RemoteStoreError(ProvisionerError):
    """Raised when a remote store operation fails (network, auth, quota, not-found)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code or 500
        self.operation = operation


def error_payload(exc: BaseException) -> Tuple[int, Dict[str, Any]]:
    """
    Map an exception to the (status_code, body) shape shown to users.

    Validation and configuration errors surface their message and the
    offending fields (for configuration errors, the missing setting);
    remote errors surface their message with the store's status code;
    anything else becomes a generic internal error.
    """
    if isinstance(exc, ValidationError):
        body: Dict[str, Any] = {"error": str(exc)}
        if exc.fields:
            body["fields"] = list(exc.fields)
        return exc.status_code, body
    if isinstance(exc, ConfigurationError):
        body = {"error": str(exc)}
        if exc.key:
            body["fields"] = [exc.key]
        return exc.status_code, body
    if isinstance(exc, RemoteStoreError):
        return exc.status_code, {"error": str(exc) or "Internal server error"}
    return 500, {"error": "Internal server error"}

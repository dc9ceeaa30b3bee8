"""Input validation shared by workflows. Runs before any store call."""
from __future__ import annotations

from typing import Any, Collection, Iterable, Mapping, Optional, Sequence

from ..errors import ValidationError
from ..models import UploadItem

PDF_MIME_TYPES = frozenset({"application/pdf"})

EXCEL_MIME_TYPES = frozenset({
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.template",
    "application/vnd.ms-excel.sheet.macroenabled.12",
    "application/vnd.ms-excel.template.macroenabled.12",
})

# Clients without an explicit MIME type send octet-stream.
OCTET_STREAM = "application/octet-stream"


def require_item(item: Optional[UploadItem], field: str) -> UploadItem:
    if item is None:
        raise ValidationError(f'Missing file "{field}"', fields=[field])
    return item


def require_items(items: Optional[Sequence[UploadItem]], field: str) -> list:
    if not items:
        raise ValidationError(f'Missing file(s) "{field}"', fields=[field])
    return list(items)


def require_fields(values: Mapping[str, Any], *names: str) -> None:
    """Every name must map to a non-empty value."""
    missing = [name for name in names if values.get(name) in (None, "")]
    if missing:
        quoted = ", ".join(f'"{name}"' for name in missing)
        raise ValidationError(f"Missing field(s) {quoted}", fields=missing)


def require_choice(value: Optional[str], choices: Collection[str], field: str) -> str:
    if not value:
        raise ValidationError(f'Missing field "{field}"', fields=[field])
    if value not in choices:
        raise ValidationError(
            f'Invalid "{field}". Must be one of: {", ".join(sorted(choices))}',
            fields=[field],
        )
    return value


def require_mime_types(
    items: Iterable[UploadItem],
    allowed: Collection[str],
    field: str,
    kind: str,
    allow_octet_stream: bool = False,
) -> None:
    """All items must carry one of the ``allowed`` MIME types (case-insensitive)."""
    allowed_lower = {mime.lower() for mime in allowed}
    if allow_octet_stream:
        allowed_lower.add(OCTET_STREAM)
    invalid = [item.original_name for item in items if item.mime_type.lower() not in allowed_lower]
    if invalid:
        raise ValidationError(
            f"All files must be {kind}. Invalid files: {', '.join(invalid)}",
            fields=[field],
        )


def require_image(item: UploadItem, field: str = "file") -> None:
    if not item.mime_type.lower().startswith("image/"):
        raise ValidationError("The file must be an image", fields=[field])

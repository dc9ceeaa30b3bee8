"""Naming policy - canonical folder/file names. No I/O."""
from __future__ import annotations

import re
from datetime import datetime, timezone as dt_timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ConfigurationError, ValidationError
from ..models import DEFAULT_TIMEZONE
from ..protocols import IClock

_EXTENSION_RE = re.compile(r"\.[^/.]+$")
_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9\s\-_]")
_WHITESPACE_RE = re.compile(r"\s+")


def _utc_now() -> datetime:
    return datetime.now(dt_timezone.utc)


def day_folder_name(
    clock: Optional[IClock] = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> str:
    """
    Name of today's folder as ``DD-MM-YYYY`` in a fixed civil timezone.

    The host timezone never matters: the instant from ``clock`` is converted
    into ``timezone`` before formatting. Naive datetimes are read as UTC.

    Example: 23:30 UTC on 2026-02-02 is "03-02-2026" in Europe/Madrid.
    """
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {timezone}", key="timezone") from e

    now = (clock or _utc_now)()
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt_timezone.utc)
    return now.astimezone(zone).strftime("%d-%m-%Y")


def sanitize_name(raw: str) -> str:
    """
    Clean folder name derived from an arbitrary string (file name, label...).

    Strips a trailing extension, turns every character outside letters,
    digits, space, hyphen and underscore into a space, then joins the
    remaining words with single underscores.

    Example: "Informe Q1 (2025).xlsx" -> "Informe_Q1_2025"
    """
    if not raw:
        return ""
    value = _EXTENSION_RE.sub("", str(raw))
    value = _DISALLOWED_RE.sub(" ", value).strip()
    return _WHITESPACE_RE.sub("_", value)


def year_month_path(year: Union[int, str], month: Union[int, str]) -> Tuple[str, str]:
    """Folder names for the year -> month levels, e.g. ("2025", "03")."""
    fields = []
    try:
        year_value = int(str(year).strip())
        if not 1900 <= year_value <= 9999:
            raise ValueError(year)
    except ValueError:
        fields.append("year")
        year_value = 0
    try:
        month_value = int(str(month).strip())
        if not 1 <= month_value <= 12:
            raise ValueError(month)
    except ValueError:
        fields.append("month")
        month_value = 0

    if fields:
        raise ValidationError(f"Invalid {' and '.join(fields)}", fields=fields)
    return str(year_value), f"{month_value:02d}"

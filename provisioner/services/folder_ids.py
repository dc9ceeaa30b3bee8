"""Folder id registry - logical folder keys to concrete root folder ids."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


# Known logical keys and their human-readable labels.
FOLDER_LABELS: Dict[str, str] = {
    "imgs_alertas": "Alert images",
    "sw_prototipos": "SW prototypes",
    "versace_prototipos": "Versace prototypes",
    "sw_pedidos": "SW orders",
    "versace_pedidos": "Versace orders",
    "intrastat_ventas": "Intrastat sales",
    "intrastat_compras": "Intrastat purchases",
    "nominas_asesorias": "Payroll advisory",
    "nominas_nominas": "Payroll summaries",
    "inventario": "Inventory",
    "situacion_pedidos_pdf": "Order status PDF",
    "situacion_pedidos_dirma": "Order status DIRMA",
    "situacion_pedidos_versace": "Order status Versace",
    "situacion_pedidos_erp": "Order status ERP",
    "situacion_pedidos_sw": "Order status SW",
}


class FolderIdRegistry:
    """
    Static mapping of logical folder keys to root folder ids.

    A missing key is only an error when something asks for it.
    """

    def __init__(self, folder_ids: Optional[Mapping[str, str]] = None):
        self._folder_ids: Dict[str, str] = dict(folder_ids or {})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FolderIdRegistry":
        """Load the mapping from a JSON object file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Could not read folder ids file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in folder ids file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Folder ids file {path} must contain a JSON object")

        logger.debug(f"Loaded {len(data)} folder id(s) from {path}")
        return cls({str(k): str(v) for k, v in data.items() if v})

    def __contains__(self, key: str) -> bool:
        return bool(self._folder_ids.get(key))

    def get(self, key: str) -> str:
        """Folder id for ``key``; raises ConfigurationError if it is not configured."""
        folder_id = self._folder_ids.get(key)
        if not folder_id:
            label = FOLDER_LABELS.get(key, key)
            raise ConfigurationError(
                f'Missing folder id "{label}" (key: {key}) in folder ids configuration',
                key=key,
            )
        return folder_id

    def keys(self):
        return self._folder_ids.keys()

"""Tests for error mapping and folder id registry."""
import json

import pytest

from provisioner.errors import (
    ConfigurationError,
    ProvisionerError,
    RemoteStoreError,
    ValidationError,
    error_payload,
)
from provisioner.services.folder_ids import FolderIdRegistry


class TestErrorPayload:
    def test_validation_error(self):
        status, body = error_payload(ValidationError("Missing file(s)", fields=["files"]))
        assert status == 400
        assert body == {"error": "Missing file(s)", "fields": ["files"]}

    def test_configuration_error_names_missing_key(self):
        status, body = error_payload(ConfigurationError("Missing folder id", key="inventario"))
        assert status == 500
        assert body == {"error": "Missing folder id", "fields": ["inventario"]}

    def test_configuration_error_without_key(self):
        status, body = error_payload(ConfigurationError("Bad settings"))
        assert status == 500
        assert body == {"error": "Bad settings"}

    def test_remote_error_keeps_status(self):
        status, body = error_payload(RemoteStoreError("Rate limit exceeded", status_code=429))
        assert status == 429
        assert body["error"] == "Rate limit exceeded"

    def test_remote_error_default_status(self):
        assert RemoteStoreError("boom").status_code == 500

    def test_unknown_error_hidden(self):
        status, body = error_payload(KeyError("secret"))
        assert status == 500
        assert body == {"error": "Internal server error"}

    def test_hierarchy(self):
        for exc in (ValidationError("x"), ConfigurationError("x"), RemoteStoreError("x")):
            assert isinstance(exc, ProvisionerError)


class TestFolderIdRegistry:
    def test_get(self):
        registry = FolderIdRegistry({"inventario": "inv-1"})
        assert registry.get("inventario") == "inv-1"
        assert "inventario" in registry
        assert "imgs_alertas" not in registry

    def test_missing_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            FolderIdRegistry().get("imgs_alertas")
        assert exc_info.value.key == "imgs_alertas"
        assert "Alert images" in str(exc_info.value)

    def test_empty_value_is_missing(self):
        with pytest.raises(ConfigurationError):
            FolderIdRegistry({"inventario": ""}).get("inventario")

    def test_from_file(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text(json.dumps({"inventario": "inv-1", "sw_pedidos": "sw-1"}), encoding="utf-8")

        registry = FolderIdRegistry.from_file(path)

        assert sorted(registry.keys()) == ["inventario", "sw_pedidos"]

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Could not read"):
            FolderIdRegistry.from_file(tmp_path / "nope.json")

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            FolderIdRegistry.from_file(path)

    def test_from_file_not_object(self, tmp_path):
        path = tmp_path / "ids.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="JSON object"):
            FolderIdRegistry.from_file(path)

"""Tests for provisioner models."""
import pytest

from provisioner.errors import ConfigurationError, ValidationError
from provisioner.models import (
    DEFAULT_TIMEZONE,
    FOLDER_MIME_TYPE,
    BatchOutcome,
    BatchResult,
    FileMetadata,
    FileSummary,
    FolderTreeSpec,
    ItemFailure,
    ProvisionConfig,
    RemoteFile,
    UploadItem,
    UploadResult,
    UploadStatus,
)
from provisioner.services import naming


def _file(name: str, file_id: str = "f1") -> RemoteFile:
    return RemoteFile(
        id=file_id,
        name=name,
        mime_type="application/pdf",
        parent_id="folder-1",
        download_link="https://dl",
        view_link="https://view",
    )


class TestFolderTreeSpec:
    def test_from_dict(self):
        spec = FolderTreeSpec.from_dict(
            {"name": " A ", "children": [{"name": "B", "children": [{"name": "C"}]}, {"name": "D"}]}
        )
        assert spec.name == "A"
        assert [c.name for c in spec.children] == ["B", "D"]
        assert spec.children[0].children[0].name == "C"
        assert spec.count() == 4

    def test_children_optional(self):
        assert FolderTreeSpec.from_dict({"name": "Solo"}) == FolderTreeSpec("Solo")

    def test_missing_name(self):
        with pytest.raises(ValidationError) as exc_info:
            FolderTreeSpec.from_dict({"name": "A", "children": [{"name": "B"}, {"children": []}]})
        assert exc_info.value.fields == ("structure.children[1].name",)

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            FolderTreeSpec.from_dict({"name": "   "})

    def test_children_must_be_list(self):
        with pytest.raises(ValidationError) as exc_info:
            FolderTreeSpec.from_dict({"name": "A", "children": "B"})
        assert exc_info.value.fields == ("structure.children",)

    def test_node_must_be_object(self):
        with pytest.raises(ValidationError):
            FolderTreeSpec.from_dict({"name": "A", "children": ["B"]})


class TestUploadItem:
    def test_from_path_guesses_mime(self, tmp_path):
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.7")

        item = UploadItem.from_path(path)

        assert item.original_name == "report.pdf"
        assert item.mime_type == "application/pdf"
        assert item.size == 8

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.zzz-unknown"
        path.write_bytes(b"x")
        assert UploadItem.from_path(path).mime_type == "application/octet-stream"

    def test_from_path_explicit_mime(self, tmp_path):
        path = tmp_path / "sheet"
        path.write_bytes(b"x")
        assert UploadItem.from_path(path, "application/vnd.ms-excel").mime_type == "application/vnd.ms-excel"

    def test_payload_not_in_repr(self):
        item = UploadItem("a.pdf", "application/pdf", b"secret-bytes")
        assert "secret-bytes" not in repr(item)


class TestUploadResult:
    def test_ok(self):
        result = UploadResult.ok(0, "a.pdf", _file("a.pdf"))
        assert result.success is True
        assert result.status is UploadStatus.SUCCEEDED

    def test_fail(self):
        result = UploadResult.fail(1, "b.pdf", "boom")
        assert result.success is False
        assert result.error == "boom"


class TestBatchResult:
    def test_from_results_sorts_by_index(self):
        results = [
            UploadResult.fail(2, "c.pdf", "boom"),
            UploadResult.ok(1, "b.pdf", _file("b.pdf", "f2")),
            UploadResult.ok(0, "a.pdf", _file("a.pdf", "f1")),
        ]

        batch = BatchResult.from_results(results, folder_name="03")

        assert [s.name for s in batch.succeeded] == ["a.pdf", "b.pdf"]
        assert batch.failed == (ItemFailure("c.pdf", "boom"),)
        assert batch.outcome is BatchOutcome.PARTIAL_SUCCESS

    def test_permissions_granted_counts_as_success(self):
        granted = UploadResult(0, "a.pdf", UploadStatus.PERMISSIONS_GRANTED, file=_file("a.pdf"))
        batch = BatchResult.from_results([granted])
        assert batch.outcome is BatchOutcome.ALL_SUCCEEDED

    def test_to_dict(self):
        batch = BatchResult(
            succeeded=(FileSummary.from_file(_file("a.pdf"), "RESUMEN"),),
            failed=(ItemFailure("b.pdf", "quota"),),
        )

        payload = batch.to_dict()

        assert payload["message"] == "1 of 2 file(s) uploaded successfully"
        assert payload["outcome"] == "partial_success"
        assert payload["counts"] == {"total": 2, "succeeded": 1, "failed": 1}
        assert payload["succeeded"] == [
            {
                "id": "f1",
                "name": "a.pdf",
                "webViewLink": "https://view",
                "webContentLink": "https://dl",
                "folderId": "folder-1",
                "folderName": "RESUMEN",
            }
        ]
        assert payload["failed"] == [{"file": "b.pdf", "error": "quota"}]
        assert "permission_failures" not in payload


class TestFileMetadata:
    def test_is_folder(self):
        assert FileMetadata("id", "A", FOLDER_MIME_TYPE).is_folder is True
        assert FileMetadata("id", "a.pdf", "application/pdf").is_folder is False

    def test_to_dict(self):
        meta = FileMetadata("id", "A", FOLDER_MIME_TYPE, ("p1",), drive_id="d1")
        assert meta.to_dict()["parents"] == ["p1"]
        assert meta.to_dict()["driveId"] == "d1"


class TestProvisionConfig:
    def test_defaults(self):
        config = ProvisionConfig.from_env({})
        assert config.api_url == "https://www.googleapis.com"
        assert config.timezone == "Europe/Madrid"
        assert config.request_timeout == 60.0
        assert config.main_folder_id is None

    def test_from_env(self):
        config = ProvisionConfig.from_env(
            {
                "DRIVE_ACCESS_TOKEN": "tok",
                "DRIVE_API_URL": "http://localhost:8080",
                "DRIVE_ID": "main",
                "DRIVE_IDS_PATH": "/etc/ids.json",
                "DRIVE_TIMEZONE": "UTC",
                "DRIVE_REQUEST_TIMEOUT": "15",
            }
        )
        assert config.access_token == "tok"
        assert config.api_url == "http://localhost:8080"
        assert config.main_folder_id == "main"
        assert config.folder_ids_path == "/etc/ids.json"
        assert config.timezone == "UTC"
        assert config.request_timeout == 15.0

    @pytest.mark.parametrize("raw", ["soon", "0", "-5", "nan", "inf"])
    def test_invalid_timeout_rejected(self, raw):
        with pytest.raises(ConfigurationError) as exc_info:
            ProvisionConfig.from_env({"DRIVE_REQUEST_TIMEOUT": raw})
        assert exc_info.value.key == "DRIVE_REQUEST_TIMEOUT"
        assert raw in str(exc_info.value)

    def test_max_retries_from_env(self):
        assert ProvisionConfig.from_env({}).max_retries == 3
        assert ProvisionConfig.from_env({"DRIVE_MAX_RETRIES": "5"}).max_retries == 5

    @pytest.mark.parametrize("raw", ["2.5", "many", "0"])
    def test_invalid_max_retries_rejected(self, raw):
        with pytest.raises(ConfigurationError) as exc_info:
            ProvisionConfig.from_env({"DRIVE_MAX_RETRIES": raw})
        assert exc_info.value.key == "DRIVE_MAX_RETRIES"

    def test_default_timezone_shared_with_naming(self):
        assert ProvisionConfig().timezone == DEFAULT_TIMEZONE
        assert naming.DEFAULT_TIMEZONE is DEFAULT_TIMEZONE

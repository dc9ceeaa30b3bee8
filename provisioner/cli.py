"""Command line interface for provisioner package."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from rich.logging import RichHandler

from .cli_output import (
    render_batch_result,
    render_configuration_summary,
    render_error,
    render_folder,
    render_metadata,
    render_tree,
)
from .errors import ConfigurationError, ProvisionerError, error_payload
from .models import BatchOutcome, FolderTreeSpec, ProvisionConfig, UploadItem, UploadMode
from .orchestrator import ProvisioningService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if not debug and not log_level:
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _require_parent(parent: Optional[str], config: ProvisionConfig) -> str:
    """Explicit --parent, else the configured main folder."""
    value = parent or config.main_folder_id
    if not value:
        raise CLIError("no parent folder: pass --parent or set DRIVE_ID")
    return value


def _read_tree_spec(path: Path) -> FolderTreeSpec:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"could not read tree spec {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CLIError(f"tree spec {path} is not valid JSON: {exc}") from exc
    # Accept both a bare node and the {"structure": {...}} request shape
    if isinstance(data, dict) and "structure" in data and "name" not in data:
        data = data["structure"]
    return FolderTreeSpec.from_dict(data)


def _read_upload_items(paths: Sequence[Path]) -> List[UploadItem]:
    items = []
    for path in paths:
        path = Path(path).expanduser()
        if not path.is_file():
            raise CLIError(f"not a file: {path}")
        items.append(UploadItem.from_path(path))
    return items


async def _run_resolve(args: argparse.Namespace, config: ProvisionConfig) -> int:
    parent_id = _require_parent(args.parent, config)
    async with ProvisioningService(config) as service:
        folder_id = await service.resolve_folder(args.name, parent_id)
    render_folder(folder_id, args.name, parent_id)
    return EXIT_OK


async def _run_tree(args: argparse.Namespace, config: ProvisionConfig) -> int:
    spec = _read_tree_spec(args.spec)
    async with ProvisioningService(config) as service:
        result = await service.build_tree_with_paths(spec, args.parent)
    render_tree(spec, result.root_id, result.created)
    return EXIT_OK


async def _run_upload(args: argparse.Namespace, config: ProvisionConfig) -> int:
    items = _read_upload_items(args.files)
    mode = UploadMode.SEQUENTIAL if args.sequential else UploadMode.CONCURRENT

    async with ProvisioningService(config) as service:
        if args.key:
            folder_id = service.folder_ids.get(args.key)
        else:
            folder_id = _require_parent(args.parent, config)
        folder_name = None

        if args.day_folder:
            day_folder = await service.resolve_day_folder(folder_id)
            folder_id, folder_name = day_folder.id, day_folder.name

        logger.info(f"Uploading {len(items)} file(s) to {folder_id} ({mode.value})")
        result = await service.upload_batch(
            items, folder_id, mode=mode, make_public=args.public, folder_name=folder_name
        )

    render_batch_result(result)
    if result.outcome is BatchOutcome.ALL_SUCCEEDED:
        return EXIT_OK
    if result.outcome is BatchOutcome.PARTIAL_SUCCESS:
        return EXIT_PARTIAL
    return EXIT_ERROR


async def _run_check(args: argparse.Namespace, config: ProvisionConfig) -> int:
    async with ProvisioningService(config) as service:
        metadata = await service.check(args.file_id)
    render_metadata(metadata)
    return EXIT_OK


_COMMANDS = {
    "resolve": _run_resolve,
    "tree": _run_tree,
    "upload": _run_upload,
    "check": _run_check,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drive-provision",
        description="Provision Drive folders and upload batches of files.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="drive-provision (from provisioner)",
    )

    sub = parser.add_subparsers(dest="command")

    resolve = sub.add_parser("resolve", help="Find or create one folder")
    resolve.add_argument("name", help="Folder name")
    resolve.add_argument("--parent", default=None, help="Parent folder id (default: DRIVE_ID)")

    tree = sub.add_parser("tree", help="Create a folder tree from a JSON file")
    tree.add_argument("spec", type=Path, help='JSON file: {"name": ..., "children": [...]}')
    tree.add_argument("--parent", default=None, help="Parent folder id (default: DRIVE_ID)")

    upload = sub.add_parser("upload", help="Upload files into one folder")
    upload.add_argument("files", nargs="+", type=Path, help="Local files to upload")
    target = upload.add_mutually_exclusive_group()
    target.add_argument("-k", "--key", default=None, help="Folder key from DRIVE_IDS_PATH")
    target.add_argument("--parent", default=None, help="Target folder id (default: DRIVE_ID)")
    upload.add_argument(
        "--day-folder",
        action="store_true",
        help="Upload into today's DD-MM-YYYY subfolder of the target",
    )
    upload.add_argument("--sequential", action="store_true", help="Upload one file at a time")
    upload.add_argument("--public", action="store_true", help="Grant public read access to uploads")

    check = sub.add_parser("check", help="Show metadata of a file or folder")
    check.add_argument("file_id", help="File or folder id")

    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            render_error(str(exc))
            return EXIT_ERROR

    effective_log_mode = _setup_logging(debug=args.debug, log_level=args.log_level)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        config = ProvisionConfig.from_env()
    except ConfigurationError as exc:
        render_error(str(exc))
        return EXIT_ERROR

    if args.debug or args.log_level:
        render_configuration_summary(
            {
                "Command": args.command,
                "API": config.api_url,
                "Main Folder": config.main_folder_id or "(unset)",
                "Folder IDs": config.folder_ids_path or "(unset)",
                "Timezone": config.timezone,
                "Timeout": f"{config.request_timeout:g}s",
                "Retries": str(config.max_retries),
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(_COMMANDS[args.command](args, config))
    except CLIError as exc:
        render_error(str(exc))
        return EXIT_ERROR
    except ProvisionerError as exc:
        status, payload = error_payload(exc)
        render_error(f"{payload['error']} (status {status})")
        return EXIT_ERROR
    except KeyboardInterrupt:
        render_error("Cancelled.")
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()

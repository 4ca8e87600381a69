"""Export operations shared by the CLI commands.

Every operation runs serially, one S3 call per partition path, each behind
the credential manager's refresh check. A failure stops the command;
paths already processed are left as they are.
"""

from pathlib import Path
from typing import Iterator, Optional

from enriched_events.core import get_logger, get_tracer
from enriched_events.credentials import CredentialManager
from enriched_events.objectstorage.s3_operations import (
    S3ClientConfig,
    S3ClientManager,
    SyncResult,
    list_prefix,
    sync_prefix,
)
from enriched_events.partitions import PathSet, build_path_set
from enriched_events.schemas import ExportFilter

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def authenticate(credentials: CredentialManager) -> list[str]:
    """Fetch a new temporary credential and return its export lines."""
    credentials.refresh()
    return credentials.export_lines()


def resolve_paths(
    credentials: CredentialManager,
    export_filter: ExportFilter,
    account_id: Optional[str] = None,
    bucket: Optional[str] = None,
) -> PathSet:
    """Resolve the base path and build the partition paths for a filter."""
    base_path = credentials.resolve_base_path(account_id=account_id, bucket=bucket)
    return build_path_set(base_path, export_filter)


def build_s3_manager(
    credentials: CredentialManager, config: Optional[S3ClientConfig] = None
) -> S3ClientManager:
    """Create an S3 client manager backed by the credential manager."""
    config = config or S3ClientConfig(region_name=credentials.settings.region_name)
    provider = credentials.as_provider()
    if provider is not None:
        config = config.model_copy(update={"credential_provider": provider})
    return S3ClientManager(config)


def list_exports(
    credentials: CredentialManager,
    s3: S3ClientManager,
    paths: PathSet,
    recursive: bool = False,
) -> Iterator[tuple[str, list[str]]]:
    """List each partition path in turn.

    With recursive, every object below each path is listed.

    Yields:
        (absolute path, entries) pairs in path order
    """
    for _, absolute in paths:
        with tracer.start_as_current_span("exports.list", attributes={"path": absolute}):
            entries = credentials.run(
                list_prefix, absolute, s3, recursive=recursive
            )
        yield absolute, entries


def load_exports(
    credentials: CredentialManager,
    s3: S3ClientManager,
    paths: PathSet,
    output_dir: str = ".",
) -> Iterator[SyncResult]:
    """Sync each partition path into a subdirectory of output_dir.

    The subdirectory mirrors the relative partition path.
    """
    root = Path(output_dir)
    for relative, absolute in paths:
        destination = root / relative if relative else root
        with tracer.start_as_current_span("exports.load", attributes={"path": absolute}):
            result = credentials.run(sync_prefix, absolute, str(destination), s3)
        logger.info(
            "Partition loaded",
            s3_path=absolute,
            destination=str(destination),
            downloaded=len(result.downloaded),
        )
        yield result

"""Client for partitioned enriched event exports.

This package exchanges a vendor API token for temporary S3 credentials,
derives the account's base path in the export bucket, and lists or
downloads partitioned data below it.

Key Features:
    - Temporary credential exchange with cached refresh
    - Partition path construction from type, date range and partition filters
    - Serial listing and syncing of S3 prefixes
    - CLI interface

Usage:
    >>> from enriched_events import CredentialManager, ExportFilter, resolve_paths
    >>> credentials = CredentialManager(token="...")
    >>> paths = resolve_paths(credentials, ExportFilter(type="decisions"))
"""

__version__ = "0.1.0"

from .credentials import CredentialManager
from .objectstorage import (
    S3ClientConfig,
    S3ClientManager,
    SyncResult,
    list_prefix,
    sync_prefix,
)
from .partitions import (
    PathSet,
    build_absolute_paths,
    build_path_set,
    build_relative_paths,
    compute_date_range,
    incr_day,
)
from .schemas import Credential, ExportFilter
from .unified import (
    authenticate,
    build_s3_manager,
    list_exports,
    load_exports,
    resolve_paths,
)

__all__ = [
    # Credentials
    "Credential",
    "CredentialManager",
    # Partition paths
    "ExportFilter",
    "PathSet",
    "build_absolute_paths",
    "build_path_set",
    "build_relative_paths",
    "compute_date_range",
    "incr_day",
    # Object storage
    "S3ClientConfig",
    "S3ClientManager",
    "SyncResult",
    "list_prefix",
    "sync_prefix",
    # Export operations
    "authenticate",
    "build_s3_manager",
    "list_exports",
    "load_exports",
    "resolve_paths",
]

"""Object storage operations for the export bucket."""

from .s3_operations import (
    S3ClientConfig,
    S3ClientManager,
    SyncResult,
    list_prefix,
    sync_prefix,
)

__all__ = [
    "S3ClientConfig",
    "S3ClientManager",
    "SyncResult",
    "list_prefix",
    "sync_prefix",
]

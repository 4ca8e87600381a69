"""Export operations combining credentials, partition paths and S3."""

from .export_operations import (
    authenticate,
    build_s3_manager,
    list_exports,
    load_exports,
    resolve_paths,
)

__all__ = [
    "authenticate",
    "build_s3_manager",
    "list_exports",
    "load_exports",
    "resolve_paths",
]

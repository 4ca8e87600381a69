"""S3 operations for listing and downloading export partitions.

Credentials are resolved by the S3ClientManager in this order:
    1. An injected credential provider (temporary credentials from the
       token exchange, refreshed on expiry)
    2. An AWS CLI profile
    3. Explicit access keys, optionally with a session token
    4. The default boto3 credential chain
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import boto3
import botocore.session
from botocore.credentials import RefreshableCredentials
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field

from enriched_events.core import get_logger
from enriched_events.core.exceptions import CommandExecutionError, ValidationError

logger = get_logger(__name__)

CredentialProvider = Callable[[], Dict[str, str]]


class S3ClientConfig(BaseModel):
    """Configuration for S3 client connections."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    access_key_id: Optional[str] = Field(None, description="AWS access key ID")
    secret_access_key: Optional[str] = Field(None, description="AWS secret access key")
    session_token: Optional[str] = Field(
        None, description="AWS session token for temporary credentials"
    )
    region_name: str = Field("us-east-1", description="AWS region name")
    endpoint_url: Optional[str] = Field(
        None, description="Custom S3 endpoint URL for S3-compatible services"
    )
    aws_profile: Optional[str] = Field(
        None, description="AWS CLI profile name to use for credentials"
    )
    credential_provider: Optional[CredentialProvider] = Field(
        None, description="Callable returning refreshable temporary credentials"
    )


@dataclass
class SyncResult:
    """Outcome of syncing one prefix into a local directory."""

    s3_path: str
    destination: str
    downloaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class S3ClientManager:
    """Manages S3 client connections and provides utility methods."""

    def __init__(self, config: S3ClientConfig):
        self.config = config
        self._client = None
        logger.info("S3 client manager initialized", region=config.region_name)

    @property
    def client(self):
        """Get or create S3 client instance."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        """Create boto3 S3 client with the configured settings."""
        kwargs: Dict[str, Any] = {
            "region_name": self.config.region_name,
        }

        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.credential_provider:
            provider = self.config.credential_provider
            credentials = RefreshableCredentials.create_from_metadata(
                metadata=provider(),
                refresh_using=provider,
                method="enriched-events-token",
            )
            # Private attribute, set on a session owned by this client.
            botocore_session = botocore.session.Session()
            botocore_session._credentials = credentials
            session = boto3.Session(botocore_session=botocore_session)
            client = session.client("s3", **kwargs)  # type: ignore
            logger.info("S3 client created with temporary credentials")
        elif self.config.aws_profile:
            session = boto3.Session(profile_name=self.config.aws_profile)
            client = session.client("s3", **kwargs)  # type: ignore
            logger.info(
                "S3 client created with profile", profile=self.config.aws_profile
            )
        else:
            if self.config.access_key_id and self.config.secret_access_key:
                kwargs.update(
                    {
                        "aws_access_key_id": self.config.access_key_id,
                        "aws_secret_access_key": self.config.secret_access_key,
                    }
                )
                if self.config.session_token:
                    kwargs["aws_session_token"] = self.config.session_token
                logger.info("S3 client created with explicit credentials")
            else:
                logger.info("S3 client created with default credential chain")

            client = boto3.client("s3", **kwargs)  # type: ignore

        return client

    @staticmethod
    def parse_s3_path(s3_path: str) -> tuple[str, str]:
        """Parse S3 path into bucket and prefix components."""
        if not s3_path.startswith("s3://"):
            raise ValidationError(f"S3 path must start with 's3://': {s3_path}")

        parsed = urlparse(s3_path)
        bucket = parsed.netloc
        prefix = parsed.path.lstrip("/")

        if not bucket:
            raise ValidationError(f"Invalid S3 path, missing bucket: {s3_path}")

        logger.debug("S3 path parsed", bucket=bucket, prefix=prefix)
        return bucket, prefix


def list_prefix(
    s3_path: str, manager: S3ClientManager, recursive: bool = False
) -> list[str]:
    """List sub-prefixes and objects under an S3 prefix.

    Args:
        s3_path: S3 prefix in format s3://bucket/prefix/
        manager: S3 client manager
        recursive: List every object below the prefix instead of one level

    Returns:
        Full S3 paths, sub-prefixes first, each group in key order
    """
    logger.info("Listing S3 prefix", s3_path=s3_path, recursive=recursive)
    bucket, prefix = S3ClientManager.parse_s3_path(s3_path)

    try:
        paginator = manager.client.get_paginator("list_objects_v2")
        kwargs: Dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if not recursive:
            kwargs["Delimiter"] = "/"

        prefixes = []
        objects = []
        for page in paginator.paginate(**kwargs):
            for prefix_info in page.get("CommonPrefixes", []):
                prefixes.append(f"s3://{bucket}/{prefix_info['Prefix']}")
            for obj in page.get("Contents", []):
                objects.append(f"s3://{bucket}/{obj['Key']}")

        logger.info(
            "S3 prefix listed",
            bucket=bucket,
            prefix=prefix,
            prefix_count=len(prefixes),
            object_count=len(objects),
        )
        return prefixes + objects

    except (BotoCoreError, ClientError) as e:
        error_msg = f"Failed to list S3 prefix '{s3_path}': {e}"
        logger.error(error_msg, error=str(e))
        raise CommandExecutionError(error_msg)


def sync_prefix(
    s3_path: str, destination: str, manager: S3ClientManager
) -> SyncResult:
    """Download every object under a prefix into a local directory.

    Objects whose local copy already has the same size are skipped, as are
    keys that would resolve outside the destination.
    The destination directory is created if it does not exist.
    """
    logger.info("Syncing S3 prefix", s3_path=s3_path, destination=destination)
    bucket, prefix = S3ClientManager.parse_s3_path(s3_path)
    root = Path(destination)
    root.mkdir(parents=True, exist_ok=True)
    resolved_root = root.resolve()
    result = SyncResult(s3_path=s3_path, destination=str(root))

    try:
        paginator = manager.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                relative = key[len(prefix):].lstrip("/")
                if not relative or key.endswith("/"):
                    continue

                target = root / relative
                if not target.resolve().is_relative_to(resolved_root):
                    logger.warning(
                        "Skipping object outside destination",
                        key=key,
                        destination=str(root),
                    )
                    continue

                if target.is_file() and target.stat().st_size == obj.get("Size"):
                    result.skipped.append(key)
                    continue

                target.parent.mkdir(parents=True, exist_ok=True)
                manager.client.download_file(bucket, key, os.fspath(target))
                result.downloaded.append(key)

    except (BotoCoreError, ClientError) as e:
        error_msg = f"Failed to sync S3 prefix '{s3_path}': {e}"
        logger.error(error_msg, error=str(e))
        raise CommandExecutionError(error_msg)

    logger.info(
        "S3 prefix synced",
        bucket=bucket,
        prefix=prefix,
        downloaded=len(result.downloaded),
        skipped=len(result.skipped),
    )
    return result

"""Data schemas for enriched-events."""

from datetime import date
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DataType = Literal["decisions", "events"]
DATA_TYPES: tuple[str, ...] = ("decisions", "events")


class Credential(BaseModel):
    """Temporary S3 credentials issued by the token-exchange endpoint."""

    model_config = ConfigDict(frozen=True, str_min_length=1)

    access_key_id: str = Field(..., description="AWS access key ID")
    secret_access_key: str = Field(..., description="AWS secret access key")
    session_token: str = Field(..., description="AWS session token")
    expiration: int = Field(..., description="Expiration time in epoch millis")
    base_path: str = Field(..., description="Account scoped S3 base path")


class ExportFilter(BaseModel):
    """Filters narrowing the partitions a command operates on.

    ``type`` and the dates are kept as given so that they are checked by
    the path builder: type first, then the date range, and the dates only
    when a type is set.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = Field(default=None, description="decisions or events")
    start: Optional[Union[date, str]] = Field(
        default=None, description="First date, inclusive"
    )
    end: Optional[Union[date, str]] = Field(
        default=None, description="Last date, inclusive"
    )
    partition_key: Optional[str] = Field(default=None, description="Partition key")
    partition_value: Optional[str] = Field(
        default=None, description="Partition value"
    )


class _CredentialsBody(BaseModel):
    model_config = ConfigDict(str_min_length=1)

    accessKeyId: str
    secretAccessKey: str
    sessionToken: str
    expiration: int


class CredentialsResponse(BaseModel):
    """Body returned by the token-exchange endpoint."""

    model_config = ConfigDict(str_min_length=1)

    credentials: _CredentialsBody
    s3Path: str

    def to_credential(self) -> Credential:
        """Convert the wire body into a Credential."""
        base_path = self.s3Path if self.s3Path.endswith("/") else self.s3Path + "/"
        return Credential(
            access_key_id=self.credentials.accessKeyId,
            secret_access_key=self.credentials.secretAccessKey,
            session_token=self.credentials.sessionToken,
            expiration=self.credentials.expiration,
            base_path=base_path,
        )

"""Shared CLI parameter definitions.

Each alias is an ``Annotated`` type usable directly in a command
signature, so every verb exposes the same flags with the same help text.
"""

from typing import Annotated, Optional

import typer

TokenOption = Annotated[
    Optional[str],
    typer.Option(
        "--token",
        envvar="OPTIMIZELY_API_TOKEN",
        help="API token exchanged for temporary S3 credentials",
        show_envvar=True,
    ),
]

AccountIdOption = Annotated[
    Optional[str],
    typer.Option("--account-id", help="Account id, used when no token is given"),
]

BucketOption = Annotated[
    Optional[str],
    typer.Option("--bucket", help="Export bucket, used when no token is given"),
]

TypeOption = Annotated[
    Optional[str],
    typer.Option("--type", help="Data type: 'decisions' or 'events'"),
]

StartOption = Annotated[
    Optional[str],
    typer.Option("--start", help="First date to include (YYYY-MM-DD)"),
]

EndOption = Annotated[
    Optional[str],
    typer.Option("--end", help="Last date to include (YYYY-MM-DD)"),
]

DateOption = Annotated[
    Optional[str],
    typer.Option("--date", help="Single date, same as --start D --end D"),
]

PartitionKeyOption = Annotated[
    Optional[str],
    typer.Option("--partition-key", help="Partition key below the date, e.g. experiment"),
]

PartitionValueOption = Annotated[
    Optional[str],
    typer.Option("--partition-value", help="Partition value for --partition-key"),
]

OutputOption = Annotated[
    str,
    typer.Option("--output", "-o", help="Local directory to download into"),
]

RegionOption = Annotated[
    Optional[str],
    typer.Option("--region", help="AWS region name"),
]

EndpointUrlOption = Annotated[
    Optional[str],
    typer.Option("--endpoint-url", help="Custom S3 endpoint URL"),
]

AccessKeyIdOption = Annotated[
    Optional[str],
    typer.Option("--access-key-id", help="AWS access key ID (without a token)"),
]

SecretAccessKeyOption = Annotated[
    Optional[str],
    typer.Option("--secret-access-key", help="AWS secret access key (without a token)"),
]

SessionTokenOption = Annotated[
    Optional[str],
    typer.Option("--session-token", help="AWS session token (without a token)"),
]

AwsProfileOption = Annotated[
    Optional[str],
    typer.Option("--aws-profile", help="AWS CLI profile name (without a token)"),
]

RecursiveOption = Annotated[
    bool,
    typer.Option("--recursive", "-r", help="List every object below each path"),
]

VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log progress to stderr"),
]

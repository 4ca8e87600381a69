"""Command-line interface for enriched-events.

Commands:
    - help: Show usage
    - auth: Exchange the API token for temporary credentials and print
      them as shell ``export`` lines
    - paths: Print the S3 paths matching the filters
    - ls: List the contents of each matching S3 path
    - load: Download each matching S3 path into a local directory

Filters narrow progressively: --type, then --start/--end (or --date), then
--partition-key/--partition-value. Without a type the date and partition
filters are ignored.
"""

from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyIdOption,
    AccountIdOption,
    AwsProfileOption,
    BucketOption,
    DateOption,
    EndOption,
    EndpointUrlOption,
    OutputOption,
    PartitionKeyOption,
    PartitionValueOption,
    RecursiveOption,
    RegionOption,
    SecretAccessKeyOption,
    SessionTokenOption,
    StartOption,
    TokenOption,
    TypeOption,
    VerboseOption,
)
from .core.config import settings
from .core.observability import setup_logging
from .credentials import CredentialManager
from .objectstorage import S3ClientConfig
from .schemas import ExportFilter
from .unified import (
    authenticate,
    build_s3_manager,
    list_exports,
    load_exports,
    resolve_paths,
)

USAGE = """\
usage: enriched-events <command> [options]

Commands:
  help    Show this message
  auth    Authenticate and print temporary AWS credentials as export lines
  paths   Print the S3 paths matching the filters
  ls      List the contents of the S3 paths matching the filters
  load    Download the S3 paths matching the filters

Filters:
  --type decisions|events
  --start YYYY-MM-DD [--end YYYY-MM-DD] | --date YYYY-MM-DD
  --partition-key KEY --partition-value VALUE

Authentication:
  --token TOKEN (or OPTIMIZELY_API_TOKEN), or --account-id ID [--bucket NAME]
  with AWS credentials from the options, a profile or the environment.

Examples:
  enriched-events auth
  enriched-events paths --type decisions --start 2020-07-01 --end 2020-07-03
  enriched-events ls --type events --date 2020-07-01
  enriched-events load --type decisions --date 2020-07-01 \\
      --partition-key experiment --partition-value 5678 --output ./data
"""

app = typer.Typer(
    name="enriched-events",
    help="List and download enriched event exports.",
    no_args_is_help=True,
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"enriched-events {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Enriched Events: list and download partitioned export data.
    """
    pass


def _configure_logging(verbose: bool) -> None:
    if verbose:
        setup_logging("INFO")


def _build_filter(
    data_type: Optional[str],
    start: Optional[str],
    end: Optional[str],
    date: Optional[str],
    partition_key: Optional[str],
    partition_value: Optional[str],
) -> ExportFilter:
    """Build the filter for one invocation; --date sets both ends."""
    if date:
        start = end = date
    return ExportFilter(
        type=data_type,
        start=start,
        end=end,
        partition_key=partition_key,
        partition_value=partition_value,
    )


def _build_s3_config(
    region_name: Optional[str],
    endpoint_url: Optional[str],
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    session_token: Optional[str],
    aws_profile: Optional[str],
) -> S3ClientConfig:
    return S3ClientConfig(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region_name=region_name or settings.region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
    )


@app.command("help")
def help_cmd() -> None:
    """Show usage."""
    typer.echo(USAGE, nl=False)


@app.command("auth")
def auth_cmd(
    token: TokenOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Authenticate and print temporary AWS credentials.

    The output can be evaluated by a shell:
        eval "$(enriched-events auth)"
    """
    _configure_logging(verbose)
    try:
        credentials = CredentialManager(token=token)
        lines = authenticate(credentials)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for line in lines:
        typer.echo(line)


@app.command("paths")
def paths_cmd(
    token: TokenOption = None,
    account_id: AccountIdOption = None,
    bucket: BucketOption = None,
    data_type: TypeOption = None,
    start: StartOption = None,
    end: EndOption = None,
    date: DateOption = None,
    partition_key: PartitionKeyOption = None,
    partition_value: PartitionValueOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Print the S3 paths matching the filters, one per line.

    Examples:
        enriched-events paths --type decisions --date 2020-07-01
        enriched-events paths --account-id 12345 --type events
    """
    _configure_logging(verbose)
    try:
        export_filter = _build_filter(
            data_type, start, end, date, partition_key, partition_value
        )
        credentials = CredentialManager(token=token)
        paths = resolve_paths(credentials, export_filter, account_id, bucket)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for absolute in paths.absolute:
        typer.echo(absolute)


@app.command("ls")
def ls_cmd(
    token: TokenOption = None,
    account_id: AccountIdOption = None,
    bucket: BucketOption = None,
    data_type: TypeOption = None,
    start: StartOption = None,
    end: EndOption = None,
    date: DateOption = None,
    partition_key: PartitionKeyOption = None,
    partition_value: PartitionValueOption = None,
    recursive: RecursiveOption = False,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: AwsProfileOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    List the contents of each S3 path matching the filters.

    Examples:
        enriched-events ls --type decisions --start 2020-07-01 --end 2020-07-03
    """
    _configure_logging(verbose)
    try:
        export_filter = _build_filter(
            data_type, start, end, date, partition_key, partition_value
        )
        credentials = CredentialManager(token=token)
        paths = resolve_paths(credentials, export_filter, account_id, bucket)
        s3 = build_s3_manager(
            credentials,
            _build_s3_config(
                region_name,
                endpoint_url,
                access_key_id,
                secret_access_key,
                session_token,
                aws_profile,
            ),
        )

        for absolute, entries in list_exports(
            credentials, s3, paths, recursive=recursive
        ):
            typer.echo(f"{absolute}:")
            for entry in entries:
                typer.echo(f"  {entry}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("load")
def load_cmd(
    token: TokenOption = None,
    account_id: AccountIdOption = None,
    bucket: BucketOption = None,
    data_type: TypeOption = None,
    start: StartOption = None,
    end: EndOption = None,
    date: DateOption = None,
    partition_key: PartitionKeyOption = None,
    partition_value: PartitionValueOption = None,
    output: OutputOption = ".",
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    aws_profile: AwsProfileOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Download each S3 path matching the filters.

    Each path is synced into a subdirectory of --output mirroring its
    partition path, e.g. ./data/type=decisions/date=2020-07-01/.

    Examples:
        enriched-events load --type decisions --date 2020-07-01 -o ./data
    """
    _configure_logging(verbose)
    try:
        export_filter = _build_filter(
            data_type, start, end, date, partition_key, partition_value
        )
        credentials = CredentialManager(token=token)
        paths = resolve_paths(credentials, export_filter, account_id, bucket)
        s3 = build_s3_manager(
            credentials,
            _build_s3_config(
                region_name,
                endpoint_url,
                access_key_id,
                secret_access_key,
                session_token,
                aws_profile,
            ),
        )

        for result in load_exports(credentials, s3, paths, output):
            typer.echo(
                f"{result.s3_path} -> {result.destination} "
                f"({len(result.downloaded)} downloaded, "
                f"{len(result.skipped)} up to date)"
            )
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

"""Partition path construction for the export bucket.

Data under an account's base path is laid out as Hive style partitions::

    <base>/type=<decisions|events>/date=<YYYY-MM-DD>/<key>=<value>/

Filters narrow progressively: without a type every other filter is ignored,
and without a date range the partition filter is ignored.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, Optional, Sequence, Union

from enriched_events.core import get_logger
from enriched_events.core.exceptions import RangeError, ValidationError
from enriched_events.schemas import DATA_TYPES, ExportFilter

logger = get_logger(__name__)

DateLike = Union[date, str]


@dataclass(frozen=True)
class PathSet:
    """Index-aligned relative and absolute key prefixes."""

    relative: tuple[str, ...]
    absolute: tuple[str, ...]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(zip(self.relative, self.absolute))

    def __len__(self) -> int:
        return len(self.relative)


def parse_date(value: DateLike) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date.

    Raises:
        ValidationError: If the value is not a valid ISO date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD: {e}")


def incr_day(day: DateLike) -> str:
    """Return the ISO date of the day after ``day``."""
    return (parse_date(day) + timedelta(days=1)).isoformat()


def compute_date_range(
    start: Optional[DateLike] = None, end: Optional[DateLike] = None
) -> list[date]:
    """Compute the inclusive list of dates from start to end.

    Args:
        start: First date; no date filtering when absent
        end: Last date; defaults to start

    Returns:
        Ascending list of dates, empty when start is absent

    Raises:
        RangeError: If start is after end
    """
    if start is None:
        return []

    first = parse_date(start)
    last = parse_date(end) if end is not None else first
    if first > last:
        raise RangeError(f"Start date {first} is after end date {last}")

    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def validate_type(data_type: str) -> str:
    """Check that a data type is one of the recognised values."""
    if data_type not in DATA_TYPES:
        raise ValidationError(
            f"Invalid type: {data_type}. Must be 'decisions' or 'events'"
        )
    return data_type


def build_relative_paths(
    data_type: Optional[str],
    date_range: Sequence[date],
    partition_key: Optional[str] = None,
    partition_value: Optional[str] = None,
) -> list[str]:
    """Build relative partition prefixes for a type, dates and partition."""
    if not data_type:
        if date_range or partition_key or partition_value:
            logger.warning("No type given, ignoring date and partition filters")
        return [""]

    validate_type(data_type)

    if not date_range:
        if partition_key or partition_value:
            logger.warning(
                "No date range given, ignoring partition filter",
                partition_key=partition_key,
                partition_value=partition_value,
            )
        return [f"type={data_type}"]

    suffix = ""
    if partition_key and partition_value:
        suffix = f"/{partition_key}={partition_value}"
    elif partition_key or partition_value:
        logger.warning(
            "Partition key and value must both be given, ignoring partition filter"
        )

    return [f"type={data_type}/date={day.isoformat()}{suffix}" for day in date_range]


def build_absolute_paths(base_path: str, relative_paths: Sequence[str]) -> list[str]:
    """Join each relative prefix onto the base path."""
    if not base_path.endswith("/"):
        base_path += "/"
    return [
        f"{base_path}{relative}/" if relative else base_path
        for relative in relative_paths
    ]


def build_path_set(base_path: str, export_filter: ExportFilter) -> PathSet:
    """Compute the relative and absolute prefixes for a filter.

    The type is validated before the date range so that a bad type is
    reported even when the range is also invalid.
    """
    if export_filter.type:
        validate_type(export_filter.type)
        date_range = compute_date_range(export_filter.start, export_filter.end)
    else:
        date_range = []
        if export_filter.start or export_filter.end:
            logger.warning("No type given, ignoring date range")

    relative = build_relative_paths(
        export_filter.type,
        date_range,
        export_filter.partition_key,
        export_filter.partition_value,
    )
    absolute = build_absolute_paths(base_path, relative)
    logger.info("Partition paths built", base_path=base_path, count=len(relative))
    return PathSet(relative=tuple(relative), absolute=tuple(absolute))

"""Range payloads emitted to observers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Union

OutputFormat = Literal["date", "iso"]
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("date", "iso")


@dataclass(frozen=True)
class DateRange:
    """Selected range as native instants."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class DateRangeISO:
    """Selected range as ISO-8601 strings with millisecond precision."""

    start: str
    end: str


def serialize_range(
    start: datetime, end: datetime, output_format: OutputFormat = "date"
) -> Union[DateRange, DateRangeISO]:
    """Package ``[start, end]`` in the requested output format.

    ``"date"`` returns fresh :class:`datetime` copies; ``"iso"`` returns
    ``YYYY-MM-DDTHH:MM:SS.mmm`` strings.
    """
    if output_format == "date":
        return DateRange(start=start.replace(), end=end.replace())
    if output_format == "iso":
        return DateRangeISO(
            start=start.isoformat(timespec="milliseconds"),
            end=end.isoformat(timespec="milliseconds"),
        )
    raise ValueError(f"output_format must be one of {set(OUTPUT_FORMATS)}, got {output_format!r}")

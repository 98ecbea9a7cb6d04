"""Scrape `sys.x$user_summary_by_statement_type`."""

import logging
import math
from collections.abc import Mapping, Sequence
from contextlib import aclosing
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from dbscrape.core.context import ScrapeContext
from dbscrape.core.descriptors import NAMESPACE, SYS_SCHEMA, build_fq_name
from dbscrape.core.errors import DecodeFailure, ScrapeError
from dbscrape.core.metrics import counter
from dbscrape.core.models import MetricDescriptor, Observation
from dbscrape.core.ports import DataSource, ObservationSink
from dbscrape.core.query import execute_query

logger = logging.getLogger(__name__)

SYS_USER_SUMMARY_QUERY = f"""
SELECT
    user,
    statement,
    total,
    total_latency,
    max_latency,
    lock_latency,
    rows_sent,
    rows_examined,
    rows_affected,
    full_scans
FROM
    {SYS_SCHEMA}.`x$user_summary_by_statement_type`
"""

_LABELS = ("user", "statement")

_UINT64_MAX = 2**64 - 1


def _desc(name: str, help_text: str) -> MetricDescriptor:
    return MetricDescriptor(
        name=build_fq_name(NAMESPACE, SYS_SCHEMA, name),
        help=help_text,
        label_names=_LABELS,
    )


# Emission order of every row
SYS_USER_SUMMARY_DESCRIPTORS: tuple[MetricDescriptor, ...] = (
    _desc(
        "user_total_statements",
        "The total number of occurrences of the statement event for the user",
    ),
    _desc(
        "user_statement_total_latency",
        "The total wait time of timed occurrences of the statement event for the user",
    ),
    _desc(
        "user_statement_max_latency",
        "The maximum single wait time of timed occurrences of the statement event "
        "for the user.",
    ),
    _desc(
        "user_statement_lock_latency",
        "The total time waiting for locks by timed occurrences of the statement "
        "event for the user",
    ),
    _desc(
        "rows_sent_by_user",
        "The total number of rows returned by occurrences of the statement event "
        "for the user",
    ),
    _desc(
        "rows_examined_by_user",
        "The total number of rows read from storage engines by occurrences of the "
        "statement event for the user",
    ),
    _desc(
        "rows_affected_by_user",
        "The total number of rows affected by occurrences of the statement event "
        "for the user",
    ),
    _desc(
        "full_scans_by_user",
        "The total number of full table scans by occurrences of the statement event "
        "for the user",
    ),
)


@dataclass(frozen=True)
class UserStatementRow:
    """One row of the view: a (user, statement) pair and its counters."""

    user: str
    statement: str
    total: int
    total_latency: int
    max_latency: int
    lock_latency: int
    rows_sent: int
    rows_examined: int
    rows_affected: int
    full_scans: int

    def counters(self) -> tuple[int, ...]:
        """Counter fields in descriptor order."""
        return (
            self.total,
            self.total_latency,
            self.max_latency,
            self.lock_latency,
            self.rows_sent,
            self.rows_examined,
            self.rows_affected,
            self.full_scans,
        )


_COLUMNS = (
    "user",
    "statement",
    "total",
    "total_latency",
    "max_latency",
    "lock_latency",
    "rows_sent",
    "rows_examined",
    "rows_affected",
    "full_scans",
)


def _format_number(value: int | float | Decimal) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _decode_text(column: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"column {column}: invalid UTF-8") from e
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return _format_number(value)
    raise DecodeFailure(f"column {column}: expected string, got {type(value).__name__}")


def _decode_uint64(column: str, value: Any) -> int:
    if isinstance(value, bool):
        raise DecodeFailure(f"column {column}: expected unsigned integer, got bool")
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii", errors="replace")
    if isinstance(value, int):
        number = value
    elif isinstance(value, (float, Decimal)):
        finite = value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)
        if not finite or value != int(value):
            raise DecodeFailure(f"column {column}: {value} is not an integer")
        number = int(value)
    elif isinstance(value, str):
        if not value.isascii() or not value.isdigit():
            raise DecodeFailure(f"column {column}: cannot parse {value!r} as uint64")
        number = int(value)
    else:
        raise DecodeFailure(
            f"column {column}: expected unsigned integer, got {type(value).__name__}"
        )
    if not 0 <= number <= _UINT64_MAX:
        raise DecodeFailure(f"column {column}: {number} is out of uint64 range")
    return number


def decode_row(raw: Sequence[Any]) -> UserStatementRow:
    """Decode a raw 10-column row.

    Integral floats are accepted as counters and numbers are accepted as
    text, the same conversions a typed driver scan applies.

    Raises:
        DecodeFailure: Not a row sequence, wrong column count, NULL, or a
            value of the wrong type.
    """
    if isinstance(raw, (str, bytes, bytearray, Mapping)):
        raise DecodeFailure(f"expected a row sequence, got {type(raw).__name__}")
    try:
        values = tuple(raw)
    except TypeError as e:
        raise DecodeFailure(f"expected a row sequence, got {type(raw).__name__}") from e
    if len(values) != len(_COLUMNS):
        raise DecodeFailure(f"expected {len(_COLUMNS)} columns, got {len(values)}")
    user = _decode_text(_COLUMNS[0], values[0])
    statement = _decode_text(_COLUMNS[1], values[1])
    counters = [
        _decode_uint64(column, value)
        for column, value in zip(_COLUMNS[2:], values[2:], strict=True)
    ]
    return UserStatementRow(user, statement, *counters)


def map_row(row: UserStatementRow) -> tuple[Observation, ...]:
    """Create one counter observation per counter field, labeled (user, statement).

    Values are widened to float; integers above 2**53 are rounded.
    """
    return tuple(
        counter(descriptor, float(value), row.user, row.statement)
        for descriptor, value in zip(
            SYS_USER_SUMMARY_DESCRIPTORS, row.counters(), strict=True
        )
    )


class SysUserSummaryByStatementType:
    """Per user and statement type metrics from the sys schema.

    Observations of rows fetched before a failing row stay pushed; the
    failure is then raised to the engine.
    """

    def name(self) -> str:
        return f"{SYS_SCHEMA}.user_summary_by_statement_type"

    def help_text(self) -> str:
        return (
            "Collect per user metrics from sys.x$user_summary_by_statement_type "
            "See https://dev.mysql.com/doc/refman/5.7/en/"
            "sys-user-summary-by-statement-type.html"
        )

    def version(self) -> float:
        return 5.7

    def descriptors(self) -> tuple[MetricDescriptor, ...]:
        return SYS_USER_SUMMARY_DESCRIPTORS

    async def scrape(
        self,
        ctx: ScrapeContext,
        source: DataSource,
        sink: ObservationSink,
    ) -> None:
        """Push eight observations per view row to sink, in row order."""
        logger.debug("Scraping %s", self.name())
        rows = 0
        try:
            async with aclosing(
                execute_query(ctx, source, SYS_USER_SUMMARY_QUERY, decode_row)
            ) as stream:
                async for row in stream:
                    for observation in map_row(row):
                        await ctx.guard(sink.put(observation))
                    rows += 1
        except ScrapeError as e:
            logger.warning(
                "Scrape of %s failed after %d rows: %s: %s",
                self.name(),
                rows,
                type(e).__name__,
                e,
            )
            raise
        logger.debug("Scraped %s: %d rows", self.name(), rows)

"""RFC 3339 timestamps with nanosecond precision.

Python datetimes stop at microseconds, so timestamps are carried as integer
nanoseconds since the Unix epoch (UTC) and only rendered to text here.

The text form is the one signed by leaf keys, so it must be exact:
    2026-10-18T09:30:00.123456789Z
Trailing zeros in the fraction are trimmed and the fraction is omitted
entirely when it is zero. Only the "Z" suffix is produced or accepted.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from tssig.core.errors import EncodingError

NANOS_PER_SECOND = 1_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_RFC3339_NANO_RE = re.compile(
    r"(?P<seconds>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d{1,9}))?Z"
)


def format_rfc3339_nanos(timestamp_ns: int) -> str:
    """Render epoch nanoseconds as an RFC 3339 UTC string.

    Args:
        timestamp_ns: Nanoseconds since 1970-01-01T00:00:00Z.

    Returns:
        The canonical text form.
    """
    seconds, nanos = divmod(timestamp_ns, NANOS_PER_SECOND)
    text = (_EPOCH + timedelta(seconds=seconds)).strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def parse_rfc3339_nanos(text: str) -> int:
    """Parse the canonical RFC 3339 UTC form back to epoch nanoseconds.

    Raises:
        EncodingError: If the text is not in canonical form.
    """
    match = _RFC3339_NANO_RE.fullmatch(text)
    if match is None:
        msg = f"Invalid RFC 3339 UTC timestamp: {text!r}"
        raise EncodingError(msg)

    try:
        parsed = datetime.strptime(match["seconds"], "%Y-%m-%dT%H:%M:%S").replace(tzinfo=UTC)
    except ValueError as e:
        msg = f"Invalid RFC 3339 UTC timestamp: {text!r}"
        raise EncodingError(msg) from e

    delta = parsed - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    fraction = match["fraction"] or ""
    nanos = int(fraction.ljust(9, "0")) if fraction else 0
    return seconds * NANOS_PER_SECOND + nanos


def to_datetime(timestamp_ns: int) -> datetime:
    """Convert epoch nanoseconds to an aware datetime (microseconds, truncated)."""
    return _EPOCH + timedelta(microseconds=timestamp_ns // 1000)

"""Serve cached artifacts with single byte-range support."""

import re
from typing import Optional, Union

from fastapi.responses import Response

from ..models.cache import CacheEntry

DEFAULT_MAX_AGE = 900

# Positions beyond 19 digits cannot address a real body and are treated as malformed
_RANGE_SPEC = re.compile(r"^\s*([0-9]{0,19})\s*-\s*([0-9]{0,19})\s*$")


class Unsatisfiable:
    """Marker for a syntactically valid range that lies outside the body."""


UNSATISFIABLE = Unsatisfiable()


def parse_range(header: Optional[str], size: int) -> Union[None, tuple[int, int], Unsatisfiable]:
    """Resolve a ``Range`` header against a body of ``size`` bytes.

    Returns an inclusive ``(start, end)`` pair, ``UNSATISFIABLE``, or None when
    the header is absent or malformed. Only the first range of a multi-range
    header is honoured.
    """
    if not header:
        return None
    unit, sep, ranges = header.partition("=")
    if not sep or unit.strip().lower() != "bytes":
        return None

    match = _RANGE_SPEC.match(ranges.split(",", 1)[0])
    if not match:
        return None
    first, last = match.groups()

    if not first:
        if not last:
            return None
        suffix = int(last)
        if suffix == 0 or size == 0:
            return UNSATISFIABLE
        return (max(size - suffix, 0), size - 1)

    start = int(first)
    end = int(last) if last else size - 1
    if last and end < start:
        return None
    if start >= size:
        return UNSATISFIABLE
    return (start, min(end, size - 1))


def respond(
    entry: CacheEntry,
    range_header: Optional[str] = None,
    max_age: int = DEFAULT_MAX_AGE,
    filename: Optional[str] = None,
) -> Response:
    size = entry.size_bytes
    headers = {
        "Accept-Ranges": "bytes",
        "Cache-Control": f"max-age={max_age}",
    }
    if filename:
        headers["Content-Disposition"] = f'inline; filename="{filename}"'

    byte_range = parse_range(range_header, size)
    if byte_range is UNSATISFIABLE:
        headers["Content-Range"] = f"bytes */{size}"
        return Response(status_code=416, headers=headers)

    if byte_range is None:
        return Response(
            content=entry.content,
            status_code=200,
            media_type=entry.content_type,
            headers=headers,
        )

    start, end = byte_range
    headers["Content-Range"] = f"bytes {start}-{end}/{size}"
    return Response(
        content=entry.content[start:end + 1],
        status_code=206,
        media_type=entry.content_type,
        headers=headers,
    )

"""Boundary checks for records returned by the OverDrive API.

Search results and metadata are passed through as plain dicts, so the only
guarantee the merge step needs, a usable `id`, is enforced here.
"""

from __future__ import annotations

import typing

from loguru import logger


def record_id(record: typing.Any) -> str | None:
    """Return the record's `id` as a non-empty string, or None.

    - Non-dict inputs have no id.
    - Numeric ids are coerced to strings.
    - Blank strings are treated as missing.
    """
    if not isinstance(record, dict):
        return None
    value = record.get("id")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_ids(records: typing.Iterable[typing.Any], source: str) -> list[dict]:
    """Keep only records that carry an id, logging each one dropped.

    Args:
        records: Iterable of decoded JSON records.
        source: Label for the origin of the records, used in log messages.

    Returns:
        list[dict]: The records with a usable `id`, in their original order.

    """
    out = []
    for record in records or []:
        if record_id(record) is None:
            logger.warning("Dropping {} record without id: {!r}", source, record)
            continue
        out.append(record)
    return out

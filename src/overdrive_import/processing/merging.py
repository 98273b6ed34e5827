"""Merge product search summaries with bulk metadata records.

The search endpoint returns a page of product summaries and the bulk metadata
endpoint returns richer records for the same ids. `merge_records` joins them
on `id`, keeping the page order of the product summaries.
"""

from __future__ import annotations

from typing import Any

from overdrive_import.utils.validation import record_id


def merge_records(
    metadata_records: list[dict[str, Any]], products: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Left-join metadata onto products by id.

    Metadata fields overwrite product fields of the same name; other fields
    are added. Metadata for ids absent from `products` is ignored.

    Args:
        metadata_records (list[dict]): Records from the bulk metadata endpoint.
        products (list[dict]): Product summaries from the search endpoint.

    Returns:
        list[dict]: One merged record per distinct product id, in product order.

    """
    combined: dict[str, dict[str, Any]] = {}
    for product in products:
        key = record_id(product)
        if key is not None:
            combined[key] = dict(product)

    for meta in metadata_records:
        target = combined.get(record_id(meta))
        if target is not None:
            target.update(meta)

    return list(combined.values())


def chunk_ids(ids: list[str], size: int):
    """Yield successive slices of `ids` of at most `size` elements."""
    for i in range(0, len(ids), size):
        yield ids[i : i + size]

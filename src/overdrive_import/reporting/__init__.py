"""Reporting module exporting convenience helpers for batch output.

This package exposes the helpers that write import batches and resolve their
public URLs.
"""

from .export import remove_batch as remove_batch
from .export import write_batch as write_batch

"""Processing package exports.

Expose the cursor, merging and keyword modules for convenient import.
"""

from overdrive_import.processing import cursor, keywords, merging

__all__ = ["cursor", "keywords", "merging"]

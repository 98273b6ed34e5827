"""Typed models for OverDrive API payloads and import bookkeeping.

Expose dataclass models and helper configs used across the project.
"""

from .overdrive import (
    AccessToken,
    ImportCursorState,
    KeywordSet,
    LibraryAccount,
    LibraryConfig,
    ProductPage,
    SearchQuery,
    production_config,
)

__all__ = [
    "AccessToken",
    "ImportCursorState",
    "KeywordSet",
    "LibraryAccount",
    "LibraryConfig",
    "ProductPage",
    "SearchQuery",
    "production_config",
]

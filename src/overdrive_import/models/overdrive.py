"""
OverDrive dataclasses and small helpers.

Records returned by the search and metadata endpoints are kept as plain dicts
(their schema is owned by OverDrive); only the fields the import relies on are
modelled here.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Literal, Self

from dacite import Config, from_dict

production_config = Config(
    strict=False,
    check_types=True,
    cast=[int],
)

CursorStatus = Literal["in_progress", "completed"]

Record = dict[str, Any]


@dataclass
class AccessToken:
    value: str
    expires_at: int

    def is_usable(self, now: float, margin: int = 180) -> bool:
        """Return True while `now` is before the expiry minus the safety margin."""
        return now < self.expires_at - margin


@dataclass
class LibraryConfig:
    """Per-library endpoints resolved from the library account lookup."""

    products: str
    collection_token: str
    weblink: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return from_dict(data_class=cls, data=data, config=production_config)


@dataclass
class LibraryAccount:
    id: str
    products_url: str
    weblink: str | None
    collection_token: str

    @classmethod
    def from_api(cls, body: dict[str, Any]) -> Self:
        links = body.get("links") or {}
        return cls(
            id=str(body["id"]),
            products_url=(links.get("products") or {}).get("href", ""),
            weblink=(links.get("dlrHomepage") or {}).get("href"),
            collection_token=body.get("collectionToken", ""),
        )

    def to_config(self) -> LibraryConfig:
        return LibraryConfig(
            products=self.products_url,
            collection_token=self.collection_token,
            weblink=self.weblink,
        )


@dataclass
class ImportCursorState:
    """Offset/total bookkeeping persisted per library between runs."""

    offset: int = 0
    total: int = 0
    status: CursorStatus = "in_progress"
    items_imported: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return from_dict(data_class=cls, data=data, config=production_config)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        if data["items_imported"] is None:
            del data["items_imported"]
        return data


@dataclass
class SearchQuery:
    limit: int
    offset: int
    sort: str

    def as_params(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class ProductPage:
    total_items: int
    products: list[Record] = field(default_factory=list)
    # products returned by the API, including any dropped for lacking an id
    fetched: int = 0


@dataclass
class KeywordSet:
    genres: list[str] = field(default_factory=list)
    audience: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    genres_other: list[str] = field(default_factory=list)
    audience_other: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return from_dict(data_class=cls, data=data, config=Config(strict=True))

    def to_dict(self) -> dict[str, list[str]]:
        return dataclasses.asdict(self)

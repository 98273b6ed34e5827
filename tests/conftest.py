import httpx
import pytest

from overdrive_import.clients.auth import ClientCredentials
from overdrive_import.clients.overdrive import OverDriveClient
from overdrive_import.config import settings
from overdrive_import.models import LibraryConfig
from overdrive_import.utils.persistence import MemoryStore

API = "https://api.example.test"
PRODUCTS_URL = f"{API}/v1/collections/ABC/products"


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeOverDrive:
    """Routes MockTransport requests to canned OverDrive responses."""

    def __init__(self, products=None, metadata=None, total=None):
        self.products = products or []
        self.metadata = {m["id"]: m for m in (metadata or [])}
        self.total = len(self.products) if total is None else total
        self.requests: list[httpx.Request] = []
        self.token_requests = 0
        self.fail_bulk_after: int | None = None
        self.bulk_calls = 0
        self.search_body = None

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth.overdrive.com":
            self.token_requests += 1
            return httpx.Response(
                200,
                json={
                    "access_token": f"tok-{self.token_requests}",
                    "expires_in": 3600,
                    "token_type": "bearer",
                },
            )
        path = request.url.path
        if path.endswith("/products"):
            if self.search_body is not None:
                return httpx.Response(200, json=self.search_body)
            offset = int(request.url.params.get("offset", 0))
            limit = int(request.url.params.get("limit", 200))
            page = self.products[offset : offset + limit]
            return httpx.Response(200, json={"totalItems": self.total, "products": page})
        if path.endswith("/bulkmetadata"):
            self.bulk_calls += 1
            if self.fail_bulk_after is not None and self.bulk_calls > self.fail_bulk_after:
                return httpx.Response(500, json={"message": "error"})
            ids = request.url.params["reserveIds"].split(",")
            found = [self.metadata[i] for i in ids if i in self.metadata]
            return httpx.Response(200, json={"metadata": found})
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture(autouse=True)
def _quiet_progress(monkeypatch):
    monkeypatch.setattr(settings, "enable_progress", False)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_client(store):
    def _make(handler):
        return OverDriveClient(
            credentials=ClientCredentials("client-name", "secret"),
            libraries={"1225": LibraryConfig(products=PRODUCTS_URL, collection_token="ABC")},
            store=store,
            base_url=API,
            transport=httpx.MockTransport(handler),
        )

    return _make

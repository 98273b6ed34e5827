import httpx
import pytest

from overdrive_import.errors import FetchError, NotFound

from conftest import API, FakeOverDrive


@pytest.mark.asyncio
async def test_requests_carry_bearer_token_and_client_header(make_client):
    api = FakeOverDrive(products=[{"id": "A"}])
    async with make_client(api.handler) as client:
        await client.search_products("1225", {"limit": 10, "offset": 0})

    search = api.requests[-1]
    assert search.headers["Authorization"] == "Bearer tok-1"
    assert search.headers["User-Agent"] == "client-name"


@pytest.mark.asyncio
async def test_search_products_serializes_query(make_client):
    api = FakeOverDrive(products=[{"id": "A", "title": "One"}, {"id": "B"}])
    async with make_client(api.handler) as client:
        page = await client.search_products(
            "1225", {"limit": 200, "offset": 0, "sort": "dateadded:asc"}
        )

    params = api.requests[-1].url.params
    assert params["limit"] == "200"
    assert params["offset"] == "0"
    assert params["sort"] == "dateadded:asc"
    assert page.total_items == 2
    assert [p["id"] for p in page.products] == ["A", "B"]


@pytest.mark.asyncio
async def test_search_products_without_total_items_returns_none(make_client):
    api = FakeOverDrive()
    api.search_body = {"products": []}
    async with make_client(api.handler) as client:
        assert await client.search_products("1225", {"limit": 5}) is None


@pytest.mark.asyncio
async def test_search_products_drops_records_without_id(make_client):
    api = FakeOverDrive()
    api.search_body = {"totalItems": 2, "products": [{"id": "A"}, {"title": "no id"}]}
    async with make_client(api.handler) as client:
        page = await client.search_products("1225")
    assert [p["id"] for p in page.products] == ["A"]


@pytest.mark.asyncio
async def test_unknown_library_raises_not_found(make_client):
    async with make_client(FakeOverDrive().handler) as client:
        with pytest.raises(NotFound):
            await client.search_products("9999", {"limit": 5})


@pytest.mark.asyncio
async def test_get_bulk_metadata(make_client):
    api = FakeOverDrive(metadata=[{"id": "A", "series": "S"}, {"id": "C"}])
    async with make_client(api.handler) as client:
        records = await client.get_bulk_metadata("1225", ["A", "B", "C"])

    request = api.requests[-1]
    assert request.url.path == "/v1/collections/ABC/bulkmetadata"
    assert request.url.params["reserveIds"] == "A,B,C"
    assert [r["id"] for r in records] == ["A", "C"]


@pytest.mark.asyncio
async def test_get_bulk_metadata_rejects_oversized_chunks(make_client):
    async with make_client(FakeOverDrive().handler) as client:
        with pytest.raises(ValueError):
            await client.get_bulk_metadata("1225", [str(i) for i in range(26)])


@pytest.mark.asyncio
async def test_get_library_account(make_client):
    body = {
        "id": 1225,
        "collectionToken": "XYZ",
        "links": {
            "products": {"href": f"{API}/v1/collections/XYZ/products"},
            "dlrHomepage": {"href": "https://lib.overdrive.com"},
        },
    }

    async def handler(request):
        if request.url.host == "oauth.overdrive.com":
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        assert request.url.path == "/v1/libraries/1225"
        return httpx.Response(200, json=body)

    async with make_client(handler) as client:
        account = await client.get_library_account(1225)

    assert account.id == "1225"
    assert account.collection_token == "XYZ"
    config = account.to_config()
    assert config.products.endswith("/XYZ/products")
    assert config.weblink == "https://lib.overdrive.com"


@pytest.mark.asyncio
async def test_get_library_account_without_id_returns_none(make_client):
    async def handler(request):
        if request.url.host == "oauth.overdrive.com":
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        return httpx.Response(200, json={"message": "unknown library"})

    async with make_client(handler) as client:
        assert await client.get_library_account(1) is None


@pytest.mark.asyncio
async def test_get_metadata_and_advantage_accounts(make_client):
    async def handler(request):
        if request.url.host == "oauth.overdrive.com":
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        if request.url.path == "/v1/collections/ABC/products/A/metadata":
            return httpx.Response(200, json={"id": "A", "title": "One"})
        if request.url.path == "/v1/libraries/1225/advantageAccounts":
            return httpx.Response(200, json={"advantageAccounts": [{"id": 7}]})
        return httpx.Response(404)

    async with make_client(handler) as client:
        meta = await client.get_metadata("1225", "A")
        accounts = await client.get_advantage_accounts("1225")

    assert meta["title"] == "One"
    assert accounts == [{"id": 7}]


@pytest.mark.asyncio
async def test_http_error_becomes_fetch_error_with_status(make_client):
    async with make_client(FakeOverDrive().handler) as client:
        with pytest.raises(FetchError) as exc:
            await client.get_metadata("1225", "missing-route")
    # unrouted paths return 404 from the fake API
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_non_json_body_becomes_fetch_error(make_client):
    async def handler(request):
        if request.url.host == "oauth.overdrive.com":
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        return httpx.Response(200, content=b"<html>maintenance</html>")

    async with make_client(handler) as client:
        with pytest.raises(FetchError) as exc:
            await client.get_advantage_accounts("1225")
    assert exc.value.status_code == 200


@pytest.mark.asyncio
async def test_search_products_counts_raw_page_length(make_client):
    api = FakeOverDrive()
    api.search_body = {"totalItems": 3, "products": [{"id": "A"}, {"title": "no id"}]}
    async with make_client(api.handler) as client:
        page = await client.search_products("1225")
    assert page.fetched == 2
    assert len(page.products) == 1


@pytest.mark.asyncio
async def test_get_library_account_with_null_links(make_client):
    async def handler(request):
        if request.url.host == "oauth.overdrive.com":
            return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
        return httpx.Response(
            200,
            json={
                "id": 1225,
                "collectionToken": "XYZ",
                "links": {"products": None, "dlrHomepage": None},
            },
        )

    async with make_client(handler) as client:
        account = await client.get_library_account(1225)

    assert account.products_url == ""
    assert account.weblink is None

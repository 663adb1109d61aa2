import httpx
import pytest

from watchlist.core.config import Settings
from watchlist.services.catalog.errors import (
    DecodeFailure,
    EmptyResults,
    InvalidInput,
    MissingCredentials,
    NetworkFailure,
)
from watchlist.services.catalog.unogs_provider import UnogsProvider


def _results(n: int) -> list[dict]:
    return [
        {"netflix_id": 1000 + i, "title": f"Inception {i}", "img": f"img{i}", "synopsis": f"s{i}"}
        for i in range(n)
    ]


@pytest.mark.asyncio
async def test_search_truncates_to_first_five_in_order(unogs_settings, budget, make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["title"] = request.url.params["title"]
        seen["key"] = request.headers["x-rapidapi-key"]
        seen["host"] = request.headers["x-rapidapi-host"]
        return httpx.Response(200, json={"results": _results(7)})

    provider = UnogsProvider(unogs_settings, budget, client=make_client(handler))
    items = await provider.search("Inception")

    assert [i.item_id for i in items] == ["1000", "1001", "1002", "1003", "1004"]
    assert items[0].title == "Inception 0"
    assert items[0].availability is None
    assert seen == {
        "path": "/search/titles",
        "title": "Inception",
        "key": "test-key",
        "host": "unogs-unogs-v1.p.rapidapi.com",
    }


@pytest.mark.asyncio
async def test_search_encodes_title_in_query(unogs_settings, budget, make_client):
    raw = {}

    def handler(request: httpx.Request) -> httpx.Response:
        raw["query"] = request.url.query
        return httpx.Response(200, json={"results": []})

    provider = UnogsProvider(unogs_settings, budget, client=make_client(handler))
    assert await provider.search("Tom & Jerry?") == []
    assert b"Tom" in raw["query"]
    assert b"&Jerry" not in raw["query"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{}, {"results": None}, {"results": "nope"}, {"elapse": 0.1}],
)
async def test_search_without_results_array_is_empty_results(
    unogs_settings, budget, make_client, body
):
    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json=body)),
    )
    with pytest.raises(EmptyResults):
        await provider.search("Inception")


@pytest.mark.asyncio
async def test_search_derives_ids_in_priority_order(unogs_settings, budget, make_client):
    results = [
        {"netflix_id": "80100172", "id": "ignored"},
        {"netflix_id": 70131314},
        {"netflix_id": None, "id": "fallback-1"},
        {"id": ""},
        {"netflix_id": True},
    ]
    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json={"results": results})),
    )
    items = await provider.search("anything")

    assert items[0].item_id == "80100172"
    assert items[1].item_id == "70131314"
    assert items[2].item_id == "fallback-1"
    generated = [items[3].item_id, items[4].item_id]
    assert all(generated)
    assert generated[0] != generated[1]
    assert items[3].title == ""
    assert items[3].synopsis == ""


@pytest.mark.asyncio
async def test_fallback_ids_unique_across_calls(unogs_settings, budget, make_client):
    body = {"results": [{"title": "no id"}] * 5}
    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json=body)),
    )
    first = await provider.search("x")
    second = await provider.search("x")
    ids = [i.item_id for i in first + second]
    assert len(set(ids)) == 10
    assert all(ids)


@pytest.mark.asyncio
async def test_search_maps_transport_and_status_errors(unogs_settings, budget, make_client):
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = UnogsProvider(unogs_settings, budget, client=make_client(boom))
    with pytest.raises(NetworkFailure) as exc:
        await provider.search("Inception")
    assert "connection refused" in exc.value.message

    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(429, json={"message": "quota"})),
    )
    with pytest.raises(NetworkFailure) as exc:
        await provider.search("Inception")
    assert exc.value.message == "HTTP 429"


@pytest.mark.asyncio
async def test_search_invalid_json_is_decode_failure(unogs_settings, budget, make_client):
    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, text="<html>oops</html>")),
    )
    with pytest.raises(DecodeFailure):
        await provider.search("Inception")

    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json=[1, 2, 3])),
    )
    with pytest.raises(DecodeFailure):
        await provider.search("Inception")


@pytest.mark.asyncio
async def test_blank_title_is_invalid_input_and_still_charged(unogs_settings, budget, make_client):
    provider = UnogsProvider(
        unogs_settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json={"results": []})),
    )
    with pytest.raises(InvalidInput):
        await provider.search("   ")
    assert budget.count() == 1


@pytest.mark.asyncio
async def test_missing_credentials(budget, make_client):
    settings = Settings(API_KEY="", API_HOST="", UNOGS_BASE_URL="https://unogs.test")
    provider = UnogsProvider(
        settings,
        budget,
        client=make_client(lambda request: httpx.Response(200, json={"results": []})),
    )
    for _ in range(3):
        with pytest.raises(MissingCredentials):
            await provider.search("Inception")
    for _ in range(3):
        assert await provider.fetch_availability("1") == []
    # Charged even though no request could be built
    assert budget.count() == 6


@pytest.mark.asyncio
async def test_every_issued_call_is_charged_regardless_of_outcome(
    unogs_settings, budget, make_client
):
    responses = iter(
        [
            httpx.Response(200, json={"results": _results(2)}),
            httpx.Response(500),
            httpx.Response(200, json={}),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"results": []}),
            httpx.Response(503),
        ]
    )
    provider = UnogsProvider(
        unogs_settings, budget, client=make_client(lambda request: next(responses))
    )

    await provider.search("a")
    for exc_type in (NetworkFailure, EmptyResults, DecodeFailure):
        with pytest.raises(exc_type):
            await provider.search("a")
    await provider.fetch_availability("1")
    await provider.fetch_availability("1")

    assert provider.calls_made() == 6
    assert provider.remaining_calls() == 44


@pytest.mark.asyncio
async def test_fetch_availability_maps_entries(unogs_settings, budget, make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["netflix_id"] = request.url.params["netflix_id"]
        return httpx.Response(
            200,
            json={
                "results": [
                    {"country_code": "US", "country": "United States", "audio": "English", "subtitle": "Spanish"},
                    {"country_code": "GB", "country": "United Kingdom"},
                    "garbage",
                ]
            },
        )

    provider = UnogsProvider(unogs_settings, budget, client=make_client(handler))
    availability = await provider.fetch_availability("70131314")

    assert seen == {"path": "/title/countries", "netflix_id": "70131314"}
    assert [a.country_code for a in availability] == ["US", "GB"]
    assert availability[0].audio == "English"
    assert availability[1].subtitle == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"no": "results"}),
        httpx.Response(200, json=["x"]),
    ],
)
async def test_fetch_availability_failures_collapse_to_empty(
    unogs_settings, budget, make_client, response
):
    provider = UnogsProvider(
        unogs_settings, budget, client=make_client(lambda request: response)
    )
    assert await provider.fetch_availability("70131314") == []
    assert budget.count() == 1


@pytest.mark.asyncio
async def test_fetch_availability_network_error_is_empty(unogs_settings, budget, make_client):
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    provider = UnogsProvider(unogs_settings, budget, client=make_client(boom))
    assert await provider.fetch_availability("1") == []


@pytest.mark.asyncio
async def test_owned_client_closed_on_exit(unogs_settings, budget):
    async with UnogsProvider(unogs_settings, budget) as provider:
        client = provider._client
        assert not client.is_closed
    assert client.is_closed

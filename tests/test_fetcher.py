import dataclasses

import httpx
import pytest

from job_extractor.fetcher import (
    FETCH_EXHAUSTED_MESSAGE,
    FetchStrategy,
    build_strategies,
    is_plausible_html,
)
from job_extractor.models import FetchExhausted

TARGET = "https://jobs.example.com/postings/42"
GOOD_HTML = "<html><body><div>Backend Engineer</div></body></html>"


def test_plausibility_accepts_structural_markers():
    assert is_plausible_html("<p>hi</p></html>")
    assert is_plausible_html("<p>hi</p></body>")
    assert is_plausible_html("<div>hi")
    assert is_plausible_html("x" * 1001)


def test_plausibility_rejects_short_bodies_without_markup():
    assert not is_plausible_html("")
    assert not is_plausible_html(None)
    assert not is_plausible_html("<p>Access denied</p>")
    assert not is_plausible_html("x" * 1000)


@pytest.mark.asyncio
async def test_strategy_order(settings, make_fetcher):
    expected = [
        "direct",
        "corsproxy.io",
        "allorigins",
        "thingproxy",
        "corsanywhere",
        "post",
    ]
    assert [strategy.name for strategy in build_strategies(settings)] == expected

    async with make_fetcher(lambda request: httpx.Response(200, text=GOOD_HTML)) as fetcher:
        assert [strategy.name for strategy in fetcher.strategies] == expected

    no_relays = dataclasses.replace(settings, enable_relays=False)
    async with make_fetcher(lambda request: httpx.Response(200), settings=no_relays) as fetcher:
        assert [strategy.name for strategy in fetcher.strategies] == ["direct", "post"]


def test_optional_strategies_can_be_disabled(settings):
    no_cors_anywhere = dataclasses.replace(settings, enable_cors_anywhere=False)
    assert "corsanywhere" not in [s.name for s in build_strategies(no_cors_anywhere)]

    no_relays = dataclasses.replace(settings, enable_relays=False)
    assert [s.name for s in build_strategies(no_relays)] == ["direct", "post"]


def test_relay_urls(settings):
    urls = {s.name: s.build_url(TARGET) for s in build_strategies(settings)}
    assert urls["direct"] == TARGET
    assert urls["corsproxy.io"] == (
        "https://corsproxy.io/?https%3A%2F%2Fjobs.example.com%2Fpostings%2F42"
    )
    assert urls["allorigins"] == (
        "https://api.allorigins.win/raw?url=https%3A%2F%2Fjobs.example.com%2Fpostings%2F42"
    )
    assert urls["thingproxy"] == f"https://thingproxy.freeboard.io/fetch/{TARGET}"
    assert urls["corsanywhere"] == f"https://cors-anywhere.herokuapp.com/{TARGET}"
    assert urls["post"] == TARGET


def test_strategy_timeouts(settings):
    timeouts = {s.name: s.timeout for s in build_strategies(settings)}
    assert timeouts["corsanywhere"] == 20.0
    assert all(timeouts[name] == 15.0 for name in timeouts if name != "corsanywhere")


@pytest.mark.asyncio
async def test_direct_success_short_circuits(make_fetcher):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=GOOD_HTML)

    async with make_fetcher(handler) as fetcher:
        html = await fetcher.fetch_page(TARGET)

    assert html == GOOD_HTML
    assert len(seen) == 1
    assert str(seen[0].url) == TARGET
    assert seen[0].headers["sec-fetch-site"] == "same-origin"
    assert seen[0].headers["referer"] == "https://www.google.com"
    assert "Mozilla/5.0" in seen[0].headers["user-agent"]


@pytest.mark.asyncio
async def test_implausible_body_advances_to_next_strategy(make_fetcher):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host == "jobs.example.com":
            return httpx.Response(200, text="Please enable JavaScript")
        return httpx.Response(200, text=GOOD_HTML)

    async with make_fetcher(handler) as fetcher:
        html = await fetcher.fetch_page(TARGET)

    assert html == GOOD_HTML
    assert seen == ["jobs.example.com", "corsproxy.io"]


@pytest.mark.asyncio
async def test_relay_requests_use_cross_site_headers(make_fetcher):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "corsproxy.io":
            return httpx.Response(200, text=GOOD_HTML)
        return httpx.Response(403, text="Forbidden")

    async with make_fetcher(handler) as fetcher:
        await fetcher.fetch_page(TARGET)

    assert seen[-1].headers["sec-fetch-site"] == "cross-site"


@pytest.mark.asyncio
async def test_post_strategy_is_last_resort(make_fetcher):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return httpx.Response(200, text=GOOD_HTML)
        return httpx.Response(403, text="Forbidden")

    async with make_fetcher(handler) as fetcher:
        html = await fetcher.fetch_page(TARGET)

    assert html == GOOD_HTML
    assert len(seen) == 6
    post = seen[-1]
    assert post.method == "POST"
    assert str(post.url) == TARGET
    assert post.headers["content-type"] == "application/x-www-form-urlencoded"
    assert post.content == b""


@pytest.mark.asyncio
async def test_all_strategies_forbidden_raises_fetch_exhausted(make_fetcher):
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(403, text="Forbidden")

    async with make_fetcher(handler) as fetcher:
        with pytest.raises(FetchExhausted) as excinfo:
            await fetcher.fetch_page(TARGET)

    assert str(excinfo.value) == FETCH_EXHAUSTED_MESSAGE
    attempts = excinfo.value.attempts
    assert [a.strategy_name for a in attempts] == [
        "direct",
        "corsproxy.io",
        "allorigins",
        "thingproxy",
        "corsanywhere",
        "post",
    ]
    assert all(not a.succeeded for a in attempts)
    assert all(a.error == "HTTP status 403" for a in attempts)
    assert len(calls) == 6


@pytest.mark.asyncio
async def test_transport_errors_are_absorbed(make_fetcher):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "jobs.example.com":
            raise httpx.ReadTimeout("timed out", request=request)
        if request.url.host == "corsproxy.io":
            raise httpx.ConnectError("name resolution failed", request=request)
        return httpx.Response(200, text=GOOD_HTML)

    async with make_fetcher(handler) as fetcher:
        html = await fetcher.fetch_page(TARGET)

    assert html == GOOD_HTML


@pytest.mark.asyncio
async def test_redirect_loop_counts_as_failure(make_fetcher):
    strategies = [
        FetchStrategy(name="direct", build_url=lambda url: url, timeout=1.0),
        FetchStrategy(
            name="post",
            build_url=lambda url: url,
            timeout=1.0,
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=b"",
        ),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, text=GOOD_HTML)
        return httpx.Response(302, headers={"Location": TARGET})

    async with make_fetcher(handler, strategies=strategies) as fetcher:
        html = await fetcher.fetch_page(TARGET)

    assert html == GOOD_HTML


@pytest.mark.asyncio
async def test_redirects_within_limit_are_followed(make_fetcher):
    final = "https://jobs.example.com/postings/42/view"

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TARGET:
            return httpx.Response(301, headers={"Location": final})
        return httpx.Response(200, text=GOOD_HTML)

    async with make_fetcher(handler) as fetcher:
        assert await fetcher.fetch_page(TARGET) == GOOD_HTML


@pytest.mark.asyncio
async def test_url_is_sanitized_before_fetching(make_fetcher):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=GOOD_HTML)

    async with make_fetcher(handler) as fetcher:
        await fetcher.fetch_page(" https://jobs.example.com/postings/42\n")

    assert seen == [TARGET]


def _redirect_chain(hops: int):
    def handler(request: httpx.Request) -> httpx.Response:
        step = int(request.url.path.rsplit("/", 1)[-1])
        if step < hops:
            return httpx.Response(302, headers={"Location": f"/hop/{step + 1}"})
        return httpx.Response(200, text=GOOD_HTML)

    return handler


@pytest.mark.asyncio
async def test_five_redirects_are_followed(make_fetcher):
    direct_only = [FetchStrategy(name="direct", build_url=lambda url: url, timeout=1.0)]

    async with make_fetcher(_redirect_chain(5), strategies=direct_only) as fetcher:
        assert await fetcher.fetch_page("https://jobs.example.com/hop/0") == GOOD_HTML


@pytest.mark.asyncio
async def test_sixth_redirect_fails_the_strategy(make_fetcher):
    direct_only = [FetchStrategy(name="direct", build_url=lambda url: url, timeout=1.0)]

    async with make_fetcher(_redirect_chain(6), strategies=direct_only) as fetcher:
        with pytest.raises(FetchExhausted) as excinfo:
            await fetcher.fetch_page("https://jobs.example.com/hop/0")

    [attempt] = excinfo.value.attempts
    assert attempt.strategy_name == "direct"
    assert "TooManyRedirects" in attempt.error

"""Multi-strategy page fetching for job postings.

Pages are requested directly first, then through a chain of public CORS
relays, and finally with a POST request. The first strategy that returns a
plausible HTML body wins; individual failures are logged and skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional
from urllib.parse import quote

import httpx

from .config import Settings, load_settings
from .models import FetchAttempt, FetchExhausted, UpstreamTransportError

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT_HEADER = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)

FETCH_EXHAUSTED_MESSAGE = (
    "Unable to access the job posting. The page might be protected or require "
    "authentication. Please try copying and pasting the job description manually."
)

PLAUSIBLE_MIN_LENGTH = 1000


@dataclass(frozen=True, slots=True)
class FetchStrategy:
    """One way of retrieving a page: where to send the request and how."""

    name: str
    build_url: Callable[[str], str]
    timeout: float
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


def browser_headers(settings: Settings) -> dict[str, str]:
    """Headers that make requests look like a desktop Chrome navigation."""

    return {
        "User-Agent": settings.user_agent,
        "Accept": DEFAULT_ACCEPT_HEADER,
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Ch-Ua": '"Chromium";v="122", "Not(A:Brand";v="24", "Google Chrome";v="122"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"macOS"',
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "cross-site",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
        "Referer": settings.referer,
        "X-Requested-With": "XMLHttpRequest",
    }


def build_strategies(settings: Settings) -> list[FetchStrategy]:
    """Return the fetch strategies in the order they should be tried."""

    strategies = [
        FetchStrategy(
            name="direct",
            build_url=lambda url: url,
            timeout=settings.direct_timeout,
            headers={"Sec-Fetch-Site": "same-origin"},
        ),
    ]

    if settings.enable_relays:
        strategies.extend(
            [
                FetchStrategy(
                    name="corsproxy.io",
                    build_url=lambda url: f"https://corsproxy.io/?{quote(url, safe='')}",
                    timeout=settings.relay_timeout,
                ),
                FetchStrategy(
                    name="allorigins",
                    build_url=lambda url: f"https://api.allorigins.win/raw?url={quote(url, safe='')}",
                    timeout=settings.relay_timeout,
                ),
                FetchStrategy(
                    name="thingproxy",
                    build_url=lambda url: f"https://thingproxy.freeboard.io/fetch/{url}",
                    timeout=settings.relay_timeout,
                ),
            ]
        )
        # cors-anywhere often demands a per-visitor opt-in, so it is optional.
        if settings.enable_cors_anywhere:
            strategies.append(
                FetchStrategy(
                    name="corsanywhere",
                    build_url=lambda url: f"https://cors-anywhere.herokuapp.com/{url}",
                    timeout=settings.slow_relay_timeout,
                )
            )

    strategies.append(
        FetchStrategy(
            name="post",
            build_url=lambda url: url,
            timeout=settings.direct_timeout,
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=b"",
        )
    )
    return strategies


def is_plausible_html(body: str | None) -> bool:
    """Cheap structural check that *body* is a real page and not an error stub."""

    if not body:
        return False
    return (
        "</html>" in body
        or "</body>" in body
        or "<div" in body
        or len(body) > PLAUSIBLE_MIN_LENGTH
    )


class PageFetcher:
    """Fetch a page by walking an ordered list of strategies."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        strategies: Iterable[FetchStrategy] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._strategies = (
            list(strategies) if strategies is not None else build_strategies(self._settings)
        )
        if not self._strategies:
            raise ValueError("at least one fetch strategy is required")

        self._client = httpx.AsyncClient(
            headers=browser_headers(self._settings),
            http2=True,
            follow_redirects=True,
            max_redirects=self._settings.max_redirects,
            transport=transport,
        )

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def strategies(self) -> list[FetchStrategy]:
        return list(self._strategies)

    async def fetch_page(self, url: str) -> str:
        """Return the HTML for *url* or raise :class:`FetchExhausted`."""

        original_url = url
        url = _sanitize_url(url)
        if url != original_url:
            logger.debug("Sanitized URL from %r to %r", original_url, url)

        attempts: list[FetchAttempt] = []
        for strategy in self._strategies:
            attempt = await self._attempt(strategy, url)
            attempts.append(attempt)
            if attempt.succeeded:
                return attempt.html  # type: ignore[return-value]

        logger.error(
            "All %d fetch strategies failed for %s", len(attempts), url
        )
        raise FetchExhausted(FETCH_EXHAUSTED_MESSAGE, attempts)

    async def _attempt(self, strategy: FetchStrategy, url: str) -> FetchAttempt:
        target_url = strategy.build_url(url)
        logger.info("Attempting %s fetch: %s", strategy.name, target_url)
        try:
            html = await self._request(strategy, target_url)
        except UpstreamTransportError as exc:
            logger.warning("%s fetch failed: %s", strategy.name, exc)
            return FetchAttempt(strategy_name=strategy.name, target_url=target_url, error=str(exc))

        logger.info("%s fetch successful, got %d characters", strategy.name, len(html))
        return FetchAttempt(strategy_name=strategy.name, target_url=target_url, html=html)

    async def _request(self, strategy: FetchStrategy, target_url: str) -> str:
        try:
            response = await self._client.request(
                strategy.method,
                target_url,
                headers=dict(strategy.headers),
                content=strategy.body,
                timeout=strategy.timeout,
            )
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 400:
            raise UpstreamTransportError(f"HTTP status {response.status_code}")

        text = response.text
        if not is_plausible_html(text):
            raise UpstreamTransportError(
                f"implausible HTML response ({len(text or '')} characters)"
            )
        return text


def _sanitize_url(url: str) -> str:
    """Remove control characters and encode literal spaces in URLs."""
    if not url:
        return url
    cleaned = re.sub(r"[\x00-\x1f\x7f]", "", url).strip()
    if " " in cleaned:
        cleaned = cleaned.replace(" ", "%20")
    return cleaned

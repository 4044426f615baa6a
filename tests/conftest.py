"""Shared fixtures for the extractor tests."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from job_extractor.config import Settings
from job_extractor.fetcher import PageFetcher


class StaticFetcher:
    """Stands in for PageFetcher and serves one canned page."""

    def __init__(self, html: str | None = None, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[str] = []

    async def fetch_page(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        assert self.html is not None
        return self.html

    async def __aenter__(self) -> "StaticFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


@pytest.fixture
def static_fetcher() -> Callable[..., StaticFetcher]:
    return StaticFetcher


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def make_fetcher(settings: Settings) -> Callable[..., PageFetcher]:
    """Build a PageFetcher whose network calls go to *handler*."""

    def _make(handler, **kwargs) -> PageFetcher:
        kwargs.setdefault("settings", settings)
        return PageFetcher(transport=httpx.MockTransport(handler), **kwargs)

    return _make


def html_page(body: str, *, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


@pytest.fixture
def page() -> Callable[..., str]:
    return html_page

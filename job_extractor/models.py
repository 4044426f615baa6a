"""Data models used across the job posting extractor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

UNKNOWN_COMPANY = "Unknown Company"


class JobExtractionError(RuntimeError):
    """Base class for failures surfaced to callers of the extractor."""


class InvalidUrl(JobExtractionError):
    """Raised when the input URL is empty or malformed."""


class UpstreamTransportError(JobExtractionError):
    """Raised inside a single fetch strategy; never escapes the fetch loop."""


class FetchExhausted(JobExtractionError):
    """Raised when every fetch strategy failed or returned implausible content."""

    def __init__(self, message: str, attempts: list["FetchAttempt"] | None = None) -> None:
        super().__init__(message)
        self.attempts: list[FetchAttempt] = list(attempts or [])


class NoValidDescription(JobExtractionError):
    """Raised when no extraction stage produced a usable job description."""


@dataclass(slots=True)
class JobExtractionRequest:
    url: str


@dataclass(slots=True)
class FetchAttempt:
    """Outcome of trying one retrieval strategy against a URL."""

    strategy_name: str
    target_url: str
    html: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.html is not None


@dataclass(slots=True)
class ExtractionResult:
    """Job description and company name pulled from a posting."""

    job_description: str
    company_name: str = UNKNOWN_COMPANY
    source: str = ""
    degraded: bool = False

    def to_dict(self) -> dict[str, str]:
        return {
            "jobDescription": self.job_description,
            "companyName": self.company_name,
        }


@dataclass(frozen=True, slots=True)
class CompanySelector:
    """One way of reading a company name out of a page.

    ``attribute`` reads an attribute of the matched element instead of its
    text. ``transform`` post-processes the raw value and may return an empty
    string to signal no match.
    """

    selector: str
    attribute: Optional[str] = None
    transform: Optional[Callable[[str], str]] = None


@dataclass(frozen=True, slots=True)
class SiteRule:
    """Selector configuration for one recognised job board."""

    name: str
    domain_match: str
    description_selectors: tuple[str, ...]
    company_selectors: tuple[CompanySelector, ...] = field(default_factory=tuple)

    def matches(self, hostname: str) -> bool:
        return self.domain_match in hostname.lower()

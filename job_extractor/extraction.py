"""Job description and company name extraction from posting pages.

The description is picked by a cascade of stages that share one validity
predicate: the matched job board's selectors, then generic selectors, then
the largest block of text on the page. The first stage that yields a
candidate wins.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from bs4 import BeautifulSoup

from .config import load_settings
from .fetcher import PageFetcher
from .models import UNKNOWN_COMPANY, ExtractionResult, NoValidDescription, SiteRule
from .site_rules import (
    GENERIC_COMPANY_SELECTORS,
    GENERIC_DESCRIPTION_SELECTORS,
    LARGEST_BLOCK_TAGS,
    match_site_rule,
)
from .text import DEFAULT_THRESHOLDS, ExtractionThresholds, clean_text, is_valid_job_description
from .urls import hostname_of, normalize_job_url

logger = logging.getLogger(__name__)

NO_VALID_DESCRIPTION_MESSAGE = (
    "Could not find a valid job description. The page might be protected or "
    "require authentication."
)

NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


@dataclass(slots=True)
class _Candidate:
    text: str
    source: str
    validated: bool = True


Stage = Callable[[BeautifulSoup, ExtractionThresholds], Optional[_Candidate]]


async def extract_job_from_url(
    url: str,
    fetcher: PageFetcher | None = None,
    *,
    thresholds: ExtractionThresholds | None = None,
) -> ExtractionResult:
    """Normalise a user-supplied URL, then run :func:`extract_job_details`."""

    return await extract_job_details(normalize_job_url(url), fetcher, thresholds=thresholds)


async def extract_job_details(
    url: str,
    fetcher: PageFetcher | None = None,
    *,
    thresholds: ExtractionThresholds | None = None,
) -> ExtractionResult:
    """Fetch *url* once and extract the job description and company name.

    ``FetchExhausted`` from the fetcher propagates unchanged. Raises
    :class:`NoValidDescription` when no stage finds usable text. Without
    explicit *thresholds* the configured ones from the environment apply.
    """

    if thresholds is None:
        thresholds = load_settings().thresholds

    if fetcher is None:
        async with PageFetcher() as owned_fetcher:
            html = await owned_fetcher.fetch_page(url)
    else:
        html = await fetcher.fetch_page(url)

    return extract_from_html(html, url, thresholds=thresholds)


def extract_from_html(
    html: str,
    url: str,
    *,
    thresholds: ExtractionThresholds | None = None,
) -> ExtractionResult:
    """Run the extraction cascade over an already fetched page."""

    thresholds = thresholds or DEFAULT_THRESHOLDS
    logger.info("HTML fetched, length: %d characters", len(html))

    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(list(NON_CONTENT_TAGS)):
        tag.decompose()

    hostname = hostname_of(url)
    logger.info("Extracting job from domain: %s", hostname)

    rule = match_site_rule(hostname)
    stages: list[Stage] = []
    company_name = ""
    if rule is not None:
        logger.info("Detected %s URL, using %s-specific selectors", rule.name, rule.name)
        stages.append(functools.partial(_site_rule_stage, rule))
        company_name = _company_from_rule(soup, rule)
    else:
        logger.info("Using generic selectors for unknown job site")
    stages.extend([_generic_selector_stage, _largest_block_stage])

    candidate: _Candidate | None = None
    for stage in stages:
        candidate = stage(soup, thresholds)
        if candidate is not None:
            break

    if not company_name:
        company_name = _company_from_generic_selectors(soup)

    job_description = clean_text(candidate.text if candidate else "")
    company_name = clean_text(company_name) or _company_from_hostname(hostname)
    source = candidate.source if candidate else ""

    if candidate is not None and candidate.validated and is_valid_job_description(
        job_description, thresholds
    ):
        return ExtractionResult(
            job_description=job_description,
            company_name=company_name or UNKNOWN_COMPANY,
            source=source,
        )

    if len(job_description) >= thresholds.degraded_min_length:
        logger.warning(
            "Job description did not pass validation (%d characters); using it as a fallback",
            len(job_description),
        )
        return ExtractionResult(
            job_description=job_description,
            company_name=company_name or UNKNOWN_COMPANY,
            source=source,
            degraded=True,
        )

    logger.error("No valid job description found. Content length: %d", len(job_description))
    raise NoValidDescription(NO_VALID_DESCRIPTION_MESSAGE)


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    return clean_text(element.get_text(" "))


def _first_valid(
    soup: BeautifulSoup,
    selectors: tuple[str, ...],
    thresholds: ExtractionThresholds,
) -> tuple[str, str] | None:
    for selector in selectors:
        text = _select_text(soup, selector)
        if text and is_valid_job_description(text, thresholds):
            return selector, text
    return None


def _site_rule_stage(
    rule: SiteRule,
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds,
) -> _Candidate | None:
    found = _first_valid(soup, rule.description_selectors, thresholds)
    if found is None:
        logger.info("No %s selector produced a valid job description", rule.name)
        return None
    selector, text = found
    logger.info("Found valid job description using %s selector: %s", rule.name, selector)
    return _Candidate(text=text, source=f"site:{rule.name}")


def _generic_selector_stage(
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds,
) -> _Candidate | None:
    found = _first_valid(soup, GENERIC_DESCRIPTION_SELECTORS, thresholds)
    if found is None:
        return None
    selector, text = found
    logger.info("Found valid job description using generic selector: %s", selector)
    return _Candidate(text=text, source="generic")


def _largest_block_stage(
    soup: BeautifulSoup,
    thresholds: ExtractionThresholds,
) -> _Candidate | None:
    largest = ""
    for element in soup.find_all(list(LARGEST_BLOCK_TAGS)):
        text = clean_text(element.get_text(" "))
        if (
            thresholds.block_min_length < len(text) < thresholds.block_max_length
            and len(text) > len(largest)
        ):
            largest = text

    if not largest:
        return None

    if is_valid_job_description(largest, thresholds):
        logger.warning(
            "No job description matched a selector; using largest text block (%d characters)",
            len(largest),
        )
        return _Candidate(text=largest, source="largest-block")

    if len(largest) >= thresholds.last_resort_min_length:
        logger.warning(
            "Using unvalidated largest text block as fallback (%d characters)", len(largest)
        )
        return _Candidate(text=largest, source="largest-block", validated=False)

    return None


def _read_company(soup: BeautifulSoup, selector: str, attribute: str | None) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    if attribute:
        value = element.get(attribute) or ""
        return clean_text(value if isinstance(value, str) else " ".join(value))
    return clean_text(element.get_text(" "))


def _company_from_rule(soup: BeautifulSoup, rule: SiteRule) -> str:
    for company_selector in rule.company_selectors:
        value = _read_company(soup, company_selector.selector, company_selector.attribute)
        if value and company_selector.transform is not None:
            value = clean_text(company_selector.transform(value))
        if value:
            return value
    return ""


def _company_from_generic_selectors(soup: BeautifulSoup) -> str:
    for selector in GENERIC_COMPANY_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        if selector.startswith(("meta", "link")):
            value = element.get("content") or element.get("href") or ""
        else:
            value = element.get_text(" ", strip=True)
        if not isinstance(value, str):
            value = " ".join(value)

        # "https://twitter.com/acme" -> "acme"
        if "/" in value:
            value = value.split("/")[-1] or value

        value = clean_text(value)
        if value:
            logger.info("Found company name using selector: %s", selector)
            return value
    return ""


def _company_from_hostname(hostname: str) -> str:
    parts = hostname.split(".")
    if len(parts) < 2 or not parts[-2]:
        return ""
    label = parts[-2]
    return label[0].upper() + label[1:]

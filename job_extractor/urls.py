"""Validation and normalisation of job posting URLs before extraction."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from .models import InvalidUrl

logger = logging.getLogger(__name__)

# Applicant tracking systems that route on query parameters.
KEEP_QUERY_SITES: tuple[str, ...] = ("lever.co", "greenhouse.io", "workday.com")

COMMON_JOB_BOARDS: tuple[str, ...] = (
    "linkedin.com",
    "indeed.com",
    "glassdoor.com",
    "monster.com",
    "ziprecruiter.com",
    "lever.co",
    "greenhouse.io",
    "workday.com",
    "wellfound.com",
    "angel.co",
    "careers-page.com",
    "careers-page.work",
    "smartrecruiters.com",
    "jobvite.com",
    "ashbyhq.com",
    "apply.workable.com",
    "app.trinethire.com",
    "umantis.com",
    "bamboohr.com",
    "breezy.hr",
    "hire.withgoogle.com",
    "paylocity.com",
    "successfactors.com",
    "taleo.net",
    "ultipro.com",
)


def _with_scheme(url: str) -> str:
    return url if url.startswith(("http://", "https://")) else f"https://{url}"


def hostname_of(url: str) -> str:
    try:
        return urlparse(_with_scheme(url)).hostname or ""
    except ValueError:
        return ""


def is_valid_url(url: str) -> bool:
    """Return True if *url* parses and has a dotted hostname."""

    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        hostname = urlparse(_with_scheme(url)).hostname or ""
    except ValueError:
        return False

    if "." not in hostname:
        return False

    if not any(board in hostname for board in COMMON_JOB_BOARDS):
        logger.warning(
            "URL is not from a common job board, extraction might be less reliable: %s",
            hostname,
        )
    return True


def normalize_job_url(url: str | None, *, strip_query: bool = True) -> str:
    """Clean up a user-supplied job posting URL.

    With *strip_query*, query strings are dropped except for sites in
    ``KEEP_QUERY_SITES``. ``https://`` is prefixed when no scheme was given.
    Raises :class:`InvalidUrl` for empty or malformed input.
    """

    if not url or not url.strip():
        raise InvalidUrl("Please enter a job posting URL")

    url = url.strip()

    if strip_query and "?" in url:
        hostname = hostname_of(url)
        if not any(site in hostname for site in KEEP_QUERY_SITES):
            url = url.split("?", 1)[0]
            logger.info("Removed query parameters from URL: %s", url)

    if not is_valid_url(url):
        raise InvalidUrl(
            "Please enter a valid job posting URL "
            "(e.g., https://www.linkedin.com/jobs/view/...)"
        )

    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url

"""Client helper for calling the extraction API from another service."""

from __future__ import annotations

import logging

import httpx

from .models import UNKNOWN_COMPANY, ExtractionResult, JobExtractionError
from .urls import normalize_job_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
EXTRACT_PATH = "/api/extract-job"
SHORT_DESCRIPTION_LENGTH = 100

MANUAL_PASTE_HINT = "please try copying and pasting the job description manually."

STATUS_MESSAGES: dict[int, str] = {
    404: (
        "The job posting could not be found. It might have been removed or the URL "
        "is incorrect. Please verify the URL or try copying and pasting the job "
        "description manually."
    ),
    403: (
        "Access to this job posting is restricted. It might require authentication "
        "or be private. Please try copying and pasting the job description manually."
    ),
    400: (
        "The job posting URL appears to be invalid or inaccessible. Please verify "
        "the URL or try copying and pasting the job description manually."
    ),
    500: (
        "The server encountered an error while processing your request. Please try "
        "again later or try copying and pasting the job description manually."
    ),
}


def extract_job_from_url_via_api(
    url: str,
    *,
    base_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> ExtractionResult:
    """Post *url* to a running extraction API and return its result.

    Failures are re-raised as :class:`JobExtractionError` with a message
    suitable for showing to an end user.
    """

    url = normalize_job_url(url)
    logger.info("Sending extraction request for URL: %s", url)

    try:
        with httpx.Client(base_url=base_url, timeout=timeout, transport=transport) as client:
            response = client.post(EXTRACT_PATH, json={"url": url})
    except httpx.TimeoutException as exc:
        raise JobExtractionError(
            "The request timed out. The job posting site might be slow or blocking "
            "our request. Please try copying and pasting the job description manually."
        ) from exc
    except httpx.TransportError as exc:
        raise JobExtractionError(
            "Network error. Please check your internet connection and try again. "
            "If the issue persists, try copying and pasting the job description manually."
        ) from exc

    data = _json_or_empty(response)

    if response.status_code >= 400:
        api_error = data.get("error")
        if isinstance(api_error, str) and api_error:
            raise JobExtractionError(f"{api_error} If this persists, {MANUAL_PASTE_HINT}")
        raise JobExtractionError(
            STATUS_MESSAGES.get(
                response.status_code,
                "Unable to extract the job description. Please try copying and pasting it manually.",
            )
        )

    job_description = data.get("jobDescription") or ""
    if not job_description:
        raise JobExtractionError(
            "No job description found. The page might be protected or require "
            "authentication. Please try copying and pasting the job description manually."
        )

    if len(job_description) < SHORT_DESCRIPTION_LENGTH:
        logger.warning(
            "The extracted job description is shorter than expected: %d", len(job_description)
        )

    logger.info("Successfully extracted job description (%d chars)", len(job_description))
    return ExtractionResult(
        job_description=job_description,
        company_name=data.get("companyName") or UNKNOWN_COMPANY,
        source="api",
    )


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

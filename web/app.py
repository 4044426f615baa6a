"""FastAPI wrapper that exposes job posting extraction over HTTP."""

from __future__ import annotations

import logging
import os
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from job_extractor.config import load_settings
from job_extractor.extraction import extract_job_details
from job_extractor.fetcher import PageFetcher
from job_extractor.models import (
    FetchExhausted,
    InvalidUrl,
    JobExtractionRequest,
    NoValidDescription,
    UNKNOWN_COMPANY,
)
from job_extractor.urls import normalize_job_url

SETTINGS = load_settings()

# Restore request-level logging (including httpx request lines) in the app process.
logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level.upper(), logging.INFO),
    format="%(levelname)s %(message)s",
)
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Invalid URL format. Please provide a valid job posting URL."
NO_DESCRIPTION_MESSAGE = (
    "Could not extract a valid job description from the provided URL. "
    "The content might be behind a login wall or not accessible."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing your request."
INVALID_BODY_MESSAGE = 'Request body must be a JSON object with a "url" field.'

app = FastAPI(title="Job Posting Extractor")


async def get_fetcher() -> AsyncIterator[PageFetcher]:
    async with PageFetcher(settings=SETTINGS) as fetcher:
        yield fetcher


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.post("/api/extract-job")
async def extract_job(
    request: Request,
    fetcher: PageFetcher = Depends(get_fetcher),
):
    try:
        payload = await request.json()
    except ValueError:
        return _error(INVALID_BODY_MESSAGE, 400)

    raw_url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(raw_url, str) or not raw_url.strip():
        return _error("URL is required", 400)

    try:
        job = JobExtractionRequest(url=normalize_job_url(raw_url, strip_query=False))
    except InvalidUrl:
        return _error(INVALID_URL_MESSAGE, 400)

    logger.info("Processing job extraction request for URL: %s", job.url)

    try:
        result = await extract_job_details(job.url, fetcher, thresholds=SETTINGS.thresholds)
    except FetchExhausted as exc:
        logger.error("Fetching %s failed after %d strategies", job.url, len(exc.attempts))
        return _error(str(exc), 400)
    except NoValidDescription:
        logger.error("No valid job description found at %s", job.url)
        return _error(NO_DESCRIPTION_MESSAGE, 400)
    except Exception:
        logger.exception("Unexpected failure while extracting %s", job.url)
        return _error(UNEXPECTED_ERROR_MESSAGE, 500)

    job_description = result.job_description.strip()
    if len(job_description) < SETTINGS.thresholds.degraded_min_length:
        logger.error("Extracted job description is too short or empty")
        return _error(NO_DESCRIPTION_MESSAGE, 400)

    logger.info(
        "Successfully extracted job description (%d chars) and company: %s",
        len(job_description),
        result.company_name,
    )
    return {
        "jobDescription": job_description,
        "companyName": result.company_name.strip() or UNKNOWN_COMPANY,
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.head("/health")
def health_head():
    return health()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))

"""
app/connectors/csv_source.py

HTTP fetch of a remote CSV export with retry and exponential backoff.
"""

from __future__ import annotations

import logging
import time
from typing import Callable
from urllib.parse import urlparse

import requests

from app.config import CsvSourceSettings
from app.errors import FetchFailedError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class CsvSourceClient:
    """
    Plain unauthenticated GET of a CSV document.

    Every failure mode (bad URL, timeout, connection error, non-2xx status)
    surfaces as FetchFailedError.
    """

    def __init__(
        self,
        *,
        settings: CsvSourceSettings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = settings.timeout_seconds
        self._max_retries = settings.max_retries
        self._backoff_initial_seconds = settings.backoff_initial_seconds
        self._backoff_multiplier = settings.backoff_multiplier
        self._sleep = sleep

    def fetch_bytes(self, url: str) -> bytes:
        """
        Return the raw response body of ``url``.
        """

        parsed = urlparse(url or "")
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise FetchFailedError(f"Unsupported CSV source URL: {url!r}.")

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.get(url, timeout=self._timeout_seconds)
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response.content
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "CSV source request failed status=%s url=%s error=%s",
                        status_code,
                        url,
                        exc,
                    )
                    raise FetchFailedError(
                        f"CSV source returned HTTP {status_code}."
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "CSV source retry attempt=%s/%s wait_seconds=%.2f url=%s",
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            self._sleep(backoff_seconds)

        logger.error("CSV source exhausted retries url=%s error=%s", url, last_error)
        raise FetchFailedError("Failed to fetch CSV source after retries.") from last_error

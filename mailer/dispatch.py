"""Mail API client: one authenticated POST, awaited synchronously."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import requests
from requests import Response

from .config import Settings
from .errors import ApiError

logger = logging.getLogger(__name__)


class MailerClient:
    """Post envelopes to the mail API and block until the single call completes."""

    def __init__(self, api_key: str, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailerClient":
        return cls(settings.api_key, timeout=settings.request_timeout)

    def send(self, url: str, payload: bytes, api_key: str | None = None) -> bytes:
        """POST *payload* to *url* and return the raw response body.

        The request runs on a single worker thread and the caller waits on its
        future, bounded by ``timeout``. Failures raise :class:`ApiError`; there
        is no retry. *api_key* overrides the configured key for this call.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mailer-dispatch")
        try:
            future = executor.submit(self._post, url, payload, api_key or self.api_key)
            try:
                response = future.result(timeout=self.timeout)
            except FutureTimeoutError as exc:
                raise ApiError(f"Mail API did not respond within {self.timeout:g}s") from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.error("Mail API request failed (%s): %s", response.status_code, message)
            raise ApiError(message, status_code=response.status_code, body=response.text)

        if not response.content:
            logger.warning("Mail API returned %s with an empty body", response.status_code)
        return response.content

    def _post(self, url: str, payload: bytes, api_key: str) -> Response:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        logger.info("Posting %s bytes to %s", len(payload), url)
        try:
            return self.session.post(url, headers=headers, data=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"Mail API request failed: {exc}") from exc

    @staticmethod
    def _error_message(response: Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(payload, dict):
            for key in ("message", "error", "detail"):
                if payload.get(key):
                    return str(payload[key])
        return response.text or f"HTTP {response.status_code}"

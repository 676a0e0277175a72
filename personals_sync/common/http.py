"""HTTP client with timeouts, status classification and an optional retry policy."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from google.auth.exceptions import RefreshError, TransportError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from personals_sync.common.constants import USER_AGENT
from personals_sync.common.errors import ApiError, CredentialsError, RateLimitError, RetryableApiError

RETRYABLE_STATUS_CODES = {500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 60.0


@dataclass(frozen=True)
class RetryConfig:
    # One attempt means no automatic retry.
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpClient:
    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status == 429:
            raise RateLimitError("API rate limit exceeded")
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableApiError(f"Retryable HTTP status {status} from {url}")
        if status >= 400:
            raise ApiError(f"HTTP status {status} from {url}")

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        req_timeout = timeout or self.timeout
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                headers=self._headers(headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except RefreshError as exc:
            raise CredentialsError(f"Failed to refresh credentials: {exc}") from exc
        except (requests.RequestException, TransportError) as exc:
            raise ApiError(f"Request to {url} failed: {exc}") from exc
        self._raise_for_status(response, url)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON payload from {url}") from exc
        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected JSON payload from {url}")
        return payload

    def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableApiError),
            reraise=True,
        )
        def _wrapped() -> dict[str, Any]:
            return self._request_json(method, url, params=params, headers=headers, timeout=timeout)

        return _wrapped()

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        return self.request_json("GET", url, params=params, headers=headers, timeout=timeout)

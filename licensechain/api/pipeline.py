"""Request pipeline for the LicenseChain API.

Builds versioned URLs and headers, sends requests through httpx, retries
transient failures with exponential backoff, and turns error responses into
the typed exceptions of :mod:`licensechain.exceptions`.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Mapping, Optional

import httpx
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import Configuration
from ..constants import API_PATH_PREFIX, API_VERSION, PLATFORM, USER_AGENT
from ..exceptions import (
    AuthenticationError,
    InvalidResponseError,
    LicenseChainError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from ..logging import get_logger

logger = get_logger(__name__)

SERVER_ERROR_STATUSES = (500, 502, 503, 504)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def classify_response(status_code: int, body: Any) -> LicenseChainError:
    """Map a non-success HTTP response to the matching SDK error.

    Args:
        status_code: HTTP status of the response
        body: Decoded response body (anything other than a dict is kept only in details)

    Returns:
        The error instance to raise
    """
    data = body if isinstance(body, dict) else {}
    message = str(data.get("error") or data.get("message") or f"HTTP {status_code}")
    code = data.get("code")
    code = str(code) if code is not None else None
    details = {"status_code": status_code, "body": body}

    if status_code == 400:
        return ValidationError(message, code, status_code, details)
    if status_code in (401, 403):
        return AuthenticationError(message, code, status_code, details)
    if status_code == 404:
        return NotFoundError(message, code, status_code, details)
    if status_code == 429:
        return RateLimitError(
            message,
            code,
            status_code,
            details,
            retry_after=_as_int(data.get("retry_after")),
            limit=_as_int(data.get("limit")),
            remaining=_as_int(data.get("remaining")),
            reset=_as_int(data.get("reset")),
        )
    if status_code in SERVER_ERROR_STATUSES:
        return ServerError(message, code, status_code, details)
    if 400 <= status_code < 500:
        return ValidationError(message, code, status_code, details)
    if 500 <= status_code < 600:
        return ServerError(message, code, status_code, details)
    return LicenseChainError(message, code, status_code, details)


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, LicenseChainError) and error.retryable


class RequestPipeline:
    """Executes API requests with retry and error classification.

    A single pipeline is shared by every service of a client. The configuration
    is read fresh for each request, so replacing ``pipeline.config`` takes effect
    on the next call.

    Attributes:
        config: Active client configuration
    """

    def __init__(
        self,
        config: Configuration,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the pipeline.

        Args:
            config: Client configuration
            http_client: Optional pre-built httpx client (not closed by ``close``)
            sleep: Function used to wait between retries
        """
        self.config = config
        self._sleep = sleep
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client()
            self._owns_client = True
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this pipeline created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "RequestPipeline":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def build_url(self, path: str) -> str:
        """Join the base URL, the API version prefix and ``path``."""
        if not path.startswith("/"):
            path = "/" + path
        if not path.startswith(API_PATH_PREFIX + "/"):
            path = API_PATH_PREFIX + path
        return f"{self.config.base_url}{path}"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-Version": API_VERSION,
            "X-Platform": PLATFORM,
            "User-Agent": USER_AGENT,
        }

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request and return the decoded JSON response.

        Network failures, 429 and 5xx responses are retried up to
        ``config.retry_count`` times, waiting ``retry_delay * 2**(n-1)`` seconds
        before retry ``n``. Any other error response fails immediately.

        Args:
            method: HTTP method
            path: Endpoint path, with or without the version prefix
            body: Optional JSON body
            query: Optional query parameters (None values are dropped)

        Returns:
            Decoded JSON object

        Raises:
            LicenseChainError: Classified error for the terminal response
            NetworkError: If the API could not be reached on any attempt
        """
        method = method.upper()
        url = self.build_url(path)
        params = {k: v for k, v in (query or {}).items() if v is not None}
        config = self.config

        retrying = Retrying(
            stop=stop_after_attempt(config.retry_count + 1),
            wait=wait_exponential(multiplier=config.retry_delay, min=0),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )

        try:
            return retrying(self._send, method, url, body, params, config)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            if isinstance(last_error, NetworkError):
                raise NetworkError(
                    f"Maximum retry attempts exceeded: {last_error.message}",
                    details={
                        **last_error.details,
                        "attempts": e.last_attempt.attempt_number,
                    },
                ) from last_error
            logger.warning(
                "Request failed after retries",
                method=method,
                url=url,
                attempts=e.last_attempt.attempt_number,
                error=str(last_error),
            )
            raise last_error  # type: ignore[misc]

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.execute("GET", path, query=params)

    def post(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.execute("POST", path, body=data)

    def put(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.execute("PUT", path, body=data)

    def patch(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.execute("PATCH", path, body=data)

    def delete(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.execute("DELETE", path, body=data)

    def _send(
        self,
        method: str,
        url: str,
        body: Optional[Mapping[str, Any]],
        params: Dict[str, Any],
        config: Configuration,
    ) -> Dict[str, Any]:
        """Perform one attempt."""
        logger.debug("Sending request", method=method, url=url)
        try:
            response = self.client.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                params=params or None,
                headers=self.build_headers(),
                timeout=config.timeout,
            )
        except httpx.RequestError as e:
            raise NetworkError(
                f"Request failed: {e}", details={"method": method, "url": url}
            ) from e

        return self._handle_response(method, url, response)

    def _handle_response(
        self, method: str, url: str, response: httpx.Response
    ) -> Dict[str, Any]:
        body = self._decode(response)

        if 200 <= response.status_code < 300:
            logger.debug(
                "Request completed", method=method, url=url, status=response.status_code
            )
            if body is None:
                raise InvalidResponseError(
                    "Invalid JSON in response",
                    status_code=response.status_code,
                    details={"status_code": response.status_code, "body": response.text},
                )
            return body if isinstance(body, dict) else {"data": body}

        if body is None:
            body = {"raw": response.text}
        error = classify_response(response.status_code, body)
        logger.debug(
            "Request returned error",
            method=method,
            url=url,
            status=response.status_code,
            kind=error.kind.value,
        )
        raise error

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Decode a JSON body; empty bodies become ``{}``, undecodable ones ``None``."""
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return None

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retrying request",
            attempt=retry_state.attempt_number,
            max_attempts=self.config.retry_count + 1,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(error),
        )

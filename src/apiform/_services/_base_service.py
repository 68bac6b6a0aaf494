from importlib.metadata import PackageNotFoundError, version
from logging import getLogger
from typing import Any, Optional

from httpx import (
    AsyncClient,
    Client,
    ConnectTimeout,
    Headers,
    Request,
    Response,
    TimeoutException,
)
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from .._config import Config
from .._encoding import create_http_content, create_query_string
from .._utils import RequestSpec, get_httpx_client_kwargs, handle_errors
from .._utils.constants import HEADER_CONTENT_TYPE, HEADER_USER_AGENT, USER_AGENT_PREFIX
from ..telemetry import RequestTelemetry

MAX_RETRIES = 3


def is_retryable_exception(exception: BaseException) -> bool:
    return isinstance(exception, (ConnectTimeout, TimeoutException))


def is_retryable_status_code(response: Response) -> bool:
    return response.status_code >= 500 and response.status_code < 600


def _last_outcome(retry_state: RetryCallState) -> Response:
    # re-raises the last exception, or returns the last 5xx response
    assert retry_state.outcome is not None
    return retry_state.outcome.result()


_retry_policy = retry(
    retry=(
        retry_if_exception(is_retryable_exception)
        | retry_if_result(is_retryable_status_code)
    ),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    stop=stop_after_attempt(MAX_RETRIES + 1),
    retry_error_callback=_last_outcome,
)


def user_agent_value() -> str:
    try:
        client_version = version("apiform")
    except PackageNotFoundError:
        client_version = "unknown"
    return f"{USER_AGENT_PREFIX}/{client_version}"


class ApiService:
    """Sends requests whose parameters are form-encoded.

    Parameters go to the query string for ``GET``/``DELETE`` and to the body
    otherwise. Every attempt, retries included, rebuilds the request and asks
    the shared :class:`RequestTelemetry` for a header.
    """

    def __init__(self, config: Config, telemetry: RequestTelemetry) -> None:
        self._logger = getLogger("apiform")
        self._config = config
        self._telemetry = telemetry

        client_kwargs = {
            **get_httpx_client_kwargs(self._config),
            "base_url": self._config.base_url,
            "headers": Headers(self.default_headers),
        }

        self._client = Client(**client_kwargs)
        self._client_async = AsyncClient(**client_kwargs)

        self._logger.debug(f"HEADERS: {self._redacted(self.default_headers)}")

    @property
    def default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            HEADER_USER_AGENT: user_agent_value(),
            **self.auth_headers,
        }

    @property
    def auth_headers(self) -> dict[str, str]:
        if not self._config.secret:
            return {}
        return {"Authorization": f"Bearer {self._config.secret}"}

    @staticmethod
    def _redacted(headers: dict[str, str]) -> dict[str, str]:
        return {
            k: "***" if k.lower() == "authorization" else v for k, v in headers.items()
        }

    def _build_request(self, client: Client | AsyncClient, spec: RequestSpec) -> Request:
        headers = dict(spec.headers)
        kwargs: dict[str, Any] = {}

        if spec.sends_params_in_query:
            url = spec.endpoint
            query = create_query_string(spec.params, self._config.charset)
            if query:
                url = f"{url}{'&' if '?' in url else '?'}{query}"
        else:
            url = spec.endpoint
            content = create_http_content(spec.params, self._config.charset)
            headers.setdefault(HEADER_CONTENT_TYPE, content.content_type)
            kwargs["content"] = content.byte_array_content

        if spec.timeout is not None:
            kwargs["timeout"] = spec.timeout

        return client.build_request(spec.method, url, headers=headers, **kwargs)

    @_retry_policy
    def _send(self, spec: RequestSpec) -> Response:
        request = self._build_request(self._client, spec)
        return self._telemetry.send_with_telemetry(request, self._client.send)

    @_retry_policy
    async def _send_async(self, spec: RequestSpec) -> Response:
        request = self._build_request(self._client_async, spec)
        return await self._telemetry.send_with_telemetry_async(
            request, self._client_async.send
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Response:
        """Send a request and return the response.

        Args:
            method: HTTP method.
            url: Path relative to the configured base URL, or an absolute URL.
            params: Request parameters, possibly nested.
            headers: Extra headers. Setting ``X-Client-Telemetry`` here
                stops the client from adding its own.
            timeout: Per-request timeout in seconds.

        Raises:
            ApiError: If the API answers with an error status.
            MalformedParametersError: If ``params`` contain a reference cycle.
            EncodingError: If the body cannot be encoded.
        """
        self._logger.debug(f"Request: {method} {url}")
        spec = RequestSpec(
            method=method,
            endpoint=url,
            params=params or {},
            headers=headers or {},
            timeout=timeout,
        )

        response = self._send(spec)
        with handle_errors():
            response.raise_for_status()
        return response

    async def request_async(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Response:
        """Async version of :meth:`request`."""
        self._logger.debug(f"Request: {method} {url}")
        spec = RequestSpec(
            method=method,
            endpoint=url,
            params=params or {},
            headers=headers or {},
            timeout=timeout,
        )

        response = await self._send_async(spec)
        with handle_errors():
            response.raise_for_status()
        return response

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        await self._client_async.aclose()

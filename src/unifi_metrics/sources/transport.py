"""HTTP transport shared by the UniFi source clients.

Wraps an httpx.AsyncClient with the integration API's authentication
header and maps every failure onto the source error hierarchy:

- no response (timeout, refused connection, TLS) -> SourceTransportError
- non-2xx response -> SourceApiError (with the parsed error envelope when present)
- 2xx response with an unexpected body -> SourceResponseError

No retries are performed here; the next poll tick is the retry.
"""

from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from unifi_metrics.sources.models import ApiErrorBody
from unifi_metrics.sources.types import (
    SourceApiError,
    SourceResponseError,
    SourceTransportError,
)
from unifi_metrics.telemetry import SOURCE_REQUEST, SOURCE_REQUEST_FAILED, get_logger

log = get_logger(__name__)

T = TypeVar("T")

API_KEY_HEADER = "X-API-KEY"
MAX_ERROR_BODY_CHARS = 500


class UnifiTransport:
    """Authenticated JSON GET requests against one integration API.

    Attributes:
        source: Short source name used in errors and logs ("network", "protect").
        base_url: API base URL, e.g. "https://10.0.0.1/proxy/network/integration/v1".
        auth_error_names: Error envelope names that indicate a bad API token.
    """

    def __init__(
        self,
        source: str,
        base_url: str,
        api_token: str,
        timeout_seconds: float = 5.0,
        verify_tls: bool = False,
        auth_error_names: frozenset[str] = frozenset(),
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            source: Short source name.
            base_url: API base URL without trailing slash.
            api_token: Integration API key.
            timeout_seconds: Timeout for a single request.
            verify_tls: Verify the controller certificate.
            auth_error_names: Envelope names reported as authentication failures.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.source = source
        self.base_url = base_url.rstrip("/")
        self.auth_error_names = auth_error_names
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={API_KEY_HEADER: api_token, "Accept": "application/json"},
            timeout=httpx.Timeout(timeout_seconds),
            verify=verify_tls,
            transport=transport,
        )

    async def __aenter__(self) -> "UnifiTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self, path: str, adapter: TypeAdapter[T], params: dict[str, Any] | None = None
    ) -> T:
        """GET a path and validate the JSON body.

        Args:
            path: Path relative to the base URL (leading slash).
            adapter: Pydantic TypeAdapter for the expected body.
            params: Optional query parameters.

        Returns:
            The validated body.

        Raises:
            SourceTransportError: If no HTTP response was received.
            SourceApiError: If the status is not 2xx.
            SourceResponseError: If the body is not valid JSON of the expected shape.
        """
        log.debug(SOURCE_REQUEST, source=self.source, path=path, params=params)
        url = f"{self.base_url}{path}"

        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise SourceTransportError(
                f"Request to {url} timed out: {e}", source=self.source, kind="timeout"
            ) from e
        except httpx.ConnectError as e:
            raise SourceTransportError(
                f"Failed to connect to {url}: {e}", source=self.source, kind="connect"
            ) from e
        except httpx.RequestError as e:
            raise SourceTransportError(
                f"Request to {url} failed: {e}", source=self.source, kind="request"
            ) from e

        if not response.is_success:
            error = self._api_error(response)
            log.debug(
                SOURCE_REQUEST_FAILED,
                source=self.source,
                path=path,
                status_code=response.status_code,
                error=str(error),
            )
            raise error

        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            raise SourceResponseError(
                f"Unexpected response from {url}: {e}", source=self.source
            ) from e

    def _api_error(self, response: httpx.Response) -> SourceApiError:
        """Build a SourceApiError, parsing the upstream error envelope when possible."""
        status = response.status_code
        body = response.text
        label = f"UniFi {self.source.capitalize()} API"

        try:
            cause: ApiErrorBody | None = ApiErrorBody.model_validate_json(body)
        except ValidationError:
            cause = None

        if cause is None:
            message = f"{label} error ({status}): {body[:MAX_ERROR_BODY_CHARS]}"
        elif cause.name in self.auth_error_names:
            message = (
                f"{label} authentication failed. Please check your API token. "
                f"Error: {cause.name} - {cause.error}"
            )
        else:
            message = f"{label} error ({status}): {cause.name} - {cause.error}"

        return SourceApiError(
            message, source=self.source, status_code=status, body=body, cause=cause
        )

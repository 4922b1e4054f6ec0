"""HTTP client wrapper for outbound requests to the target."""

import asyncio
import json
from typing import Any

import httpx

from core.exceptions import (
    InvalidTargetURL,
    TooManyRedirectsError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)
from core.headers import merge_headers, parse_target_url
from core.request_types import ProxyRequest, UpstreamResponse


class UpstreamClient:
    """Send one outbound request over a shared client.

    The client never raises on 4xx/5xx: every status the target returns is a
    successful transport outcome. Only transport failures are translated into
    UpstreamError subclasses.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 30.0) -> None:
        self._client = client
        self._timeout = timeout

    async def send(self, request: ProxyRequest) -> UpstreamResponse:
        """Execute the request and read the whole body."""
        url = request.target_url
        parse_target_url(url)
        headers, content = _encode_body(request.headers, request.body)

        try:
            # httpx timeouts apply per phase, the deadline covers the whole call
            async with asyncio.timeout(self._timeout):
                response = await self._client.request(
                    request.method,
                    url,
                    headers=headers,
                    content=content,
                    timeout=self._timeout,
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise UpstreamTimeoutError(
                f"Upstream request timed out after {self._timeout:g}s", url=url
            ) from e
        except httpx.TooManyRedirects as e:
            raise TooManyRedirectsError(f"Too many redirects: {e}", url=url) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidTargetURL(f"Invalid URL: {e}", url=url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"Upstream connection error: {str(e) or type(e).__name__}", url=url
            ) from e

        return UpstreamResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response.content,
        )


def _encode_body(headers: dict[str, str], body: Any) -> tuple[dict[str, str], bytes | None]:
    """Encode a caller-supplied body: None is no body, str is sent as-is, else JSON."""
    if body is None:
        return headers, None
    if isinstance(body, str):
        return headers, body.encode("utf-8")
    headers = merge_headers({"Content-Type": "application/json"}, headers)
    return headers, json.dumps(body).encode("utf-8")

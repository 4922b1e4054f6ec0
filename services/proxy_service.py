"""Proxy orchestration: one inbound request in, one reply out."""

import json
import time
from typing import Any

from core.exceptions import ProxyError, UpstreamError, ValidationError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import ProxyReply, ProxyRequest
from services.upstream import UpstreamClient
from ui.log_utils import redact_headers

GET_USAGE = "/proxy?url=https://example.com"


class ProxyService:
    """Translate proxy requests into outbound calls and sanitized replies.

    Independent of the web framework: callers hand in the query value or the
    decoded JSON body and get a ProxyReply back. Every failure is turned into
    a JSON error reply, nothing is raised to the caller.
    """

    def __init__(
        self,
        logger: RequestLogger,
        upstream: UpstreamClient,
        header_builder: HeaderBuilder,
    ) -> None:
        self._logger = logger
        self._upstream = upstream
        self._headers = header_builder

    async def handle_get(self, url: str | None) -> ProxyReply:
        """Handle GET /proxy?url=..."""
        if not url:
            return self.error_reply(ValidationError("URL parameter is required", usage=GET_USAGE))

        try:
            headers = self._headers.build_browser_headers(url)
        except UpstreamError as e:
            self._log_failure("GET", url, e)
            return self.error_reply(e)

        return await self.forward(ProxyRequest(target_url=url, method="GET", headers=headers))

    async def handle_post(self, payload: Any) -> ProxyReply:
        """Handle POST /proxy with a {url, method, headers, body} payload."""
        try:
            request = ProxyRequest.from_payload(payload)
        except ValidationError as e:
            return self.error_reply(e)

        headers = self._headers.build_forward_headers(request.headers)
        return await self.forward(
            ProxyRequest(
                target_url=request.target_url,
                method=request.method,
                headers=headers,
                body=request.body,
            )
        )

    async def forward(self, request: ProxyRequest) -> ProxyReply:
        """Send the request upstream and relay the sanitized result."""
        self._logger.log(
            "proxy.request",
            {
                "method": request.method,
                "url": request.target_url,
                "headers": redact_headers(request.headers),
            },
        )
        started = time.perf_counter()
        try:
            response = await self._upstream.send(request)
        except UpstreamError as e:
            self._log_failure(request.method, request.target_url, e)
            return self.error_reply(e)

        self._logger.log(
            "proxy.response",
            {
                "method": request.method,
                "url": request.target_url,
                "status": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000),
            },
        )
        return ProxyReply(
            status_code=response.status_code,
            headers=self._headers.build_reply_headers(response.headers),
            body=response.body,
        )

    def cors_headers(self) -> list[tuple[str, str]]:
        return self._headers.cors_headers()

    def error_reply(self, error: ProxyError) -> ProxyReply:
        """Render an error as a JSON reply carrying the CORS headers."""
        return ProxyReply(
            status_code=error.status_code,
            headers=[("Content-Type", "application/json"), *self._headers.cors_headers()],
            body=json.dumps(error_body(error)).encode("utf-8"),
        )

    def _log_failure(self, method: str, url: str, error: UpstreamError) -> None:
        self._logger.log(
            "proxy.error",
            {"method": method, "url": url, "error": type(error).__name__, "message": str(error)},
        )


def error_body(error: ProxyError) -> dict[str, str]:
    """Build the {error, message?, usage?} body for an exception."""
    if error.title:
        body = {"error": error.title, "message": str(error)}
    else:
        body = {"error": str(error)}
    usage = getattr(error, "usage", None)
    if usage:
        body["usage"] = usage
    return body

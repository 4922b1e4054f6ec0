"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Any

import httpx

from core.exceptions import ValidationError

POST_USAGE = 'POST /proxy {"url": "https://example.com", "method": "GET", "headers": {}, "body": null}'


@dataclass(frozen=True)
class ProxyRequest:
    """Outbound request described by the caller."""

    target_url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProxyRequest":
        """Build a request from a POST /proxy JSON body."""
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object", usage=POST_USAGE)

        url = payload.get("url")
        if not url:
            raise ValidationError("URL is required in request body", usage=POST_USAGE)
        if not isinstance(url, str):
            raise ValidationError("url must be a string", usage=POST_USAGE)

        method = payload.get("method") or "GET"
        if not isinstance(method, str):
            raise ValidationError("method must be a string", usage=POST_USAGE)

        headers = payload.get("headers") or {}
        if not isinstance(headers, dict):
            raise ValidationError("headers must be an object", usage=POST_USAGE)

        return cls(
            target_url=url,
            method=method.upper(),
            headers=_header_values(headers),
            body=payload.get("body"),
        )


@dataclass(frozen=True)
class UpstreamResponse:
    """Reply received from the target."""

    status_code: int
    headers: httpx.Headers
    body: bytes


@dataclass(frozen=True)
class ProxyReply:
    """Framework-neutral reply to send back to the caller."""

    status_code: int
    headers: list[tuple[str, str]]
    body: bytes


def _header_values(headers: dict[str, Any]) -> dict[str, str]:
    """Drop null header values and render scalars the way a JSON client would."""
    result = {}
    for key, value in headers.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (int, float)):
            value = str(value)
        elif not isinstance(value, str):
            raise ValidationError("header values must be strings", usage=POST_USAGE)
        if not key.isascii() or not value.isascii():
            raise ValidationError(
                f"header {key!r} must contain only ASCII characters", usage=POST_USAGE
            )
        result[key] = value
    return result

"""Header construction for outbound requests and relayed replies."""

import httpx

from core.config import CorsSettings, UpstreamSettings
from core.exceptions import InvalidTargetURL

# Response headers that stop the calling page from embedding the target
HEADER_DENYLIST = frozenset(
    {
        "x-frame-options",
        "content-security-policy",
        "content-security-policy-report-only",
        "cross-origin-opener-policy",
        "cross-origin-embedder-policy",
    }
)

# httpx decodes the body, so the upstream framing headers no longer apply
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "transfer-encoding",
        "content-encoding",
        "content-length",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "upgrade",
    }
)


def parse_target_url(url: str) -> httpx.URL:
    """Parse an absolute http(s) URL or raise InvalidTargetURL."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidTargetURL(f"Invalid URL: {e}", url=url) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidTargetURL(f"Invalid URL: {url}", url=url)
    return parsed


def origin_of(url: str) -> str:
    """Return scheme://host[:port] of an absolute URL."""
    parsed = parse_target_url(url)
    return f"{parsed.scheme}://{parsed.netloc.decode('ascii')}"


def merge_headers(defaults: dict[str, str], overrides: dict[str, str]) -> dict[str, str]:
    """Merge two header mappings, overrides win on case-insensitive collision."""
    overridden = {key.lower() for key in overrides}
    merged = {key: value for key, value in defaults.items() if key.lower() not in overridden}
    merged.update(overrides)
    return merged


class HeaderBuilder:
    """Build outbound request headers and sanitized reply headers."""

    def __init__(self, upstream: UpstreamSettings, cors: CorsSettings) -> None:
        self._upstream = upstream
        self._cors = cors

    def build_browser_headers(self, target_url: str) -> dict[str, str]:
        """Headers of a plain browser navigation to the target."""
        return {
            "User-Agent": self._upstream.user_agent,
            "Accept": self._upstream.accept,
            "Accept-Language": self._upstream.accept_language,
            "Referer": origin_of(target_url),
        }

    def build_forward_headers(self, caller_headers: dict[str, str]) -> dict[str, str]:
        """Synthetic User-Agent overridden by whatever the caller supplied."""
        return merge_headers({"User-Agent": self._upstream.user_agent}, caller_headers)

    def cors_headers(self) -> list[tuple[str, str]]:
        """Headers added to every reply."""
        headers = [
            ("Access-Control-Allow-Origin", "*"),
            ("Access-Control-Allow-Methods", self._cors.allow_methods),
            ("Access-Control-Allow-Headers", self._cors.allow_headers),
        ]
        if self._cors.frame_options:
            headers.append(("X-Frame-Options", self._cors.frame_options))
        return headers

    def build_reply_headers(self, upstream_headers: httpx.Headers) -> list[tuple[str, str]]:
        """Strip denylisted and hop-by-hop headers, then add CORS headers."""
        cors = self.cors_headers()
        skipped = HEADER_DENYLIST | HOP_BY_HOP_HEADERS | {name.lower() for name, _ in cors}
        relayed = [
            (key, value)
            for key, value in upstream_headers.multi_items()
            if key.lower() not in skipped
        ]
        return relayed + cors

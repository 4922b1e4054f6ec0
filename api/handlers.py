"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.exceptions import InvalidJSON, RequestTooLarge
from core.request_types import ProxyReply
from services.proxy_service import ProxyService
from ui.log_utils import utc_timestamp


async def _parse_json_body(request: Request, max_body_size: int) -> Any:
    """Parse request body as JSON, raising RequestTooLarge or InvalidJSON."""
    raw_body = await request.body()
    if len(raw_body) > max_body_size:
        raise RequestTooLarge("Request body too large")

    text_body = raw_body.decode("utf-8", errors="replace")
    try:
        return json.loads(text_body)
    except (JSONDecodeError, ValueError) as e:
        raise InvalidJSON(str(e)) from e


def render_reply(reply: ProxyReply) -> Response:
    """Turn a ProxyReply into a Starlette response, keeping repeated headers."""
    response = Response(content=reply.body, status_code=reply.status_code)
    for key, value in reply.headers:
        response.headers.append(key, value)
    return response


async def handle_proxy_get(request: Request) -> Response:
    """Handle GET /proxy?url=..."""
    service: ProxyService = request.app.state.proxy_service
    reply = await service.handle_get(request.query_params.get("url"))
    return render_reply(reply)


async def handle_proxy_post(request: Request, max_body_size: int) -> Response:
    """Handle POST /proxy with a JSON request description."""
    service: ProxyService = request.app.state.proxy_service
    try:
        payload = await _parse_json_body(request, max_body_size)
    except (RequestTooLarge, InvalidJSON) as e:
        return render_reply(service.error_reply(e))

    reply = await service.handle_post(payload)
    return render_reply(reply)


async def handle_preflight(request: Request) -> Response:
    """Answer OPTIONS requests that CORSMiddleware does not treat as preflight."""
    service: ProxyService = request.app.state.proxy_service
    return render_reply(ProxyReply(204, service.cors_headers(), b""))


def _json_with_cors(request: Request, content: dict[str, Any]) -> JSONResponse:
    service: ProxyService = request.app.state.proxy_service
    return JSONResponse(content, headers=dict(service.cors_headers()))


async def handle_root(request: Request) -> JSONResponse:
    """Static description of the service for GET /."""
    return _json_with_cors(request, {
        "status": "running",
        "message": "CORS Forward Proxy",
        "endpoints": {
            "proxy": "/proxy?url=TARGET_URL",
            "health": "/health",
        },
    })


async def handle_health(request: Request) -> JSONResponse:
    return _json_with_cors(request, {"status": "ok", "timestamp": utc_timestamp()})

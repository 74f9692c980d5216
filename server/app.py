"""
Probe server application factory.

Routes::

    GET  /api/health
    GET  /api/ping
    GET  /api/download?size=<MB>
    POST /api/upload        (multipart field ``data``)
    POST /api/upload-raw    (raw octet-stream body)
"""
import logging
import time
from typing import Optional

from aiohttp import web

from . import handlers
from .config import Config

logger = logging.getLogger(__name__)

_ERROR_MESSAGES = {
    404: "Endpoint not found",
    405: "Method not allowed",
    413: "Payload too large",
}


# ---------------------------------------------------------------------------
# Middlewares
# ---------------------------------------------------------------------------

@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn every failure into a JSON body; never let one escape."""
    try:
        return await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        body = {"error": _ERROR_MESSAGES.get(exc.status, exc.reason)}
        headers = {}
        if "Allow" in exc.headers:
            headers["Allow"] = exc.headers["Allow"]
        return web.json_response(body, status=exc.status, headers=headers)
    except Exception as exc:
        logger.exception("Server error on %s %s", request.method, request.path)
        return web.json_response(
            {"error": "Internal server error", "message": str(exc)},
            status=500,
        )


def cors_middleware(origin: str):
    allow = {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
    }
    preflight = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Cache-Control, Pragma",
    }

    @web.middleware
    async def middleware(request: web.Request, handler):
        if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
            response = web.Response(status=204, headers=preflight)
        else:
            response = await handler(request)
        response.headers.update(allow)
        return response

    return middleware


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(cors_origin: Optional[str] = None) -> web.Application:
    app = web.Application(
        client_max_size=handlers.MAX_UPLOAD_BYTES + 1,
        middlewares=[
            cors_middleware(cors_origin or Config.CORS_ORIGIN),
            error_middleware,
        ],
    )
    app[handlers.STARTED_AT] = time.monotonic()

    app.router.add_get("/api/health", handlers.health)
    app.router.add_get("/api/ping", handlers.ping)
    app.router.add_get("/api/download", handlers.download, allow_head=False)
    app.router.add_post("/api/upload", handlers.upload)
    app.router.add_post("/api/upload-raw", handlers.upload_raw)
    return app


def run(host: Optional[str] = None, port: Optional[int] = None,
        cors_origin: Optional[str] = None) -> None:
    host = host or Config.HOST
    port = port or Config.PORT
    logger.info("Speed test backend listening on http://%s:%s/api", host, port)
    web.run_app(create_app(cors_origin), host=host, port=port, print=None)

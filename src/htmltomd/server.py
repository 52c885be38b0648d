"""HTTP server exposing the conversion endpoint (aiohttp.web)."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

from aiohttp import web
from pydantic import ValidationError

from . import __version__
from .core.converter import Converter
from .errors import HtmlToMdError
from .models.config import ServerConfig
from .models.conversion import ConversionRequest

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", ServerConfig)
CONVERTER_KEY = web.AppKey("converter", Converter)


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _validation_message(err: ValidationError) -> str:
    first = err.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


async def _read_payload(request: web.Request) -> Optional[dict[str, Any]]:
    """Collect url, selector and filters from the query string or JSON body.

    Returns None when a POST body is not a JSON object.
    """
    if request.method == "GET":
        query = request.query
        return {
            "url": query.get("url", ""),
            "selector": query.get("selector", ""),
            "filters": query.getall("filters", []),
        }

    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


async def handle_convert(request: web.Request) -> web.Response:
    """
    Convert a page to Markdown.

    GET takes ``url``, ``selector`` and repeated ``filters`` query
    parameters; POST takes the same fields as a JSON object.
    """
    if request.method not in ("GET", "POST"):
        return _error(405, "Method not allowed")

    payload = await _read_payload(request)
    if payload is None:
        return _error(400, "Invalid request body")

    if not payload.get("url"):
        return _error(400, "URL is required")

    try:
        conversion_request = ConversionRequest.model_validate(payload)
    except ValidationError as e:
        return _error(400, _validation_message(e))

    converter = request.app[CONVERTER_KEY]
    try:
        response = await converter.convert(conversion_request)
    except HtmlToMdError as e:
        logger.error(f"Conversion of {conversion_request.url} failed: {e}")
        return _error(e.http_status, str(e))
    except Exception as e:
        logger.exception(f"Unexpected error converting {conversion_request.url}: {e}")
        return _error(500, "Internal server error")

    return web.json_response(response.model_dump())


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


async def _converter_lifecycle(app: web.Application) -> AsyncIterator[None]:
    converter = app[CONVERTER_KEY]
    await converter.start()
    yield
    await converter.close()


def create_app(config: Optional[ServerConfig] = None, converter: Optional[Converter] = None) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        config: Server configuration (defaults if None)
        converter: Converter to use; built from config if None

    Returns:
        Application with the conversion route and /healthz
    """
    config = config or ServerConfig()
    app = web.Application()
    app[CONFIG_KEY] = config
    app[CONVERTER_KEY] = converter or Converter(config)

    # Method check happens in the handler so anything else gets our 405 body
    app.router.add_route("*", config.route, handle_convert)
    app.router.add_get("/healthz", handle_health)
    app.cleanup_ctx.append(_converter_lifecycle)
    return app


def run_server(config: ServerConfig) -> None:
    """Serve until interrupted."""
    app = create_app(config)
    logger.info(f"Server is running on http://{config.host}:{config.port}{config.route}")
    web.run_app(
        app,
        host=config.host,
        port=config.port,
        access_log=logging.getLogger("htmltomd.access"),
        print=None,
    )

"""HTTP API for the jukebox, served by aiohttp next to the Discord client.

Every route funnels through the same ``JukeboxService`` as the slash commands
and answers with a ``{"success": ..., "msg"|"data"|"error": ...}`` envelope.
"""

from __future__ import annotations

import hmac
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from aiohttp import web

from voice_jukebox.domain.shared.constants import HttpHeaders, SearchConstants
from voice_jukebox.domain.shared.exceptions import DomainError
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from aiohttp.typedefs import Handler

    from voice_jukebox.application.commands.command_result import CommandResult
    from voice_jukebox.application.services.jukebox_service import JukeboxService
    from voice_jukebox.config.settings import WebSettings

logger = logging.getLogger(__name__)

INDEX_PATH: Final = Path(__file__).parent / "static" / "index.html"
PUBLIC_PATHS: Final = frozenset({"/", "/index.html"})
MAX_CLIENT_SIZE: Final = 1024**2

CORS_HEADERS: Final = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {HttpHeaders.AUTH_TOKEN}",
}


def envelope(result: CommandResult) -> dict[str, Any]:
    """Map a command result to the JSON body the web UI expects."""
    if result.is_success:
        return {"success": True, "msg": result.message}
    return {"success": False, "error": result.message}


def _json(data: Any, status: int = 200) -> web.Response:
    return web.json_response(data, status=status)


def _int_param(request: web.Request, name: str, default: int | None = None) -> int | None:
    raw = request.query.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return None


class JukeboxWebServer:
    """Owns the aiohttp application, its runner and the TCP site."""

    def __init__(self, service: JukeboxService, settings: WebSettings) -> None:
        self._service = service
        self._settings = settings
        self._password = settings.password.get_secret_value()
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self.app = self._build_app()

    def _build_app(self) -> web.Application:
        app = web.Application(
            middlewares=[self._cors_middleware, self._error_middleware, self._auth_middleware],
            client_max_size=MAX_CLIENT_SIZE,
        )
        app.router.add_get("/", self._handle_index)
        app.router.add_get("/index.html", self._handle_index)
        app.router.add_get("/api/status", self._handle_status)
        app.router.add_get("/api/system", self._handle_system)
        app.router.add_post("/api/control", self._handle_control)
        app.router.add_post("/api/setmode", self._handle_set_mode)
        app.router.add_post("/api/cmd", self._handle_cmd)
        app.router.add_post("/api/login", self._handle_login)
        app.router.add_get("/api/search", self._handle_search)
        # catch-all last so unknown API paths get a JSON 404
        app.router.add_route("*", "/api/{tail:.*}", self._handle_not_found)
        return app

    @property
    def is_running(self) -> bool:
        return self._site is not None

    async def start(self) -> None:
        if self._runner is not None:
            return
        self._runner = web.AppRunner(self.app, access_log=None)
        await self._runner.setup()
        # None binds to all addresses on both IPv4 and IPv6
        host = None if self._settings.host == "0.0.0.0" else self._settings.host
        self._site = web.TCPSite(self._runner, host=host, port=self._settings.port)
        try:
            await self._site.start()
        except OSError:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise
        logger.info(LogTemplates.WEB_STARTED, self._settings.host, self._settings.port)

    async def stop(self) -> None:
        if self._site is not None:
            await self._site.stop()
            self._site = None
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info(LogTemplates.WEB_STOPPED)

    # ─────────────────────────────────────────────────────────────────
    # Middlewares
    # ─────────────────────────────────────────────────────────────────

    @web.middleware
    async def _cors_middleware(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        if request.method == "OPTIONS":
            return web.Response(status=204, headers=CORS_HEADERS)
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers.update(CORS_HEADERS)
            raise
        response.headers.update(CORS_HEADERS)
        return response

    @web.middleware
    async def _error_middleware(
        self, request: web.Request, handler: Handler
    ) -> web.StreamResponse:
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except Exception as exc:
            logger.exception(LogTemplates.WEB_HANDLER_ERROR, request.path)
            return _json({"error": str(exc) or ErrorMessages.UNEXPECTED}, status=500)

    @web.middleware
    async def _auth_middleware(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        if self._password and request.path not in PUBLIC_PATHS:
            token = request.headers.get(HttpHeaders.AUTH_TOKEN) or request.query.get(
                HttpHeaders.AUTH_QUERY_PARAM, ""
            )
            if not hmac.compare_digest(token.encode(), self._password.encode()):
                logger.warning(LogTemplates.WEB_UNAUTHORIZED, request.path, request.remote)
                return _json({"error": ErrorMessages.UNAUTHORIZED}, status=401)
        return await handler(request)

    # ─────────────────────────────────────────────────────────────────
    # Handlers
    # ─────────────────────────────────────────────────────────────────

    async def _handle_index(self, request: web.Request) -> web.StreamResponse:
        return web.FileResponse(INDEX_PATH, headers={"Cache-Control": "no-cache"})

    async def _handle_not_found(self, request: web.Request) -> web.Response:
        return _json({"error": ErrorMessages.ROUTE_NOT_FOUND.format(path=request.path)}, 404)

    async def _handle_status(self, request: web.Request) -> web.Response:
        status = self._service.get_status()
        return _json({"success": True, "data": status.model_dump(mode="json")})

    async def _handle_system(self, request: web.Request) -> web.Response:
        statuses = await self._service.get_provider_statuses()
        return _json(
            {"success": True, "data": [s.model_dump(mode="json") for s in statuses]}
        )

    async def _handle_control(self, request: web.Request) -> web.Response:
        action = request.query.get("action", "").strip().lower()
        actions: dict[str, Callable[[], Awaitable[CommandResult]]] = {
            "next": self._service.play_next_music,
            "stop": self._service.stop,
            "pause": lambda: self._service.set_paused(True),
            "resume": lambda: self._service.set_paused(False),
            "clear": self._service.clear_playlist,
        }
        operation = actions.get(action)
        if operation is None:
            return _json(
                {
                    "success": False,
                    "error": ErrorMessages.UNKNOWN_CONTROL_ACTION.format(action=action),
                }
            )
        result = await self._service.run(operation())
        return _json(envelope(result))

    async def _handle_set_mode(self, request: web.Request) -> web.Response:
        mode = _int_param(request, "mode")
        if mode is None:
            return _json(
                {"success": False, "error": ErrorMessages.INVALID_INTEGER.format(name="mode")}
            )
        result = await self._service.run(self._service.set_mode(mode))
        return _json(envelope(result))

    async def _handle_cmd(self, request: web.Request) -> web.Response:
        command_type = request.query.get("type", "")
        query = request.query.get("query", "")
        logger.info("Cmd received: type=%s, query=%s", command_type, query)
        result = await self._service.run(self._service.typed_command(command_type, query))
        return _json(envelope(result))

    async def _handle_login(self, request: web.Request) -> web.Response:
        try:
            body = await request.json()
        except json.JSONDecodeError:
            body = None
        if not isinstance(body, dict):
            return _json({"success": False, "error": ErrorMessages.INVALID_JSON_BODY})

        platform = str(body.get("platform") or "")
        raw_args = body.get("args") or ""
        args = raw_args.split() if isinstance(raw_args, str) else [str(a) for a in raw_args]
        result = await self._service.run(self._service.login(platform, args))
        return _json(envelope(result))

    async def _handle_search(self, request: web.Request) -> web.Response:
        keyword = request.query.get("q", "")
        kind = request.query.get("type", "song") or "song"
        limit = _int_param(request, "limit", SearchConstants.DEFAULT_LIMIT)
        if limit is None or limit <= 0:
            limit = SearchConstants.DEFAULT_LIMIT

        try:
            results = await self._service.search_all(keyword, kind, limit)
        except DomainError as exc:
            return _json({"success": False, "error": exc.message})
        return _json({"success": True, "data": [r.model_dump(mode="json") for r in results]})

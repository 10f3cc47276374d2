 # main.py (MCP Streamable HTTP transport)
 # - FastAPI-based MCP server
 # - POST /mcp: one JSON-RPC request per body, JSON response or 202 for notifications
 # - GET /mcp: optional SSE stream (keepalive comments only)
 # - Legacy REST endpoints (/mcp/initialize, /mcp/tools/list, /mcp/tools/call) for older clients

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Set

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from geo_mcp.config import Config
from geo_mcp.container import Container, build_container
from geo_mcp.dispatcher import SUPPORTED_PROTOCOL_VERSIONS, Dispatcher, parse_request, peek_id
from geo_mcp.errors import (
    PARSE_ERROR,
    InvalidArguments,
    MethodNotFound,
    ProtocolError,
    UpstreamError,
)
from geo_mcp.schemas.mcp import jsonrpc_err
from geo_mcp.tools import call_tool

logger = logging.getLogger("mcp")

PROTOCOL_VERSION_HEADER = "mcp-protocol-version"


async def keepalive_events(
    interval: float,
    is_disconnected: Callable[[], Awaitable[bool]],
) -> AsyncIterator[str]:
    """SSE comment frames until the client goes away."""
    # Initial hello
    yield ": keep-alive\n\n"
    while not await is_disconnected():
        await asyncio.sleep(interval)
        yield ": keepalive\n\n"


class ToolCallPayload(BaseModel):
    name: Optional[str] = None
    arguments: Optional[Dict[str, Any]] = None


def create_app(cfg: Optional[Config] = None, container: Optional[Container] = None) -> FastAPI:
    cfg = cfg or (container.cfg if container else Config.from_env())
    container = container or build_container(cfg)
    dispatcher = Dispatcher(container.service, container.registry, cfg)
    # notifications run after their 202 has been sent
    background: Set[asyncio.Task] = set()

    def _reap(task: asyncio.Task) -> None:
        background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("notification handling failed", exc_info=task.exception())

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"{cfg.server_name} (HTTP) serving /mcp, tools: {', '.join(container.registry.names())}")
        yield
        if background:
            await asyncio.gather(*list(background), return_exceptions=True)
        dispatcher.close()
        await container.aclose()

    app = FastAPI(title=cfg.server_name, version=cfg.server_version, lifespan=lifespan)
    app.state.container = container
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "healthy", "app": "initialized", "version": cfg.server_version}

    @app.post("/mcp")
    async def mcp_entry(request: Request):
        """Single JSON-RPC endpoint: one request per body."""
        proto = request.headers.get(PROTOCOL_VERSION_HEADER)
        if proto and proto not in SUPPORTED_PROTOCOL_VERSIONS:
            return JSONResponse(
                jsonrpc_err(None, ProtocolError.code, f"Unsupported MCP protocol version: {proto}"),
                status_code=400,
            )

        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(jsonrpc_err(None, PARSE_ERROR, "Parse error"), status_code=400)

        try:
            req = parse_request(payload)
        except ProtocolError as e:
            return JSONResponse(jsonrpc_err(peek_id(payload), e.code, e.message), status_code=400)

        # JSON-RPC notifications (no id): acknowledge without body, handle afterwards
        if req.is_notification:
            task = asyncio.create_task(dispatcher.handle(req))
            background.add(task)
            task.add_done_callback(_reap)
            return Response(status_code=202)

        resp = await dispatcher.handle(req)
        if resp is None:
            return Response(status_code=202)
        return JSONResponse(resp)

    @app.get("/mcp")
    async def mcp_sse(request: Request):
        """Optional SSE stream for clients that open a separate event channel.
        No tool traffic is sent here, only keepalive comments.
        """
        return StreamingResponse(
            keepalive_events(cfg.sse_keepalive_sec, request.is_disconnected),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    # -----------------------------------------------------------------
    # Legacy REST endpoints
    # -----------------------------------------------------------------
    @app.post("/mcp/initialize")
    def legacy_initialize():
        return dispatcher.initialize_result()

    @app.post("/mcp/tools/list")
    def legacy_tools_list():
        return {"tools": container.registry.list()}

    @app.post("/mcp/tools/call")
    async def legacy_tools_call(payload: ToolCallPayload):
        if not payload.name or payload.arguments is None:
            return JSONResponse({"error": "Missing tool name or arguments"}, status_code=400)
        try:
            return await call_tool(container.registry, container.service, payload.name, payload.arguments)
        except MethodNotFound as e:
            return JSONResponse({"error": e.message, "code": e.code}, status_code=404)
        except InvalidArguments as e:
            return JSONResponse({"error": e.message, "code": e.code}, status_code=400)
        except UpstreamError as e:
            logger.info(json.dumps({"event": "legacy.tool.error", "tool": payload.name, "msg": e.message}))
            return JSONResponse({"error": f"Tool execution failed: {e.message}", "code": e.code}, status_code=502)
        except Exception as e:
            logger.exception("server error on legacy tools/call")
            return JSONResponse({"error": f"Tool execution failed: {e}", "code": -32603}, status_code=500)

    return app

# ws.py (MCP over WebSocket)
# - One JSON-RPC exchange per text message, many exchanges per connection
# - Each connection is its own Dispatcher session
# - Messages are handled concurrently; replies go out as each finishes

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from geo_mcp.config import Config
from geo_mcp.container import Container, build_container
from geo_mcp.dispatcher import Dispatcher, SessionState, peek_id
from geo_mcp.errors import INTERNAL_ERROR, PARSE_ERROR
from geo_mcp.schemas.mcp import jsonrpc_err

logger = logging.getLogger("mcp.ws")


class WebSocketSession:
    """Binds one accepted socket to one Dispatcher."""

    def __init__(self, websocket: WebSocket, dispatcher: Dispatcher):
        self.websocket = websocket
        self.dispatcher = dispatcher
        self._send_lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    async def send(self, message: Dict[str, Any]) -> None:
        # late replies for a closed connection are dropped
        if self.dispatcher.state is SessionState.CLOSED:
            return
        async with self._send_lock:
            try:
                await self.websocket.send_text(json.dumps(message, ensure_ascii=False))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug("reply dropped, socket gone: %s", e)

    async def process(self, raw: str) -> None:
        payload: Any = None
        try:
            try:
                payload = json.loads(raw)
            except ValueError:
                await self.send(jsonrpc_err(None, PARSE_ERROR, "Parse error"))
                return
            resp = await self.dispatcher.dispatch(payload)
            if resp is not None:
                await self.send(resp)
        except Exception as e:
            logger.exception("websocket message processing failed")
            await self.send(jsonrpc_err(peek_id(payload), INTERNAL_ERROR, "Internal error", data=str(e)))

    def submit(self, raw: str) -> None:
        task = asyncio.create_task(self.process(raw))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def run(self) -> None:
        await self.websocket.accept()
        logger.info("WebSocket client connected")
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None and message.get("bytes") is not None:
                    raw = message["bytes"].decode("utf-8", "replace")
                if raw is None:
                    continue
                self.submit(raw)
        except WebSocketDisconnect:
            pass
        finally:
            self.dispatcher.close()
            logger.info("WebSocket client disconnected (pending=%d)", len(self._tasks))


def create_ws_app(cfg: Optional[Config] = None, container: Optional[Container] = None) -> FastAPI:
    cfg = cfg or (container.cfg if container else Config.from_env())
    container = container or build_container(cfg)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"{cfg.server_name} (WebSocket) ready, {len(container.registry)} tools")
        yield
        await container.aclose()

    app = FastAPI(title=cfg.server_name, version=cfg.server_version, lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def _descriptor() -> Dict[str, Any]:
        return {
            "name": cfg.server_name,
            "version": cfg.server_version,
            "transport": "websocket",
            "protocolVersion": cfg.protocol_revision,
        }

    @app.get("/health")
    @app.get("/healthz")
    def health():
        return {"status": "ok", "version": cfg.server_version}

    # handshake probing
    @app.get("/")
    @app.post("/")
    def root():
        return _descriptor()

    async def _serve(websocket: WebSocket) -> None:
        dispatcher = Dispatcher(container.service, container.registry, cfg)
        await WebSocketSession(websocket, dispatcher).run()

    app.add_api_websocket_route("/", _serve)
    app.add_api_websocket_route("/{path:path}", _serve)

    return app

"""JSON-RPC request dispatcher shared by every transport.

A ``Dispatcher`` is one logical MCP session: the stdio loop and each WebSocket
connection get their own, the streamable HTTP app shares one. Transports only
frame bytes; routing, error mapping and the notification rules live here.
"""
import enum
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from geo_mcp.config import Config
from geo_mcp.errors import (
    INTERNAL_ERROR,
    GeoMCPError,
    InvalidArguments,
    MethodNotFound,
    ProtocolError,
)
from geo_mcp.schemas.mcp import JSONRPC_VERSION, JsonRpcRequest, jsonrpc_err, jsonrpc_ok
from geo_mcp.tools import ToolRegistry, call_tool
from geo_mcp.usecases.geo_service import GeoService

logger = logging.getLogger("mcp")

SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")

# methods answered with no body even when they carry an id
NO_BODY_METHODS = frozenset({"ping", "notifications/initialized"})


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


def peek_id(payload: Any) -> Any:
    """Best-effort id for error replies to envelopes that failed validation."""
    if isinstance(payload, dict):
        rid = payload.get("id")
        if isinstance(rid, (str, int, float)) and not isinstance(rid, bool):
            return rid
    return None


def parse_request(payload: Any) -> JsonRpcRequest:
    if isinstance(payload, list):
        raise ProtocolError("Batch not supported")
    if not isinstance(payload, dict):
        raise ProtocolError("Invalid Request")
    try:
        req = JsonRpcRequest.model_validate(payload)
    except ValidationError:
        raise ProtocolError("Invalid JSON-RPC request")
    if req.jsonrpc != JSONRPC_VERSION:
        raise ProtocolError("Invalid jsonrpc version")
    return req


class Dispatcher:
    def __init__(self, service: GeoService, registry: ToolRegistry, cfg: Config):
        self.service = service
        self.registry = registry
        self.cfg = cfg
        self.state = SessionState.UNINITIALIZED

    def close(self) -> None:
        self.state = SessionState.CLOSED

    def initialize_result(self, requested: Optional[str] = None) -> Dict[str, Any]:
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else self.cfg.protocol_revision
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.cfg.server_name, "version": self.cfg.server_version},
        }

    async def dispatch(self, payload: Any) -> Optional[Dict[str, Any]]:
        """Validate the envelope and handle it. None means: send no body."""
        try:
            req = parse_request(payload)
        except ProtocolError as e:
            self._log("rpc.error", peek_id(payload), None, reason="invalid_request", msg=e.message)
            return jsonrpc_err(peek_id(payload), e.code, e.message)
        return await self.handle(req)

    async def handle(self, req: JsonRpcRequest) -> Optional[Dict[str, Any]]:
        if self.state is SessionState.CLOSED:
            return None if req.is_notification else jsonrpc_err(req.id, ProtocolError.code, "Session closed")

        try:
            result = await self._route(req)
        except GeoMCPError as e:
            self._log("rpc.error", req.id, req.method, code=e.code, msg=e.message)
            if req.is_notification:
                return None
            return jsonrpc_err(req.id, e.code, e.message)
        except Exception as e:
            logger.exception("server error on %s", req.method)
            if req.is_notification:
                return None
            return jsonrpc_err(req.id, INTERNAL_ERROR, str(e) or type(e).__name__)

        if req.is_notification or result is None:
            return None
        return jsonrpc_ok(req.id, result)

    async def _route(self, req: JsonRpcRequest) -> Optional[Dict[str, Any]]:
        method = req.method
        params = req.params or {}

        if method in NO_BODY_METHODS:
            self._log("notification", req.id, method)
            return None

        if method == "initialize":
            self.state = SessionState.INITIALIZED
            self._log("rpc", req.id, method, stage="initialize")
            return self.initialize_result(params.get("protocolVersion"))

        if method == "tools/list":
            self._log("rpc", req.id, method, stage="tools/list")
            return {"tools": self.registry.list()}

        if method == "tools/call":
            name = params.get("name")
            arguments = params.get("arguments")
            if not name or not isinstance(name, str):
                raise InvalidArguments("Missing tool name")
            if arguments is None:
                arguments = {}
            if not isinstance(arguments, dict):
                raise InvalidArguments("Tool arguments must be an object")
            self._log("tool.start", req.id, method, tool=name)
            result = await call_tool(self.registry, self.service, name, arguments)
            self._log("tool.finish", req.id, method, tool=name)
            return result

        raise MethodNotFound(f"Unknown method: {method}")

    def _log(self, event: str, rid: Any, method: Optional[str], **fields: Any) -> None:
        msg = {"event": event, "id": rid, "method": method, "state": self.state.value}
        msg.update(fields)
        logger.info(json.dumps(msg, ensure_ascii=False, default=str))

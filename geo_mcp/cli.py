#!/usr/bin/env python3
"""
Process bootstrap: pick a transport and serve.
Usage examples:
  GOOGLE_PLACES_API_KEY=... geo-mcp-server              # stdio (default)
  GOOGLE_PLACES_API_KEY=... geo-mcp-server --http       # streamable HTTP on :3001/mcp
  GOOGLE_PLACES_API_KEY=... geo-mcp-server --ws --port 8080
  geo-mcp-server --version
Environment:
  GOOGLE_PLACES_API_KEY (required), PORT, HOST, LOG_LEVEL (see geo_mcp.config)
"""
import sys
import asyncio
import logging
import argparse
from typing import List, Optional

import uvicorn

from geo_mcp import SERVER_NAME, __version__
from geo_mcp.config import Config
from geo_mcp.errors import ConfigurationError

logger = logging.getLogger("mcp")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="geo-mcp-server", description="Google Places/Weather/Elevation/Directions MCP server")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--stdio", dest="transport", action="store_const", const="stdio", help="JSON-RPC over stdin/stdout (default)")
    mode.add_argument("--http", dest="transport", action="store_const", const="http", help="Streamable HTTP on /mcp")
    mode.add_argument("--ws", "--websocket", dest="transport", action="store_const", const="ws", help="JSON-RPC over WebSocket")
    p.set_defaults(transport="stdio")
    p.add_argument("--port", type=int, default=None, help="listen port (overrides PORT)")
    p.add_argument("--host", default=None, help="listen host (overrides HOST)")
    p.add_argument("--version", "-v", action="store_true", help="print version and exit")
    return p


def _serve(cfg: Config, transport: str, host: Optional[str], port: Optional[int]) -> None:
    if transport == "stdio":
        from geo_mcp.stdio import run_stdio
        logger.info("Starting in stdio mode")
        asyncio.run(run_stdio(cfg))
        return

    if transport == "http":
        from geo_mcp.main import create_app
        app = create_app(cfg)
    else:
        from geo_mcp.ws import create_ws_app
        app = create_ws_app(cfg)
    port = port if port is not None else cfg.port_for(transport)
    host = host if host is not None else cfg.host
    logger.info(f"Starting in {transport} mode on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=cfg.log_level.lower())


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        print(f"{SERVER_NAME} version {__version__}")
        return 0

    try:
        cfg = Config.from_env()
    except ConfigurationError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1

    # stderr only: stdout is the protocol channel in stdio mode
    logging.basicConfig(level=getattr(logging, cfg.log_level, logging.INFO), stream=sys.stderr)

    try:
        _serve(cfg, args.transport, args.host, args.port)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0
    except Exception:
        logger.exception("Server error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

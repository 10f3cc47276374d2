# stdio.py (MCP STDIO mode)
# - Reads newline-delimited JSON-RPC requests from stdin, writes responses to stdout
# - Logs go to stderr; stdout carries protocol lines only
# - Exits when stdin closes, after in-flight requests finish
# - stdin is read through an asyncio pipe (no reader thread), so SIGINT stops an idle server

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, Set, TextIO

from geo_mcp.config import Config
from geo_mcp.container import Container, build_container
from geo_mcp.dispatcher import Dispatcher
from geo_mcp.errors import PARSE_ERROR
from geo_mcp.schemas.mcp import jsonrpc_err

logger = logging.getLogger("mcp.stdio")

# one JSON-RPC message per line; tool arguments can be large
LINE_LIMIT = 16 * 1024 * 1024


async def open_stdin_reader(stdin: Optional[TextIO] = None) -> asyncio.StreamReader:
    reader = asyncio.StreamReader(limit=LINE_LIMIT)
    protocol = asyncio.StreamReaderProtocol(reader)
    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: protocol, stdin or sys.stdin)
    return reader


class StdioServer:
    def __init__(
        self,
        dispatcher: Dispatcher,
        reader: Optional[asyncio.StreamReader] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.dispatcher = dispatcher
        self._reader = reader
        self._out = stdout or sys.stdout
        self._write_lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    async def _write(self, message: Dict[str, Any]) -> None:
        async with self._write_lock:
            self._out.write(json.dumps(message, ensure_ascii=False) + "\n")
            self._out.flush()

    async def _process(self, line: str) -> None:
        try:
            payload = json.loads(line)
        except ValueError:
            await self._write(jsonrpc_err(None, PARSE_ERROR, "Parse error"))
            return
        resp = await self.dispatcher.dispatch(payload)
        if resp is not None:
            await self._write(resp)

    async def serve(self) -> None:
        reader = self._reader or await open_stdin_reader()
        logger.info(f"[MCP STDIO mode] Ready for JSON-RPC requests via stdin ({len(self.dispatcher.registry)} tools).")
        try:
            while True:
                raw = await reader.readline()
                if not raw:
                    break
                line = raw.decode("utf-8", "replace").strip()
                if not line:
                    continue
                task = asyncio.create_task(self._process(line))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
        finally:
            self.dispatcher.close()
        logger.info("stdin closed, stdio server exiting")


async def run_stdio(cfg: Config, container: Optional[Container] = None) -> None:
    container = container or build_container(cfg)
    try:
        dispatcher = Dispatcher(container.service, container.registry, cfg)
        await StdioServer(dispatcher).serve()
    finally:
        await container.aclose()

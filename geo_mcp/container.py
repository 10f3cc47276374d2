"""
Very small composition root (DI container) that wires the upstream client,
service and tool registry from an explicit Config.
"""
from dataclasses import dataclass
from typing import Optional

import httpx

from geo_mcp.adapter_google_rest import GoogleRestClient
from geo_mcp.config import Config
from geo_mcp.tools import ToolRegistry
from geo_mcp.usecases.geo_service import GeoService


@dataclass
class Container:
    cfg: Config
    http: httpx.AsyncClient
    service: GeoService
    registry: ToolRegistry

    async def aclose(self) -> None:
        await self.http.aclose()


def build_container(
    cfg: Config,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    registry: Optional[ToolRegistry] = None,
) -> Container:
    # transport is the seam tests use to stand in for the Google endpoints
    http = httpx.AsyncClient(timeout=cfg.http_timeout, transport=transport)
    service = GeoService(GoogleRestClient(http, cfg))
    return Container(cfg=cfg, http=http, service=service, registry=registry or ToolRegistry())

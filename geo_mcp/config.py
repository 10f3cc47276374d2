import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from geo_mcp import SERVER_NAME, __version__
from geo_mcp.errors import ConfigurationError

# Load .env if present (host/dev convenience; docker-compose also injects env)
load_dotenv()


DEFAULT_PLACES_API_BASE = "https://places.googleapis.com/v1"
DEFAULT_WEATHER_API_BASE = "https://weather.googleapis.com/v1"
DEFAULT_MAPS_API_BASE = "https://maps.googleapis.com/maps/api"

DEFAULT_HTTP_PORT = 3001
DEFAULT_WS_PORT = 3000


def _get_env_list(key: str, default: List[str] | None = None) -> List[str]:
    raw = os.getenv(key)
    if raw is None:
        return default or []
    parts = [p.strip() for p in raw.split(",")]
    return [p for p in parts if p]


def _get_env_int(key: str) -> Optional[int]:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def _get_env_float(key: str) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Config:
    # upstream
    api_key: str = ""
    places_api_base: str = DEFAULT_PLACES_API_BASE
    weather_api_base: str = DEFAULT_WEATHER_API_BASE
    maps_api_base: str = DEFAULT_MAPS_API_BASE
    # None disables the client timeout
    http_timeout: Optional[float] = None

    # server
    server_name: str = SERVER_NAME
    server_version: str = __version__
    protocol_revision: str = "2024-11-05"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: Optional[int] = None
    sse_keepalive_sec: float = 30.0

    # cors
    allow_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls, *, require_api_key: bool = True) -> "Config":
        api_key = (os.getenv("GOOGLE_PLACES_API_KEY") or "").strip()
        if require_api_key and not api_key:
            raise ConfigurationError("GOOGLE_PLACES_API_KEY environment variable is required")
        keepalive = _get_env_float("SSE_KEEPALIVE_SEC")
        return cls(
            api_key=api_key,
            places_api_base=os.getenv("PLACES_API_BASE", DEFAULT_PLACES_API_BASE).rstrip("/"),
            weather_api_base=os.getenv("WEATHER_API_BASE", DEFAULT_WEATHER_API_BASE).rstrip("/"),
            maps_api_base=os.getenv("MAPS_API_BASE", DEFAULT_MAPS_API_BASE).rstrip("/"),
            http_timeout=_get_env_float("HTTP_TIMEOUT"),
            server_name=os.getenv("SERVER_NAME", SERVER_NAME),
            server_version=os.getenv("SERVER_VERSION", __version__),
            protocol_revision=os.getenv("MCP_PROTOCOL_REV", "2024-11-05"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_get_env_int("PORT"),
            sse_keepalive_sec=keepalive if keepalive is not None else 30.0,
            allow_origins=_get_env_list("ALLOW_ORIGINS", ["*"]),
        )

    def port_for(self, transport: str) -> int:
        """Listen port for a network transport; PORT wins over the per-transport default."""
        if self.port is not None:
            return self.port
        return DEFAULT_WS_PORT if transport == "ws" else DEFAULT_HTTP_PORT

from typing import Any


# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class GeoMCPError(Exception):
    """Base error; ``code`` is the JSON-RPC error code it maps to."""
    code: int = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GeoMCPError):
    """Required configuration missing or malformed. Fatal at startup."""


class ProtocolError(GeoMCPError):
    """Malformed JSON-RPC envelope or unsupported protocol version."""
    code = INVALID_REQUEST


class MethodNotFound(GeoMCPError):
    code = METHOD_NOT_FOUND


class InvalidArguments(GeoMCPError):
    code = INVALID_PARAMS


class UpstreamError(GeoMCPError):
    """Upstream API failure (HTTP status or embedded status field)"""
    code = INTERNAL_ERROR

    def __init__(self, api: str, status: Any, detail: str = ""):
        if detail:
            msg = f"{api} API error ({status}): {detail}"
        else:
            msg = f"{api} API error ({status})"
        super().__init__(msg)
        self.api = api
        self.status = status
        self.detail = detail

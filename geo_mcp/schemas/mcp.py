from __future__ import annotations
from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field


JSONRPC_VERSION = "2.0"


class ToolDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    inputSchema: Dict[str, Any] = Field(default_factory=dict, description="JSON Schema for input")


class ManifestResponse(BaseModel):
    name: str
    version: str
    tools: List[ToolDef]


class JsonRpcRequest(BaseModel):
    jsonrpc: str
    method: str = Field(min_length=1)
    id: Optional[Union[str, int, float]] = None
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcErrorObj(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


def jsonrpc_ok(id_val: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": id_val, "result": result}


def jsonrpc_err(id_val: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    err = JsonRpcErrorObj(code=code, message=message, data=data)
    # data is optional in JSON-RPC; leave it out rather than send null
    return {"jsonrpc": JSONRPC_VERSION, "id": id_val, "error": err.model_dump(exclude_none=True)}

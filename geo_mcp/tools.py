 # tools.py
 # - MCP tool registry/executor
 # - ToolRegistry: ordered, immutable ToolDef list loaded from tool_schemas/*.json
 # - validate_params_by_schema: tool argument validation (jsonschema)
 # - call_tool: validates, routes to GeoService, wraps the result in a content envelope

import os
import json
import glob
import logging
from typing import Dict, Any, Optional, List, Tuple

from jsonschema import validate, ValidationError

from geo_mcp.errors import InvalidArguments, MethodNotFound
from geo_mcp.schemas.mcp import ToolDef
from geo_mcp.usecases.geo_service import GeoService

logger = logging.getLogger("tools")

TOOL_SCHEMA_DIR = os.path.join(os.path.dirname(__file__), "tool_schemas")


# Load tool descriptors from JSON files; the file name prefix fixes the order
def load_tool_defs(schema_dir: str) -> List[ToolDef]:
    tool_defs = []
    for path in sorted(glob.glob(os.path.join(schema_dir, "*.json"))):
        with open(path, "r", encoding="utf-8") as f:
            tool_defs.append(ToolDef.model_validate(json.load(f)))
    return tool_defs


class ToolRegistry:
    """Static tool catalog. Built once; never mutated."""

    def __init__(self, schema_dir: str = TOOL_SCHEMA_DIR):
        self._tools: Tuple[ToolDef, ...] = tuple(load_tool_defs(schema_dir))
        self._by_name: Dict[str, ToolDef] = {t.name: t for t in self._tools}

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self):
        return iter(self._tools)

    def names(self) -> List[str]:
        return [t.name for t in self._tools]

    def get(self, name: str) -> Optional[ToolDef]:
        return self._by_name.get(name)

    def list(self) -> List[Dict[str, Any]]:
        """Return tool list (tools/list)"""
        return [t.model_dump() for t in self._tools]


def validate_params_by_schema(params: Dict[str, Any], schema: Dict[str, Any]) -> Optional[str]:
    try:
        validate(instance=params, schema=schema)
        return None
    except ValidationError as e:
        return e.message


def text_content(payload: Any) -> Dict[str, Any]:
    """Wrap a mapped result in the uniform content envelope."""
    return {"content": [{"type": "text", "text": json.dumps(payload, ensure_ascii=False, indent=2)}]}


async def call_tool(registry: ToolRegistry, service: GeoService, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Execute tool and return result (tools/call)"""
    tool = registry.get(name)
    if tool is None:
        raise MethodNotFound(f"Unknown tool: {name}")
    arguments = arguments or {}
    err = validate_params_by_schema(arguments, tool.inputSchema)
    if err:
        raise InvalidArguments(f"Invalid arguments for {name}: {err}")
    exec_fn = getattr(service, name, None)
    if exec_fn is None:
        raise MethodNotFound(f"No handler mapped for tool: {name}")
    # undeclared arguments are dropped rather than passed through
    declared = tool.inputSchema.get("properties", {})
    kwargs = {k: v for k, v in arguments.items() if k in declared}
    logger.debug(f"tool.call name={name} args_keys={list(kwargs.keys())}")
    raw = await exec_fn(**kwargs)
    return text_content(raw)

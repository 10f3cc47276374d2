# tools_manifest.py
# Writes the declared tool catalog (tool_schemas/*.json) to .mcp.json
# Usage: python tools_manifest.py [output path]

import sys
import json

from geo_mcp import SERVER_NAME, __version__
from geo_mcp.schemas.mcp import ManifestResponse
from geo_mcp.tools import ToolRegistry


def build_manifest(registry: ToolRegistry) -> dict:
    return ManifestResponse(name=SERVER_NAME, version=__version__, tools=list(registry)).model_dump()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    out = argv[0] if argv else ".mcp.json"
    manifest = build_manifest(ToolRegistry())
    with open(out, "w", encoding="utf-8") as f:
        json.dump(manifest, f, ensure_ascii=False, indent=2)
    print(f"{out} manifest generated ({len(manifest['tools'])} tools).")


if __name__ == "__main__":
    main()

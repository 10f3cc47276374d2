"""
Simple smoke tests for the MCP server in-process.
Google endpoints are replaced by a canned httpx.MockTransport, so no key or network is needed.
Usage:
  python smoke_test.py
"""
import json
import os

# ensure defaults for local run
os.environ.setdefault("GOOGLE_PLACES_API_KEY", "smoke-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import httpx
from fastapi.testclient import TestClient

from geo_mcp.config import Config
from geo_mcp.container import build_container
from geo_mcp.main import create_app


def fake_google(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/places:searchText"):
        return httpx.Response(200, json={"places": [{
            "id": "ChIJsmoke",
            "displayName": {"text": "Smoke Cafe"},
            "formattedAddress": "1 Test St",
            "location": {"latitude": 47.6, "longitude": -122.3},
        }]})
    if path.endswith("/elevation/json"):
        return httpx.Response(200, json={"status": "OK", "results": [{"elevation": 12.5, "location": {"lat": 47.6, "lng": -122.3}}]})
    return httpx.Response(404, text="not stubbed")


cfg = Config.from_env()
client = TestClient(create_app(container=build_container(cfg, transport=httpx.MockTransport(fake_google))))


def must(cond: bool, msg: str = "assertion failed"):
    if not cond:
        raise SystemExit(f"SMOKE FAIL: {msg}")


def main():
    # 1) health
    r = client.get("/healthz")
    must(r.status_code == 200, f"/healthz expected 200, got {r.status_code}")
    must(r.json().get("status") == "healthy", "health status not healthy")

    # 2) JSON-RPC initialize
    payload = {"jsonrpc": "2.0", "id": 1, "method": "initialize"}
    r = client.post("/mcp", json=payload)
    must(r.status_code == 200, f"/mcp initialize expected 200, got {r.status_code}")
    j = r.json()
    must(j.get("result", {}).get("serverInfo", {}).get("name"), "initialize missing server name")

    # 3) initialized notification → 202, no body
    r = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    must(r.status_code == 202 and not r.content, f"notification expected empty 202, got {r.status_code}")

    # 4) tools/list
    payload = {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}}
    r = client.post("/mcp", json=payload)
    must(r.status_code == 200, "/mcp tools/list expected 200")
    tools = r.json().get("result", {}).get("tools")
    must(isinstance(tools, list) and len(tools) == 5, "tools/list did not return 5 tools")

    # 5) tools/call search_places
    payload = {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "search_places", "arguments": {"query": "coffee"}}}
    r = client.post("/mcp", json=payload)
    must(r.status_code == 200, "/mcp tools/call expected 200")
    text = r.json().get("result", {}).get("content", [{}])[0].get("text", "{}")
    must(json.loads(text).get("count") == 1, "search_places count mismatch")

    # 6) tools/call invalid params → -32602
    payload = {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "get_elevation", "arguments": {}}}
    r = client.post("/mcp", json=payload)
    must(r.status_code == 200, "/mcp tools/call expected 200")
    must(r.json().get("error", {}).get("code") == -32602, "tools/call invalid param code mismatch")

    # 7) legacy REST tools/call
    r = client.post("/mcp/tools/call", json={"name": "get_elevation", "arguments": {"locations": [{"lat": 47.6, "lng": -122.3}]}})
    must(r.status_code == 200, f"/mcp/tools/call expected 200, got {r.status_code}")

    print("SMOKE OK")


if __name__ == "__main__":
    main()

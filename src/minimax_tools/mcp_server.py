"""
MCP (Model Context Protocol) server for minimax-tools.

Exposes MiniMax web search and image understanding as MCP tools that any
MCP-compatible client (LM Studio, Claude Desktop, coding agents, etc.) can
use.

Protocol: JSON-RPC 2.0 over stdio (one JSON object per line).  Logging goes
to stderr; stdout carries protocol messages only.

Usage
-----
Run directly:
    python -m minimax_tools.mcp_server

Or via the CLI:
    minimax-tools mcp

mcp_servers.json entry
----------------------
{
  "mcpServers": {
    "minimax": {
      "command": "minimax-tools",
      "args": ["mcp"],
      "env": {"MINIMAX_API_KEY": "<key>"}
    }
  }
}
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

from .config import AppConfig, load_config
from .state import ToolResult
from .tools.formatting import format_error
from .tools.manager import MAX_RESULTS, MIN_RESULTS, ToolManager, ToolName

_log = logging.getLogger("minimax_tools.mcp")

_SERVER_NAME = "minimax-tools"
_SERVER_VERSION = "0.1.0"
_SUPPORTED_VERSIONS = {"2024-11-05", "2025-03-26", "2025-06-18"}
_DEFAULT_VERSION = "2024-11-05"

_manager: ToolManager | None = None


def configure(config: AppConfig) -> ToolManager:
    global _manager
    _manager = ToolManager(config)
    return _manager


def _get_manager() -> ToolManager:
    if _manager is None:
        return configure(load_config())
    return _manager


# ---------------------------------------------------------------------------
# Tool schema registry, one entry per exposed tool
# ---------------------------------------------------------------------------

_TOOL_SCHEMAS: list[dict[str, Any]] = [
    {
        "name": ToolName.WEB_SEARCH.value,
        "title": "Web Search",
        "description": (
            "Search the web using MiniMax AI and get structured search results. "
            "Returns organic search results with titles, URLs, snippets, and related searches. "
            "Use this to find up-to-date information on any topic."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query",
                    "examples": ["latest AI news", "Python packaging best practices 2024"],
                },
                "num_results": {
                    "type": "integer",
                    "description": "Number of results to return (default: all returned by the API)",
                    "minimum": MIN_RESULTS,
                    "maximum": MAX_RESULTS,
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": ToolName.UNDERSTAND_IMAGE.value,
        "title": "Understand Image",
        "description": (
            "Analyze images using MiniMax AI and get detailed understanding. "
            "Supports local file paths and image URLs (JPEG, PNG, WebP formats). "
            "Returns AI-generated description and answers about the image."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "image": {
                    "type": "string",
                    "description": "URL or local path to the image",
                    "examples": [
                        "https://example.com/image.png",
                        "./screenshot.png",
                        "/home/user/photo.jpg",
                    ],
                },
                "prompt": {
                    "type": "string",
                    "description": "Question or prompt about the image (default: describe the image)",
                    "examples": [
                        "What does this diagram show?",
                        "List all the objects in this image",
                        "Extract any text visible in this image",
                    ],
                },
            },
            "required": ["image"],
        },
    },
]


# ---------------------------------------------------------------------------
# Tool dispatch
# ---------------------------------------------------------------------------

async def _send_update(update: ToolResult) -> None:
    _notify("info", update.text_content)


def _invalid_argument(title: str, message: str, **details: Any) -> ToolResult:
    return ToolResult.text(
        format_error(title, message),
        {"error": message, "kind": "arguments", **details},
        is_error=True,
    )


async def _call_tool(name: str, arguments: dict[str, Any]) -> ToolResult:
    """Dispatch a tool call; failures come back as error results."""
    mgr = _get_manager()

    if name == ToolName.WEB_SEARCH.value:
        query = arguments.get("query")
        if not isinstance(query, str) or not query.strip():
            return _invalid_argument("Search Error", "'query' is required", query=query)
        raw_n = arguments.get("num_results")
        try:
            num_results = int(raw_n) if raw_n is not None else None
        except (TypeError, ValueError):
            return _invalid_argument(
                "Search Error",
                f"'num_results' must be an integer, got {raw_n!r}",
                query=query,
            )
        return await mgr.run_web_search(query, num_results, on_update=_send_update)

    if name == ToolName.UNDERSTAND_IMAGE.value:
        image = arguments.get("image")
        if not isinstance(image, str) or not image.strip():
            return _invalid_argument("Image Analysis Error", "'image' is required", image=image)
        prompt = arguments.get("prompt")
        return await mgr.run_understand_image(
            image,
            str(prompt) if prompt else None,
            on_update=_send_update,
        )

    return ToolResult.text(f"Unknown tool: {name}", {"error": f"unknown tool {name}"}, is_error=True)


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 helpers
# ---------------------------------------------------------------------------

def _ok(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _err(request_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _write(obj: dict) -> None:
    sys.stdout.write(json.dumps(obj) + "\n")
    sys.stdout.flush()


def _notify(level: str, message: str) -> None:
    _write({
        "jsonrpc": "2.0",
        "method": "notifications/message",
        "params": {"level": level, "logger": _SERVER_NAME, "data": message},
    })


# ---------------------------------------------------------------------------
# Main request handler
# ---------------------------------------------------------------------------

async def _handle(line: str) -> None:
    try:
        req = json.loads(line)
    except json.JSONDecodeError:
        _write(_err(None, -32700, "Parse error"))
        return
    if not isinstance(req, dict):
        _write(_err(None, -32600, "Invalid Request"))
        return

    req_id = req.get("id")
    method = req.get("method", "")
    params = req.get("params") or {}
    if not isinstance(params, dict):
        if req_id is not None:
            _write(_err(req_id, -32602, "Invalid params"))
        return

    if method == "initialize":
        client_ver = params.get("protocolVersion", _DEFAULT_VERSION)
        agreed_ver = client_ver if client_ver in _SUPPORTED_VERSIONS else _DEFAULT_VERSION
        _write(_ok(req_id, {
            "protocolVersion": agreed_ver,
            "capabilities": {"tools": {}, "logging": {}},
            "serverInfo": {
                "name": _SERVER_NAME,
                "version": _SERVER_VERSION,
            },
        }))

    elif method == "notifications/initialized":
        # Notification: no response, just the load banner
        _notify("info", "MiniMax extension loaded")

    elif method == "tools/list":
        _write(_ok(req_id, {"tools": _TOOL_SCHEMAS}))

    elif method == "tools/call":
        tool_name = params.get("name", "")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            _write(_err(req_id, -32602, "Invalid params: arguments must be an object"))
            return
        try:
            result = await _call_tool(tool_name, arguments)
        except Exception as exc:
            _log.error("tool %s crashed: %s", tool_name, exc, exc_info=True)
            result = ToolResult.text(f"Error: {exc}", {"error": str(exc)}, is_error=True)
        _write(_ok(req_id, result.as_mcp_result()))

    elif method == "ping":
        _write(_ok(req_id, {}))

    else:
        if req_id is not None:
            _write(_err(req_id, -32601, f"Method not found: {method}"))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _run() -> None:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)

    while True:
        try:
            line_bytes = await reader.readline()
        except (ConnectionError, ValueError) as exc:
            _log.warning("stdin closed: %s", exc)
            break
        if not line_bytes:
            break
        line = line_bytes.decode(errors="replace").strip()
        if line:
            await _handle(line)


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(config: AppConfig | None = None) -> None:
    setup_logging()
    cfg = config or load_config()
    configure(cfg)
    if not cfg.api_key:
        _log.warning("MINIMAX_API_KEY is not set; tool calls will fail until it is configured")
    _log.info("serving %s against %s", _SERVER_NAME, cfg.api_host)
    asyncio.run(_run())


if __name__ == "__main__":
    main()

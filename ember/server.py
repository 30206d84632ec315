"""
Ember MCP Server
================
Production-policy conscience keeper over stdio.

POLICY (2 tools):
  - ember_check_violation, ember_learn_from_correction

PERSONALITY (3 tools):
  - ember_chat, ember_consult, ember_get_mood

FEEDBACK (4 tools):
  - ember_learn_from_outcome, ember_get_feedback
  - ember_feed_context, ember_get_learning_stats

Requests are handled one at a time. Tool errors come back as isError
results, never as a dead server.
"""

import asyncio

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from ember import log as ember_log
from ember.config import SERVER_NAME, SERVER_VERSION, STRICT_MODE
from ember.log import log
from ember.tools import Ember, TOOL_DEFS, call_tool


def create_server(ember: Ember = None) -> Server:
    ember = ember if ember is not None else Ember()
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [Tool(**t) for t in TOOL_DEFS]

    @server.call_tool()
    async def handle_tool(name: str, arguments: dict) -> list[TextContent]:
        try:
            result = call_tool(ember, name, arguments or {})
        except Exception as e:
            log.exception("Error in %s: %s", name, e)
            raise RuntimeError(f"Ember error: {e}") from e
        if result.get("isError"):
            log.warning("%s rejected: %s", name, result["text"][:200])
            # the low-level server turns a raised handler into isError=True
            raise ValueError(result["text"])
        return [TextContent(type="text", text=result["text"])]

    return server


async def main():
    ember_log.setup()
    ember = Ember()
    server = create_server(ember)

    log.info("Starting %s v%s", SERVER_NAME, SERVER_VERSION)
    log.info("State: %s | voice: %s | strict mode: %s",
             ember.store.home, ember.personality.generator.name, "on" if STRICT_MODE else "off")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()

#!/usr/bin/env python3
"""
Gemini CLI MCP Server - exposes Google's gemini CLI as MCP tools over stdio.
Thin protocol layer; all subprocess logic lives in gemini_cli.py.

stdout carries the protocol, so logs go to stderr.
"""

import asyncio
import logging
import sys
from typing import Any

from dotenv import find_dotenv, load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from config import Settings, load_settings
from gemini_cli import GeminiCLI
from tools import TOOLS, execute_tool

__version__ = "0.1.0"

SERVER_NAME = "gemini-cli-mcp"

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Gemini CLI MCP Server - Access Google's Gemini AI models through Claude

## How to reference files
When you want Gemini to analyze files, specify the file paths in your prompt.
Claude will automatically read all the file contents and include them in the context.
You can reference as many files as needed - just mention them in your prompt!

## Usage Examples:

### Simple prompts:
- "What is the difference between async and sync in JavaScript?"
- "Rustのownershipについて説明して"

### File analysis (specify one or many file paths):
- "analyze the code in src/main.rs and suggest improvements"
- "package.jsonとpackage-lock.jsonを比較して、依存関係の問題を指摘して"
- "review src/api/handler.ts, tests/handler.test.ts, and src/api/types.ts together"
- "check if src/server.js, src/routes/*.js, and src/middleware/*.js follow best practices"

### Code refactoring (any number of files):
- "refactor the database logic across db/connection.js, db/models.js, and db/migrations/*.js"
- "test/*.pyとsrc/*.pyの整合性を確認して改善案を提案して"
- "optimize lib/parser.js, lib/tokenizer.js, and their test files"

### Model selection:
- "Using gemini-2.5-flash, summarize the README.md"
- "src/complex_algorithm.rsの複雑なアルゴリズムを最適化して"

## Tips:
- Specify file paths when you want Gemini to analyze specific files
- Gemini reads the files automatically - you don't need to paste contents
- Default model is gemini-2.5-pro, but gemini-2.5-flash is faster for simple tasks
"""


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_server(cli: GeminiCLI) -> Server:
    """Build the MCP server with the gemini tools bound to `cli`."""
    server = Server(SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(name=tool["name"], description=tool["description"], inputSchema=tool["input_schema"])
            for tool in TOOLS
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        logger.info("Calling tool: %s", name)
        text = await execute_tool(name, arguments or {}, cli)
        return [TextContent(type="text", text=text)]

    return server


async def serve(settings: Settings) -> None:
    """Serve MCP over stdio until the client disconnects."""
    cli = GeminiCLI(binary=settings.gemini_bin, timeout=settings.timeout_seconds)
    server = create_server(cli)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    load_dotenv(find_dotenv(usecwd=True))
    settings = load_settings()
    configure_logging(settings.log_level)

    logger.info("Starting Gemini CLI MCP server")
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()

"""
Stdio transport entrypoint.

Newline-delimited JSON-RPC on stdin/stdout, as MCP desktop clients spawn
servers. stdout carries nothing but response frames; logs go to stderr.
"""

import asyncio
import sys
from typing import TextIO

from assistants_mcp.config.loader import Settings, get_settings
from assistants_mcp.content.catalog import ContentCatalog
from assistants_mcp.mcp.handlers import MCPHandlers
from assistants_mcp.mcp.jsonrpc import JsonRpcProcessor
from assistants_mcp.tools.assistants.client import AssistantsClient
from assistants_mcp.tools.assistants.tools import create_registry
from assistants_mcp.utils.logging import get_logger, setup_logging

# Upper bound for one JSON-RPC line
STDIN_LINE_LIMIT = 16 * 1024 * 1024


class StdioServer:
    """
    Reads requests line by line and answers each as soon as it completes.

    Every line is handled in its own task, so a slow Backend call does not
    hold up the requests behind it; responses may leave out of order.
    """

    def __init__(self, processor: JsonRpcProcessor, output: TextIO | None = None):
        self.processor = processor
        self.output = output or sys.stdout
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self.log = get_logger("stdio")

    async def handle_line(self, line: str) -> None:
        if not line.strip():
            return

        response = await self.processor.handle_message(line)
        if response is None:
            return

        frame = self.processor.serialize_response(response)
        async with self._write_lock:
            self.output.write(frame + "\n")
            self.output.flush()

    async def serve(self, reader: asyncio.StreamReader) -> None:
        """Serve until stdin closes, then wait for in-flight requests."""
        while True:
            raw = await reader.readline()
            if not raw:
                break
            task = asyncio.create_task(self.handle_line(raw.decode("utf-8", errors="replace")))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks)
        self.log.info("stdin closed, exiting")


def build_processor(settings: Settings) -> JsonRpcProcessor:
    """Wire the registry, catalog and dispatcher once for the process."""
    log = get_logger("startup")

    registry = create_registry(AssistantsClient(settings.openai_api_key))
    report = registry.validate_completeness()
    if not report.is_complete:
        log.warning(
            "Tool registry incomplete",
            missing_tools=report.missing_tools,
            extra_tools=report.extra_tools,
        )

    if not settings.has_api_key:
        log.warning("OPENAI_API_KEY is not set; tool calls will be rejected until it is")

    handlers = MCPHandlers(
        registry,
        ContentCatalog.load(settings.content_dir),
        settings,
        api_key_configured=settings.has_api_key,
    )
    log.info(
        "Starting MCP stdio server",
        server_name=settings.server_name,
        version=settings.server_version,
        tool_count=registry.tool_count,
    )
    return JsonRpcProcessor(handlers)


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=STDIN_LINE_LIMIT)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def run() -> None:
    server = StdioServer(build_processor(get_settings()))
    await server.serve(await open_stdin_reader())


def main() -> None:
    """Run the stdio server."""
    setup_logging(stream=sys.stderr)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

"""FastAPI MCP Server - HTTP transport entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assistants_mcp import __version__
from assistants_mcp.config.loader import get_settings
from assistants_mcp.content.catalog import get_catalog
from assistants_mcp.mcp.errors import MCPError
from assistants_mcp.mcp.handlers import MCPHandlers
from assistants_mcp.mcp.jsonrpc import JsonRpcProcessor, error_response
from assistants_mcp.mcp.schemas import TOOL_SCHEMAS
from assistants_mcp.security.auth import resolve_api_key
from assistants_mcp.tools.assistants.client import AssistantsClient
from assistants_mcp.tools.assistants.tools import create_registry
from assistants_mcp.utils.logging import get_logger, set_request_id, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    setup_logging()
    log = get_logger("startup")

    settings = get_settings()
    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        default_key_configured=settings.has_api_key,
    )

    catalog = get_catalog()
    report = create_registry(AssistantsClient(settings.openai_api_key)).validate_completeness()
    if report.is_complete:
        log.info(
            "Tool registry ready",
            tool_count=len(TOOL_SCHEMAS),
            resource_count=len(catalog.resource_uris),
            prompt_count=len(catalog.prompt_names),
        )
    else:
        log.warning(
            "Tool registry incomplete",
            missing_tools=report.missing_tools,
            extra_tools=report.extra_tools,
        )

    yield

    # Shutdown
    log.info("Shutting down MCP server")


# Create FastAPI app
app = FastAPI(
    title="OpenAI Assistants MCP Server",
    description="MCP server exposing the OpenAI Assistants API as tools",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for MCP compatibility
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id_middleware(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# Health and Info Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with server info."""
    settings = get_settings()

    return {
        "name": settings.server_name,
        "version": settings.server_version,
        "description": "MCP server exposing the OpenAI Assistants API",
        "endpoints": {
            "health": "/health",
            "mcp": "/mcp",
            "mcp_with_key": "/mcp/{api_key}",
            "docs": "/docs",
        },
        "tools_available": len(TOOL_SCHEMAS),
        "mcp_protocol_version": settings.protocol_version,
    }


# =============================================================================
# MCP Endpoints
# =============================================================================


async def handle_mcp_request(request: Request, path_key: str | None) -> JSONResponse:
    """
    Run one JSON-RPC message against a registry bound to the caller's key.

    Nothing is kept between requests: each gets its own Backend client.
    """
    settings = get_settings()

    try:
        api_key = resolve_api_key(path_key, request.headers.get("Authorization"), settings)
    except MCPError as e:
        return JSONResponse(status_code=401, content=error_response(None, e).model_dump())

    body = await request.body()

    handlers = MCPHandlers(create_registry(AssistantsClient(api_key)), get_catalog(), settings)
    processor = JsonRpcProcessor(handlers)

    response = await processor.handle_message(body)

    if response is None:
        # Notification - no response needed
        return JSONResponse(content={"status": "accepted"}, status_code=202)

    return JSONResponse(content=response.model_dump())


@app.post("/mcp")
async def mcp_endpoint(request: Request) -> JSONResponse:
    """JSON-RPC endpoint; the key comes from 'Authorization: Bearer <key>'."""
    return await handle_mcp_request(request, None)


@app.post("/mcp/{api_key}")
async def mcp_key_endpoint(api_key: str, request: Request) -> JSONResponse:
    """JSON-RPC endpoint with the key in the path, for clients that cannot set headers."""
    return await handle_mcp_request(request, api_key)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "assistants_mcp.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
MCP Gateway Server Entrypoint

HTTP API server exposing the registered tools over two endpoints:
a Server-Sent Events channel (GET /sse) that pushes handshake, result and
error events, and an invocation endpoint (POST /message) that accepts tool
calls addressed to an open channel by its client id.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from .config import GatewayConfig
from .gateway import InvocationRequest, ProtocolGateway
from .registry import ToolRegistry, build_default_registry

logger = logging.getLogger(__name__)


class InvocationBody(BaseModel):
    """Request body for tool invocation."""

    id: str = ""
    tool_name: str = ""
    parameters: Any = None
    client_id: Optional[str] = None


def create_app(
    config: Optional[GatewayConfig] = None,
    tools: Optional[ToolRegistry] = None,
) -> FastAPI:
    """Build the FastAPI app and the gateway it serves."""
    config = config or GatewayConfig.from_env()
    tools = tools if tools is not None else build_default_registry(config)

    gateway = ProtocolGateway(
        tools,
        server_name=config.server_name,
        server_version=config.server_version,
        protocol_version=config.protocol_version,
        keepalive_seconds=config.keepalive_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(f"MCP Gateway starting with {len(gateway.tools)} tools")
        for name in gateway.tools.names():
            logger.info(f"  - {name}")
        logger.info(f"Config values: {config.masked()}")
        for name in config.missing_credentials():
            logger.warning(f"{name} is not set, the matching search tool will return no results")

        yield

        await gateway.shutdown()
        logger.info("MCP Gateway shutting down")

    app = FastAPI(
        title="MCP Gateway",
        description="Model Context Protocol gateway with an SSE push channel",
        version=config.server_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.gateway = gateway
    app.state.config = config

    # ============== API Endpoints ==============

    @app.get("/")
    async def root():
        return {
            "service": config.server_name,
            "version": config.server_version,
            "tools_count": len(gateway.tools),
            "endpoints": {
                "channel": "/sse",
                "invoke": "/message",
                "list_tools": "/tools",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "tools_loaded": len(gateway.tools),
            "active_sessions": len(gateway.sessions),
            "pending_invocations": gateway.pending,
        }

    @app.get("/tools")
    async def list_tools():
        tools = gateway.capabilities()
        return {"total": len(tools), "tools": tools}

    @app.get("/sse")
    async def open_channel(request: Request):
        peer = request.client.host if request.client else "unknown"
        return StreamingResponse(
            gateway.stream(peer),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    @app.post("/message")
    async def invoke(body: InvocationBody):
        outcome = await gateway.invoke(
            InvocationRequest(
                id=body.id,
                tool_name=body.tool_name,
                parameters=body.parameters,
                client_id=body.client_id,
            )
        )
        return JSONResponse(status_code=outcome.status_code, content=outcome.body)

    return app


def main():
    """Run the MCP gateway."""
    import uvicorn

    config = GatewayConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(config)
    logger.info(f"Starting MCP gateway on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Iconect MCP Server - Main Entry Point

FastMCP-based gateway that exposes the Iconect API to agents, handling the
OAuth 2.0 token lifecycle on their behalf.
"""

import asyncio
import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Optional

from starlette.responses import JSONResponse

from iconect_mcp_server import __version__
from iconect_mcp_server.core.config import IconectConfig, VALID_LOG_LEVELS
from iconect_mcp_server.core.dispatcher import Dispatcher, build_session
from iconect_mcp_server.core.errors import ConfigurationError
from iconect_mcp_server.core.logging_utils import ROOT_LOGGER_NAME, TOOL_LOG_FILES, get_tool_logger
from iconect_mcp_server.server import create_server

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: str, transport_mode: str) -> logging.Logger:
    """Set up logging configuration."""
    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)

    tools_logs_dir = logs_dir / "tools"
    tools_logs_dir.mkdir(exist_ok=True)

    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers = []

    server_file_handler = logging.FileHandler(logs_dir / "server.log", mode='a')
    server_file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers.append(server_file_handler)

    # stdout carries the protocol on stdio
    if transport_mode != "stdio":
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(stdout_handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    for tool_name, log_filename in TOOL_LOG_FILES.items():
        tool_logger = get_tool_logger(tool_name)
        tool_logger.setLevel(level)
        tool_logger.handlers.clear()

        tool_handler = logging.FileHandler(tools_logs_dir / log_filename, mode='a')
        tool_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        tool_logger.addHandler(tool_handler)

        # One file per module, no duplicates in server.log
        tool_logger.propagate = False

    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    server_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.server")
    server_logger.setLevel(level)

    return server_logger


def flush_logging() -> None:
    """Flush and close every handler so log files are complete on exit."""
    loggers = [logging.getLogger()] + [get_tool_logger(name) for name in TOOL_LOG_FILES]
    for target in loggers:
        for handler in target.handlers:
            handler.flush()
            handler.close()


def load_startup_config(logger: logging.Logger) -> Optional[IconectConfig]:
    """Read ICONECT_* settings. None means the agent must call iconect_configure."""
    try:
        config = IconectConfig.from_env()
    except ConfigurationError as e:
        print("Iconect configuration in environment is invalid.")
        print(f"{e.message}")
        print("Server startup aborted.")
        sys.exit(1)

    if config is None:
        logger.info("No ICONECT_BASE_URL/ICONECT_CLIENT_ID in environment; waiting for iconect_configure")
    return config


def register_http_routes(mcp, dispatcher: Dispatcher, args) -> None:
    """Register /health and /tools for the streamable HTTP transport."""

    @mcp.custom_route("/health", methods=["GET"])
    async def http_health_check(request):
        """HTTP health check endpoint for monitoring tools."""
        session = dispatcher.session
        health_data = {
            "status": "healthy",
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime()),
            "server": {
                "name": "Iconect MCP Server",
                "version": __version__,
                "transport": args.transport,
                "host": args.host,
                "port": args.port,
            },
            "configured": session is not None,
            "tools": {"count": len(dispatcher.list_commands())},
        }
        if session is not None:
            health_data["configuration"] = session.config.public_view()
            health_data["authenticated"] = session.token_store.has_credentials()
        return JSONResponse(health_data)

    @mcp.custom_route("/tools", methods=["GET"])
    async def http_tools_list(request):
        """HTTP tools endpoint for quick tool discovery."""
        commands = dispatcher.list_commands()
        tools_data = {
            "server": "Iconect MCP Server",
            "transport": args.transport,
            "configured": dispatcher.is_configured(),
            "total_tools": len(commands),
            "tools": [
                {"name": command["name"], "description": command["description"]}
                for command in commands
            ],
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime()),
        }
        return JSONResponse(tools_data)


async def main():
    """Main server function."""
    parser = argparse.ArgumentParser(
        description="Iconect MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage:
  python main.py                                          # Start with stdio transport
  python main.py --transport streamable-http --port 8000  # Start streamable HTTP server on all interfaces
  python main.py --transport streamable-http --host 127.0.0.1 --port 8000  # Start HTTP server on a specific IP
  python main.py --log-level DEBUG                        # Enable debug logging

Connection settings come from ICONECT_BASE_URL, ICONECT_CLIENT_ID and
ICONECT_CLIENT_SECRET (.env is honoured). Without them the agent must call
iconect_configure first.

Note: --host and --port are only applicable with --transport streamable-http
        """
    )

    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        default="stdio",
        help="Transport mode (default: stdio)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for HTTP transport (default: 8000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host IP address to bind to for HTTP transport (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--log-level",
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Logging level (default: LOG_LEVEL from environment, else INFO)"
    )

    args = parser.parse_args()

    bootstrap_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.startup")
    config = load_startup_config(bootstrap_logger)

    log_level = args.log_level or (config.log_level if config else "INFO")
    logger = setup_logging(log_level, args.transport)

    if args.transport == "stdio":
        logger.info(f"Transport mode: {args.transport} (no port needed)")
    else:
        logger.info(f"Transport mode: {args.transport}, Host: {args.host}, Port: {args.port}")

    dispatcher = Dispatcher()
    if config is not None:
        await dispatcher.install_session(build_session(config))
        logger.info(f"Configured from environment: {config.base_url} (client {config.client_id})")
        logger.info(f"OAuth client type: {'confidential' if config.has_client_secret() else 'public'}")

    mcp = create_server(dispatcher)
    logger.info(f"Registered {len(dispatcher.list_commands())} tools")

    if args.transport == "streamable-http":
        register_http_routes(mcp, dispatcher, args)
        logger.info("HTTP endpoints registered: /health and /tools")

    shutdown_requested = False

    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully."""
        nonlocal shutdown_requested
        logger.info("Graceful shutdown initiated")
        shutdown_requested = True

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if args.transport == "stdio":
            logger.info("Starting stdio transport")
            await mcp.run_stdio_async()
        else:
            logger.info(f"Starting streamable HTTP transport on {args.host}:{args.port}")
            logger.info(f"Access URL: http://{args.host}:{args.port}/mcp")

            server_task = asyncio.create_task(
                mcp.run_http_async(host=args.host, port=args.port)
            )

            while not shutdown_requested and not server_task.done():
                await asyncio.sleep(0.1)

            if shutdown_requested:
                logger.info("Shutdown requested, stopping HTTP server...")
                server_task.cancel()
                try:
                    await server_task
                except asyncio.CancelledError:
                    pass
                logger.info("HTTP server stopped gracefully")
            else:
                # Surfaces an exception raised by the server task, if any.
                server_task.result()
                logger.info("HTTP server completed normally")

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down gracefully...")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)
    finally:
        logger.info("Cleaning up resources...")
        await dispatcher.close()
        logger.info("Server shutdown complete")
        flush_logging()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    basic_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.startup")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        basic_logger.info("Server stopped by user")

"""
tasks-map server entry point.

Startup sequence:
1. Read configuration from the environment (VAULT_ROOT, EXCLUDE_DIRS, ...)
2. Load settings and the saved graph, scan the vault
3. Register all MCP tools
4. Serve the REST API (if API_ENABLED) and the MCP server (stdio) on one
   event loop
5. On shutdown, flush any pending save
"""

import asyncio
import logging
import sys

from mcp.server.fastmcp import FastMCP

from tasks_map.api.tools import register_tools
from tasks_map.config import ServerConfig
from tasks_map.session import TaskMapSession

log = logging.getLogger(__name__)


def _api_server(session, port: int):
    import uvicorn

    from tasks_map.api.app import create_app

    app = create_app(session)
    log.info("Starting REST API on port %d", port)
    config = uvicorn.Config(app, host="0.0.0.0", port=port, log_level="warning")
    return uvicorn.Server(config)


async def serve(config: ServerConfig) -> None:
    session = TaskMapSession.from_config(config)
    log.info("Scanning vault...")
    await session.load()

    mcp = FastMCP("tasks-map")
    register_tools(mcp, session)

    services = [mcp.run_stdio_async()]
    if config.api_enabled:
        services.append(_api_server(session, config.api_port).serve())

    log.info("Starting tasks-map server")
    try:
        await asyncio.gather(*services)
    finally:
        await session.close()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        log.error("%s", e)
        sys.exit(1)

    log.info("Vault root: %s", config.vault_root)
    log.info("Excluded dirs: %s", config.exclude_dirs)
    log.info("Data file: %s", config.data_file)

    asyncio.run(serve(config))


if __name__ == "__main__":
    main()

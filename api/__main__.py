"""Command line interface for running the API server."""
import argparse
import asyncio
import logging

import uvicorn

from config import configure_logging, get_settings_conf

logger = logging.getLogger(__name__)


class UvicornServer:
    """Wrapper for running uvicorn with proper lifecycle management."""

    def __init__(self, app_path: str = "api:app", host: str = "0.0.0.0", port: int = 8080,
                 log_level: str = "info"):
        self.config = uvicorn.Config(
            app_path,
            host=host,
            port=port,
            log_level=log_level
        )
        self.server = uvicorn.Server(self.config)

    async def run(self):
        """Run the server until it is asked to stop."""
        await self.server.serve()


async def main(settings_path=None):
    """Load settings, configure logging and serve the API."""
    settings = get_settings_conf(settings_path)
    configure_logging(settings['logger']['level'])

    server = UvicornServer(
        host=settings['server']['host'],
        port=settings['server']['port'],
        log_level=logging.getLevelName(logging.getLogger().level).lower()
    )

    logger.info(
        f"Starting API server on {settings['server']['host']}:{settings['server']['port']}"
    )
    await server.run()
    logger.info("API server exited gracefully")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the marketplace API server")
    parser.add_argument('--config', help="Path to settings.conf")
    args = parser.parse_args()

    asyncio.run(main(args.config))

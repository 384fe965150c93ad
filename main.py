"""Main entry point for running the Tusk demo application."""

import os

import uvicorn
from loguru import logger

from tusk.core.config import get_settings
from tusk.core.logging import UVICORN_LOG_CONFIG, setup_logging


def main() -> None:
    """Serve the demo router with uvicorn."""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    # Container platforms set PORT to the port the service should listen on
    port = int(os.environ.get("PORT", settings.api_port))

    # When reload is enabled, we must pass the app as an import string
    if settings.debug:
        logger.info(
            "Starting Uvicorn on http://{}:{} (development mode with auto-reload)",
            settings.api_host,
            port,
        )
        uvicorn.run(
            "tusk.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_config=UVICORN_LOG_CONFIG,
        )
    else:
        from tusk.api.main import app  # noqa: PLC0415 - builds the router on import

        logger.info(
            "Starting Uvicorn on http://{}:{} (production mode)",
            settings.api_host,
            port,
        )
        app.listen_and_serve(settings.api_host, port)


if __name__ == "__main__":
    main()

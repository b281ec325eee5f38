"""
Service entry point.

Serves the pricing and modification API, or runs the offline console
walkthrough for development.

Usage:
    API server:   python main.py serve
    Console mode: python main.py console [--scenario accept|reject|decline|quote]
"""

import logging
import sys

from bookingflow.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the HTTP API with uvicorn."""
    import uvicorn

    from bookingflow.api.app import create_app

    logger.info("Starting API on %s:%d", settings.api.host, settings.api.port)
    uvicorn.run(create_app(), host=settings.api.host, port=settings.api.port)


def _run_console_mode(argv: list[str]) -> None:
    """Start the offline console walkthrough (no server required)."""
    from console_demo import main as console_main

    console_main(argv)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode(sys.argv[2:])
    else:
        _run_server()

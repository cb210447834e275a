"""
Sales assistant entry point.

Serves the HTTP API with uvicorn, or runs the offline console demo.

Usage:
    API server:   python main.py
    Console mode: python main.py console
"""

import logging
import sys

from cardealpro.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the API server (chat and OCR need OPENAI_API_KEY)."""
    import uvicorn

    from cardealpro.api.server import create_app

    if not settings.model.api_key:
        logger.warning("OPENAI_API_KEY is not set; chat, scan, and analysis calls will fail")
    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    import asyncio

    from console_demo import ConsoleSession

    asyncio.run(ConsoleSession().run())


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()

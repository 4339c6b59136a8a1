"""
VidVault - Main entry point.

Runs the API with uvicorn:

    python -m vidvault.main
"""

from __future__ import annotations

import logging

import uvicorn

from vidvault.config import get_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "vidvault.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

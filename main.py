#!/usr/bin/env python3
"""
Admin takeover lab -- a deliberately vulnerable registration/login service.

Usage:
  python main.py

Environment variables (or .env):
  DATABASE_URL    SQLAlchemy URL for users and OTPs (default: sqlite file next to this script)
  SESSION_SECRET  Signing key for the session cookie (default: a fixed fallback value)
  PORT            Listen port (default: 3000)
  HOST            Listen address (default: 0.0.0.0)
"""

import logging

import uvicorn

from core.config import get_settings

logger = logging.getLogger("takeoverlab")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    settings = get_settings()
    logger.info("Server running on port %d", settings.port)
    logger.info("Admin API docs: http://localhost:%d/internal/swagger/index.html", settings.port)
    uvicorn.run("api.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
authgate -- Cookie-session authentication API.

Usage:
  python main.py
  python main.py --port 8000
  python main.py --host 0.0.0.0 --port 8000
  python main.py --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY    Session signing key, at least 32 characters. Required unless DEBUG=true.
  APP_ENV       development (default) or production. Production turns on
                Secure + SameSite=Strict session cookies.
  DATABASE_URL  SQLAlchemy URL for the credential store (default: SQLite file).
  FRONTEND_URL  Origin allowed by CORS (default: http://localhost:3000).
"""

import argparse

import uvicorn

from core.config import get_settings
from core.logs import configure_logging


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="authgate",
        description="Run the authgate authentication API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --port 8000
  DEBUG=true python main.py --reload
  SECRET_KEY=... APP_ENV=production python main.py --host 0.0.0.0
        """,
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Interface to bind (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    if args.reload and settings.is_production:
        parser.error("--reload is not allowed with APP_ENV=production")

    logger = configure_logging(settings)
    logger.info("Application is running on: http://%s:%d", args.host, args.port)
    logger.info("Swagger documentation: http://%s:%d/api", args.host, args.port)

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import asyncio
import logging

from .config import get_settings
from .data import SqliteDatabase
from .logging import configure_logging
from .services.http import run_server


async def _init_database(path: str) -> None:
    async with SqliteDatabase(path) as database:
        await database.migrate()


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="T-Minus MCP tool server.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the JSON-RPC MCP endpoint over HTTP.")
    serve_parser.add_argument("--host", default=settings.server.host)
    serve_parser.add_argument("--port", type=int, default=settings.server.port)

    db_parser = subparsers.add_parser("init-db", help="Create the SQLite schema.")
    db_parser.add_argument("--path", default=str(settings.storage.database_path))

    return parser


def main() -> None:
    configure_logging()
    logger = logging.getLogger(__name__)
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "serve":
        logger.info("T-Minus MCP starting")
        run_server(host=args.host, port=args.port)
    elif args.command == "init-db":
        asyncio.run(_init_database(args.path))
        logger.info("Database ready at %s", args.path)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()

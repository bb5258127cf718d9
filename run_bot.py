#!/usr/bin/env python3
"""
Coffee Bot startup script.

Usage:
    # Run with settings from the environment / .env
    python run_bot.py

    # Run against a specific database on a custom port
    python run_bot.py --database-url sqlite:///./data/stand.db --port 8001

    # Create the menu and stats tables, then exit
    python run_bot.py --init-db

    # Run with reload for development
    python run_bot.py --reload
"""

import argparse
import os


def prepare_database_dir(database_url: str) -> None:
    """Create the directory of a relative sqlite database file."""
    if database_url.startswith("sqlite:///./"):
        db_path = database_url.replace("sqlite:///./", "")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)


def run_bot(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Run the API server."""
    import uvicorn

    print(f"\n{'=' * 50}")
    print("Starting: Coffee Bot")
    print(f"Port:     {port}")
    print(f"Database: {os.environ.get('DATABASE_URL', 'default')}")
    print(f"{'=' * 50}\n")

    # The app reads DATABASE_URL and the rest of its settings from the environment
    uvicorn.run(
        "coffee_bot.main:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    parser = argparse.ArgumentParser(description="Run the coffee bot API")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=int(os.environ.get("PORT", "8000")),
        help="Port to run on (default: $PORT or 8000)",
    )
    parser.add_argument(
        "--database-url",
        "-d",
        help="SQLAlchemy database URL (overrides DATABASE_URL)",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the database tables and exit",
    )
    parser.add_argument(
        "--reload",
        "-r",
        action="store_true",
        help="Enable auto-reload for development",
    )

    args = parser.parse_args()

    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
    prepare_database_dir(os.environ.get("DATABASE_URL", "sqlite:///./coffee_bot.db"))

    if args.init_db:
        from dotenv import load_dotenv
        load_dotenv()

        from coffee_bot.db import init_db
        from coffee_bot.logging_config import setup_logging

        setup_logging()
        init_db()
        print("Database tables created.")
        return

    run_bot(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()

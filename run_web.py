#!/usr/bin/env python3
"""
Run the Horizon IJP web application.

This script starts the FastAPI server with uvicorn.  Without ``--db``
the data store lives in memory and is reseeded on every start.

Usage:
    python run_web.py
    python run_web.py --port 8000
    python run_web.py --db horizon.db
    python run_web.py --host 0.0.0.0 --port 8000
    python run_web.py --reload  # Enable auto-reload for development
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

try:
    import uvicorn
except ImportError:
    print("Error: uvicorn is not installed. Please install dependencies:")
    print("  pip install -e .")
    sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run Horizon IJP Web Application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_web.py
  python run_web.py --port 8000
  python run_web.py --db horizon.db
  python run_web.py --host 0.0.0.0 --port 8000
  python run_web.py --reload
        """
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run on (default: 8000)"
    )

    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--db",
        default=os.getenv("HORIZON_DB_PATH"),
        help="SQLite file for the data store (default: in memory)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (watch for file changes)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)"
    )

    parser.add_argument(
        "--log-level",
        default=os.getenv("HORIZON_LOG_LEVEL", "info").lower(),
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: info)"
    )

    args = parser.parse_args()

    # Sessions and the in-memory store are per process.
    if args.workers > 1 and not args.db:
        print("Warning: with several workers and no --db each worker keeps its own data.")

    if args.db:
        db_path = Path(args.db)
        os.environ["HORIZON_DB_PATH"] = str(db_path.absolute())
        if not db_path.parent.exists():
            print(f"Error: Database directory does not exist: {db_path.parent}")
            sys.exit(1)
        storage_label = str(db_path.absolute())
    else:
        os.environ.pop("HORIZON_DB_PATH", None)
        storage_label = "in memory"

    print("=" * 60)
    print("Horizon IJP Web Application")
    print("=" * 60)
    print(f"Data store: {storage_label}")
    print(f"Server: http://{args.host}:{args.port}")
    print(f"API Docs: http://{args.host}:{args.port}/api/docs")
    print(f"Reload: {'Enabled' if args.reload else 'Disabled'}")
    print("=" * 60)
    print()

    try:
        uvicorn.run(
            "horizon_ijp.api.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers if not args.reload else 1,  # Reload doesn't work with multiple workers
            log_level=args.log_level
        )
    except KeyboardInterrupt:
        print("\nShutting down server...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

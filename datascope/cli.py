"""Command-line interface for Datascope."""

import argparse
import logging
import sys

from datascope import __version__
from datascope.config import get_settings


def main() -> int:
    """Main entry point for the CLI."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="datascope",
        description="Statistical analysis engine and dashboard API for tabular data",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the API server",
    )
    parser.add_argument(
        "--host",
        default=settings.api_host,
        help=f"API server host (default: {settings.api_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"API server port (default: {settings.api_port})",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.serve:
        try:
            import uvicorn

            from datascope.api.app import app

            uvicorn.run(app, host=args.host, port=args.port)
        except ImportError as e:
            print(f"Error: {e}. Make sure uvicorn is installed.", file=sys.stderr)
            return 1
    else:
        parser.print_help()

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Entry point for running the CLI as a module."""

import argparse
import asyncio
import sys

from .pickleai_cli import main


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive CLI for the PickleAI API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Server port (default: 8080)",
    )
    parser.add_argument(
        "--api-path",
        type=str,
        default="/api/v1",
        help="API prefix (default: /api/v1)",
    )
    parser.add_argument(
        "--user-id",
        type=str,
        default="cli-user",
        help="Caller id for rate limiting (default: cli-user)",
    )
    parser.add_argument(
        "--anonymous",
        action="store_true",
        help="Send messages without a user id (skips the policy gate)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (shows requests and status codes)",
    )

    return parser.parse_args()


def cli_entry() -> None:
    """CLI entry point."""
    args = parse_args()

    try:
        asyncio.run(
            main(
                host=args.host,
                port=args.port,
                api_path=args.api_path,
                user_id=None if args.anonymous else args.user_id,
                debug=args.debug,
            )
        )
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli_entry()

import sys
import json
import asyncio
import argparse
import getpass
from typing import Optional, List
import structlog

from . import config
from .checksum import append_check_digit
from .constants import IDENTITY_NUMBER_LENGTH
from .exceptions import AgeVerifyError
from .logging_config import configure_logging
from .pipeline import get_default_pipeline

# Initialize structured logger
logger = structlog.get_logger(__name__)


class AgeVerifyCLI:
    """Main command-line interface for zk-age-verify."""

    def __init__(self) -> None:
        self.parser = self._create_argument_parser()

    def _create_argument_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="zk-age-verify",
            description="zk-age-verify - Privacy-preserving adult age check",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        subparsers = parser.add_subparsers(dest="command", required=True)
        self._add_verify_command(subparsers)
        self._add_check_digit_command(subparsers)
        self._add_serve_command(subparsers)

        return parser

    def _add_verify_command(self, subparsers) -> None:
        """Add the 'verify' command and its arguments."""
        verify_parser = subparsers.add_parser(
            "verify",
            help="Verify whether an identity number belongs to an adult.",
        )
        # The number is never taken from argv so it stays out of shell history
        verify_parser.add_argument(
            "--stdin",
            action="store_true",
            help="Read the identity number from standard input instead of prompting.",
        )

    def _add_check_digit_command(self, subparsers) -> None:
        """Add the 'check-digit' command and its arguments."""
        check_parser = subparsers.add_parser(
            "check-digit",
            help="Append the Verhoeff check digit to an 11-digit payload.",
        )
        check_parser.add_argument("payload", help="The first 11 digits.")

    def _add_serve_command(self, subparsers) -> None:
        """Add the 'serve' command and its arguments."""
        serve_parser = subparsers.add_parser(
            "serve",
            help="Run the HTTP and GraphQL endpoints.",
        )
        serve_parser.add_argument("--host", default=config.API_HOST, help="Bind address.")
        serve_parser.add_argument("--port", type=int, default=config.API_PORT, help="Bind port.")

    def _read_identity_number(self, from_stdin: bool) -> str:
        if from_stdin:
            return sys.stdin.readline().strip()
        return getpass.getpass("Identity number: ")

    def _execute_verify_command(self, args: argparse.Namespace) -> int:
        raw = self._read_identity_number(args.stdin)
        result = asyncio.run(get_default_pipeline().verify_age(raw))
        del raw

        print(json.dumps(result.to_dict()))
        return 0 if result.success else 1

    def _execute_check_digit_command(self, args: argparse.Namespace) -> int:
        if len(args.payload) != IDENTITY_NUMBER_LENGTH - 1:
            print(
                f"[ERROR] Payload must be {IDENTITY_NUMBER_LENGTH - 1} digits.",
                file=sys.stderr,
            )
            return 1

        try:
            print(append_check_digit(args.payload))
        except AgeVerifyError as e:
            print(f"[ERROR] {e.message}", file=sys.stderr)
            return 1
        return 0

    def _execute_serve_command(self, args: argparse.Namespace) -> int:
        import uvicorn

        logger.info("Starting HTTP server", host=args.host, port=args.port)
        uvicorn.run(
            "zk_age_verify.api:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            log_level=config.LOG_LEVEL.lower(),
        )
        return 0

    def run_from_args(self, args_list: Optional[List[str]] = None) -> int:
        """Run the CLI with provided arguments."""
        try:
            args = self.parser.parse_args(args_list)
            if args.command == "verify":
                return self._execute_verify_command(args)
            elif args.command == "check-digit":
                return self._execute_check_digit_command(args)
            elif args.command == "serve":
                return self._execute_serve_command(args)
            else:
                self.parser.print_help()
                return 1
        except KeyboardInterrupt:
            print("\nOperation cancelled by user.", file=sys.stderr)
            return 130


def main() -> int:
    """Main entry point for the CLI."""
    configure_logging()
    cli = AgeVerifyCLI()
    return cli.run_from_args()


if __name__ == "__main__":
    sys.exit(main())

"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

Run the server from the command line:

    python -m minihttp                          # 127.0.0.1:4221
    python -m minihttp --directory /tmp         # enable /files/
    python -m minihttp -d /tmp -l DEBUG         # verbose logging
    minihttp --port 8080                        # installed script

Unknown arguments are ignored (and logged at DEBUG). Abbreviated flags
such as --dir are unknown too.

Exit codes:
    0   clean shutdown (SIGINT/SIGTERM)
    1   the config is invalid, or the listening socket could not be bound
        or failed while accepting
    2   argument error (argparse)

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from . import __version__
from .config import DEFAULT_HOST, DEFAULT_PORT, ServerConfig
from .server import HTTPServer, setup_logging


logger = logging.getLogger("minihttp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        allow_abbrev=False,
        description="Minimal HTTP/1.1 origin server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  GET  /echo/{text}     reflect {text}
  GET  /user-agent      reflect the User-Agent header
  GET  /files/{name}    read {name} from --directory
  POST /files/{name}    write the body to --directory/{name}
  GET  /                200 OK
        """,
    )

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory served under /files/ (default: none, /files/ answers 404)",
    )

    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Host to bind to (default: {DEFAULT_HOST})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )

    return parser


def parse_known(argv: Optional[List[str]] = None) -> Tuple[ServerConfig, List[str]]:
    """
    Translate command-line arguments into a ServerConfig.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:]).

    Returns:
        The configuration (not yet validated) and the arguments that were
        not recognized.
    """
    args, unknown = build_parser().parse_known_args(argv)

    config = ServerConfig(
        directory=args.directory,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )
    return config, unknown


def parse_args(argv: Optional[List[str]] = None) -> ServerConfig:
    """Like parse_known(), dropping the unrecognized arguments."""
    return parse_known(argv)[0]


def main(argv: Optional[List[str]] = None) -> int:
    config, unknown = parse_known(argv)

    setup_logging(config.log_level)
    if unknown:
        logger.debug(f"Ignoring unknown arguments: {unknown}")

    try:
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # run() returns normally only after shutdown(); a broken listener
    # raises OSError instead.
    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python
"""
Command-line interface for the markdown wiki
"""

import argparse
import sys

from mdwiki.config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_REQUEST_TIMEOUT, WikiConfig
from mdwiki.core.errors import StartupFailure
from mdwiki.core.index import DEFAULT_LOCK_TIMEOUT
from mdwiki.core.logging_config import setup_logging
from mdwiki.version_info import __version__, __build_type__


def print_version():
    """Print version information."""
    print(f"mdwiki v{__version__}")
    print(f"Build Type: {__build_type__}")


def start_server(config: WikiConfig):
    """Build the app (initial index scan) and start the server."""
    from mdwiki.app import create_app, run_server

    app = create_app(config)

    print(f"Starting mdwiki v{__version__}")
    print(f"Serving pages from: {config.pages_dir}")
    print(f"Server: http://{config.host}:{config.port}")
    print("Press Ctrl+C to stop")
    print()

    run_server(app, config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mdwiki',
        description=f'mdwiki v{__version__}',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mdwiki --version                          Show version information
  mdwiki --pages ./notes                    Serve ./notes on 0.0.0.0:8000
  mdwiki --pages ./notes --listen :8080     Serve on port 8080
  mdwiki --pages ./notes --debug            Start server in debug mode
        """
    )
    parser.add_argument(
        '--version', '-v',
        action='store_true',
        help='Show version information'
    )
    parser.add_argument(
        '--pages',
        type=str,
        default='',
        help='Directory holding the markdown documents (required)'
    )
    parser.add_argument(
        '--listen', '-l',
        type=str,
        default=f'{DEFAULT_HOST}:{DEFAULT_PORT}',
        help=f'host:port to listen on (default: {DEFAULT_HOST}:{DEFAULT_PORT})'
    )
    parser.add_argument(
        '--debug', '-d',
        action='store_true',
        help='Run in debug mode'
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Also write rotating log files to this directory'
    )
    parser.add_argument(
        '--request-timeout',
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help=f'Socket timeout per connection in seconds (default: {DEFAULT_REQUEST_TIMEOUT:g})'
    )
    parser.add_argument(
        '--lock-timeout',
        type=float,
        default=DEFAULT_LOCK_TIMEOUT,
        help=f'Seconds to wait for the page index lock (default: {DEFAULT_LOCK_TIMEOUT:g})'
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.version:
        print_version()
        return 0

    try:
        config = WikiConfig.from_args(args).validate()
        setup_logging(config.log_dir, config.debug)
        start_server(config)
        return 0
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0
    except StartupFailure as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())

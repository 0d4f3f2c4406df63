"""
Runtime configuration for the wiki server.

Everything comes from the command line; there is no config file and no
environment lookup.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from mdwiki.core.errors import StartupFailure
from mdwiki.core.index import DEFAULT_LOCK_TIMEOUT

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 8000
DEFAULT_REQUEST_TIMEOUT = 30.0


def parse_listen(address: str) -> Tuple[str, int]:
    """
    Split a "host:port" listen address. An empty host (":8000") means all
    interfaces; IPv6 hosts may be bracketed ("[::1]:8000").
    """
    host, sep, port_str = address.rpartition(':')
    if not sep:
        raise StartupFailure(f"listen address must be host:port, got {address!r}")
    host = host.strip('[]') or DEFAULT_HOST
    try:
        port = int(port_str)
    except ValueError:
        raise StartupFailure(f"invalid port in listen address {address!r}")
    if not 0 < port < 65536:
        raise StartupFailure(f"port out of range in listen address {address!r}")
    return host, port


@dataclass
class WikiConfig:
    pages_dir: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False
    log_dir: Optional[Path] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @staticmethod
    def from_args(args) -> 'WikiConfig':
        """Build the configuration from parsed CLI arguments."""
        if not args.pages:
            raise StartupFailure("a pages directory is required (--pages)")
        host, port = parse_listen(args.listen)
        return WikiConfig(
            pages_dir=Path(args.pages),
            host=host,
            port=port,
            debug=args.debug,
            log_dir=Path(args.log_dir) if args.log_dir else None,
            request_timeout=args.request_timeout,
            lock_timeout=args.lock_timeout,
        )

    def validate(self) -> 'WikiConfig':
        if not self.pages_dir.exists():
            raise StartupFailure(f"pages directory does not exist: {self.pages_dir}")
        if not self.pages_dir.is_dir():
            raise StartupFailure(f"pages path is not a directory: {self.pages_dir}")
        if not 0 < self.port < 65536:
            raise StartupFailure(f"port out of range: {self.port}")
        if self.request_timeout <= 0 or self.lock_timeout <= 0:
            raise StartupFailure("timeouts must be positive")
        return self

    def to_flask_config(self) -> dict:
        return {
            'MDWIKI_PAGES_DIR': str(self.pages_dir),
            'MDWIKI_REQUEST_TIMEOUT': self.request_timeout,
            'MDWIKI_LOCK_TIMEOUT': self.lock_timeout,
        }

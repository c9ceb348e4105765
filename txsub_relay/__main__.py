"""Run the relay: ``python -m txsub_relay [--host HOST] [--port PORT]``."""

from __future__ import annotations

import argparse
import sys

import uvicorn

from txsub_relay.app import create_app
from txsub_relay.config import RelayConfig, configure_logging
from txsub_relay.errors import ConfigError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="txsub-relay",
        description="Relay signed transaction envelopes to stellar-core.",
    )
    parser.add_argument("--host", help="bind address (overrides TXSUB_HOST)")
    parser.add_argument("--port", type=int, help="bind port (overrides TXSUB_PORT)")
    args = parser.parse_args(argv)

    try:
        config = RelayConfig.from_env()
    except ConfigError as exc:
        print(f"txsub-relay: {exc}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=args.host or config.host,
        port=args.port or config.port,
        log_level=config.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for the GroupHug client.

Relays one transaction (``submit``) or prints the backend's chain
identifier (``chain``). Configuration comes from a YAML file; ``--address``
overrides the relay location.

Exit codes:
    0: accepted (``submit``) or greeting printed (``chain``).
    1: rejected by the backend or invalid payload.
    2: service unavailable.
    3: configuration error.

Examples:
    ```bash
    python -m grouphug submit 0200000001ab...
    python -m grouphug submit - < tx.hex
    python -m grouphug --address tcp://127.0.0.1:8787 chain
    python -m grouphug --config config/grouphug.yaml --log-level DEBUG submit 0200...
    ```
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from grouphug.core.client import GroupHugClient
from grouphug.core.logger import Logger, StructuredFormatter
from grouphug.core.yaml import load_yaml
from grouphug.exceptions import ConfigurationError, ServiceUnavailable
from grouphug.models.constants import OutcomeStatus
from grouphug.models.outcome import UNAVAILABLE_MESSAGE


DEFAULT_CONFIG = Path("config") / "grouphug.yaml"

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_UNAVAILABLE = 2
EXIT_CONFIG = 3

_EXIT_CODES: dict[OutcomeStatus, int] = {
    OutcomeStatus.ACCEPTED: EXIT_OK,
    OutcomeStatus.REJECTED: EXIT_REJECTED,
    OutcomeStatus.UNAVAILABLE: EXIT_UNAVAILABLE,
}

logger = Logger("cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="grouphug",
        description="GroupHug transaction relay client",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Client config path (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--address",
        help="Relay address, overrides the config file (e.g. tcp://127.0.0.1:8787)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    submit = commands.add_parser("submit", help="Relay one hex-encoded transaction")
    submit.add_argument("tx", help="Hex-encoded transaction, or '-' to read it from stdin")

    commands.add_parser("chain", help="Print the chain identifier announced by the relay")

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Install ``StructuredFormatter`` on a stderr root handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def build_client(config_path: Path, address: str | None) -> GroupHugClient:
    """Load the config file (defaults if absent) and apply the address override.

    Raises:
        ConfigurationError: If the file or the resulting config is invalid.
    """
    config_dict: dict[str, Any] = {}
    if config_path.exists():
        try:
            config_dict = load_yaml(config_path)
        except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load {config_path}: {e}") from e
    else:
        logger.debug("config_not_found", path=str(config_path))

    if address is not None:
        config_dict.pop("host", None)
        config_dict.pop("port", None)
        config_dict["address"] = address

    return GroupHugClient.from_dict(config_dict)


async def submit(client: GroupHugClient, tx: str) -> int:
    outcome = await client.submit_payload(tx)
    alert = outcome.to_alert()
    stream = sys.stdout if outcome.is_accepted else sys.stderr
    print(alert.message, file=stream)
    return _EXIT_CODES[outcome.status]


async def chain(client: GroupHugClient) -> int:
    try:
        identifier = await client.fetch_chain()
    except ServiceUnavailable as e:
        logger.warning("chain_unavailable", error=str(e))
        print(UNAVAILABLE_MESSAGE, file=sys.stderr)
        return EXIT_UNAVAILABLE
    print(identifier or "")
    return EXIT_OK


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, build the client, run the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        client = build_client(args.config, args.address)
    except ConfigurationError as e:
        logger.error("configuration_invalid", error=str(e))
        return EXIT_CONFIG

    if args.command == "chain":
        return await chain(client)

    tx = sys.stdin.read().strip() if args.tx == "-" else args.tx
    return await submit(client, tx)


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    cli()

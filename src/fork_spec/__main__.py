"""
fork-spec command line entry point.

Materialize a genesis block into a SQLite ledger, dump it back, or inspect
which forks and options are in force at a height.

Usage::

    python -m fork_spec init --genesis genesis.json --db chaindata.sqlite
    python -m fork_spec init --genesis mainnet.json
    python -m fork_spec dump-genesis --db chaindata.sqlite
    python -m fork_spec options --chain-config mainnet.json --block 3000000

Commands:
    init           Write the genesis block of a dump (JSON, YAML, or an
                   external chain configuration bundle) into a ledger
    dump-genesis   Print the genesis stored in a ledger as JSON
    options        Print active forks and resolved options at a height
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from fork_spec.config import FORK_SPEC_DB, LOG_LEVEL
from fork_spec.subspecs.chain import ChainConfig, ExternalChainConfig, write_chain_config
from fork_spec.subspecs.genesis import GenesisDump, make_genesis_dump, write_genesis_block
from fork_spec.subspecs.storage import SQLiteDatabase
from fork_spec.types import ForkSpecError, parse_big_int

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure root logging for the CLI, on stderr so stdout stays machine readable."""
    level = logging.DEBUG if verbose else LOG_LEVEL

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def load_genesis_source(path: Path) -> tuple[GenesisDump, ChainConfig | None]:
    """
    Load a genesis dump from a file.

    YAML files hold a bare dump. JSON files hold either a bare dump or an
    external chain configuration bundle; a bundle also yields its chain
    configuration.

    Raises:
        ChainConfigIOError: If a bundle cannot be read.
        ValueError: If a bundle carries no genesis.
    """
    if path.suffix.lower() in _YAML_SUFFIXES:
        return GenesisDump.from_yaml_file(path), None

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "chainConfig" in data:
        external = ExternalChainConfig.read_from_json_file(path)
        if external.genesis is None:
            raise ValueError(f"chain configuration {path} has no genesis")
        return external.genesis, external.chain_config
    return GenesisDump.model_validate(data), None


def load_chain_config(path: Path) -> ChainConfig:
    """Load a chain configuration, bare or wrapped in an external bundle."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "chainConfig" in data:
        return ExternalChainConfig.read_from_json_file(path).chain_config
    return ChainConfig.model_validate(data)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


def cmd_init(args: argparse.Namespace) -> int:
    """Write the genesis block and, for bundles, the chain configuration."""
    dump, chain_config = load_genesis_source(args.genesis)
    with SQLiteDatabase(args.db) as db:
        block = write_genesis_block(db, dump)
        if chain_config is not None:
            write_chain_config(db, block.hash(), chain_config)
    print(f"0x{block.hash().hex()}")
    return 0


def cmd_dump_genesis(args: argparse.Namespace) -> int:
    """Print the stored genesis dump."""
    with SQLiteDatabase(args.db) as db:
        dump = make_genesis_dump(db)
    if dump is None:
        logger.error("No genesis block in %s", args.db)
        return 1
    print(dump.to_json())
    return 0


def cmd_options(args: argparse.Namespace) -> int:
    """Print the forks and options in force at a height."""
    config = load_chain_config(args.chain_config)
    number = args.block
    options = config.get_options(number)
    report = {
        "block": number,
        "forks": [fork.name for fork in config.forks_through_block(number)],
        "options": options.model_dump(mode="json", by_alias=True, exclude_none=True),
        "chainId": config.chain_id_at(number),
    }
    print(json.dumps(report, indent=4))
    return 0


def _block_number(value: str) -> int:
    try:
        number = parse_big_int(value)
    except ForkSpecError as e:
        raise argparse.ArgumentTypeError(e.message) from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"block number must not be negative: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="fork_spec",
        description="Chain configuration and genesis tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Write a genesis block into a ledger")
    init.add_argument(
        "--genesis",
        required=True,
        type=Path,
        help="Path to a genesis dump (JSON or YAML) or an external chain configuration",
    )
    init.add_argument(
        "--db",
        type=Path,
        default=FORK_SPEC_DB,
        help=f"Path to the SQLite ledger (default: {FORK_SPEC_DB})",
    )
    init.set_defaults(handler=cmd_init)

    dump = commands.add_parser("dump-genesis", help="Print the stored genesis as JSON")
    dump.add_argument(
        "--db",
        type=Path,
        default=FORK_SPEC_DB,
        help=f"Path to the SQLite ledger (default: {FORK_SPEC_DB})",
    )
    dump.set_defaults(handler=cmd_dump_genesis)

    options = commands.add_parser("options", help="Print forks and options at a height")
    options.add_argument(
        "--chain-config",
        required=True,
        type=Path,
        help="Path to a chain configuration or external chain configuration",
    )
    options.add_argument(
        "--block",
        required=True,
        type=_block_number,
        help="Block height (decimal or 0x-prefixed hex)",
    )
    options.set_defaults(handler=cmd_options)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    try:
        return args.handler(args)
    except (ForkSpecError, ValidationError, yaml.YAMLError, OSError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

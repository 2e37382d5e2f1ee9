#!/usr/bin/env python3
"""Main CLI module for the contracts tracker."""

import sys

import click

from .gmp_backfill import cli as backfill_cli
from .gmp_run import cli as run_cli

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  gmp-contracts run                       # Append today's row
  gmp-contracts backfill                  # Replay every day since GMP_BACKFILL_START
  gmp-contracts backfill --start 2025-03-01
  gmp-contracts run --env-file prod.env
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="Track distinct GMP destination contracts on Axelar mainnet and testnet",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""


cli.add_command(run_cli, "run")
cli.add_command(backfill_cli, "backfill")


def main(args: list[str] | None = None) -> int:
    """Main CLI function."""

    try:
        normalized_args = list(args) if args is not None else None
        result = cli.main(args=normalized_args, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:  # pragma: no cover - click normalizes the exit code
        return int(exc.code) if exc.code is not None else 0
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())

"""Command line entry point of the genesis builder."""

import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence

from rich.console import Console

from genesis_builder.helpers.config import (
    get_log_level,
    get_migration_height,
    get_output_dir,
    get_state_dir,
    get_strict_weights,
)
from genesis_builder.helpers.constants import (
    MINIMUM_ACTIVE_REWARD_POT_BALANCE,
    MINING_ASSET,
    MINING_ASSETS,
)
from genesis_builder.helpers.exceptions import GenesisBuilderError
from genesis_builder.helpers.logging import get_logger, set_log_level
from genesis_builder.migration.audit import SnapshotAuditor
from genesis_builder.migration.pipeline import GenesisBuilder


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="genesis-builder",
        description="Build the ChainX 2.0 genesis parameters from a 1.0 state snapshot",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Migration block height (default: GENESIS_MIGRATION_HEIGHT or 23170000)",
    )
    parser.add_argument(
        "--state-dir",
        default=None,
        help="Snapshot root directory (default: GENESIS_STATE_DIR or ../state_1.0)",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Output root directory (default: GENESIS_OUTPUT_DIR or ./res)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: GENESIS_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build the genesis parameters")
    build.add_argument(
        "--threshold",
        type=int,
        default=MINIMUM_ACTIVE_REWARD_POT_BALANCE,
        help="Minimum reward pot balance of an active validator (default: 1 PCX)",
    )
    build.add_argument(
        "--mining-asset",
        default=MINING_ASSET,
        choices=MINING_ASSETS,
        help=f"Mining asset whose pool weight is corrected (default: {MINING_ASSET})",
    )
    build.add_argument(
        "--strict-weights",
        action="store_true",
        default=None,
        help="Abort if an active validator has no weight record",
    )

    subparsers.add_parser("verify", help="Cross-check the snapshot files")
    return parser


def run(args: Namespace, console: Console | None = None) -> int:
    """Run the selected command and return the process exit status."""
    logger = get_logger("cli")
    try:
        log_level = get_log_level(args.log_level)
        set_log_level(log_level)
        height = get_migration_height(args.height)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    state_dir = get_state_dir(args.state_dir)
    output_dir = get_output_dir(args.output_dir)

    try:
        if args.command == "build":
            GenesisBuilder(
                state_dir,
                output_dir,
                height,
                threshold=args.threshold,
                mining_asset=args.mining_asset,
                strict_weights=get_strict_weights(strict=args.strict_weights),
                log_level=log_level,
                console=console,
            ).run()
            return 0

        report = SnapshotAuditor(state_dir, output_dir, height, console=console).run()
    except GenesisBuilderError as e:
        logger.error(str(e))
        return 1

    return 0 if report.passed else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())

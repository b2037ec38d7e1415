#!/usr/bin/env python3
"""
RPC Health CLI - Command Line Interface
Scores a collector's measurement dump and prints the flat health report.
"""

import argparse
import sys
import logging
from typing import List, Optional

from rpc_health.config import APP_NAME, APP_VERSION, APP_DESCRIPTION, DEFAULT_PROFILE, ERROR_MESSAGES
from rpc_health.core.models import VerdictTier
from rpc_health.engine import HealthEngine
from rpc_health.operations.measurement_loader import MeasurementError, load_measurements
from rpc_health.operations.report_writer import ReportWriter, render_report
from rpc_health.profiles import (
    PROFILE_REGISTRY,
    get_profile,
    get_profile_source,
    get_duplicate_warnings,
    profile_for_chain_id,
)
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich import box

console = Console()

EXIT_OK = 0
EXIT_NOT_SUITABLE = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


class ConsoleUI:
    """Rich-based console output for the CLI."""

    @staticmethod
    def print_banner():
        console.print(Panel.fit(f"[bold cyan]{APP_NAME}[/] CLI v{APP_VERSION}\n[dim]{APP_DESCRIPTION}[/]", border_style="cyan"))

    @staticmethod
    def print_profiles(keys: Optional[List[str]] = None):
        table = Table(title="Chain Profiles", box=box.SIMPLE_HEAD, expand=False)
        table.add_column("Profile", style="bold")
        table.add_column("Name")
        table.add_column("Chain IDs")
        table.add_column("Block time (s)", justify="right")
        table.add_column("Block span", justify="right")
        table.add_column("Critical age (s)", justify="right")
        table.add_column("Descriptor")
        for key in keys or sorted(PROFILE_REGISTRY):
            profile = PROFILE_REGISTRY.get(key)
            if profile is None:
                continue
            src = get_profile_source(key) or {}
            table.add_row(
                key,
                profile.display_name,
                ", ".join(str(c) for c in profile.chain_ids),
                f"{profile.expected_block_time:g}",
                str(profile.block_span),
                "off" if profile.critical_block_age is None else str(profile.critical_block_age),
                src.get('selected_file', ''),
            )
        console.print(table)

    @staticmethod
    def print_report(text: str):
        # Flat text; keep Rich from interpreting brackets as markup
        console.print(text, markup=False, highlight=False, soft_wrap=True, end="")


def setup_logging(verbose: bool = False):
    """Setup logging configuration.
    Default to WARNING so the report stays readable. Use --verbose for DEBUG.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    for name in ("rpc_health.profiles", "rpc_health.core", "rpc_health.engine", "rpc_health.operations"):
        logging.getLogger(name).setLevel(logging.WARNING if not verbose else logging.DEBUG)


def validate_args(args) -> bool:
    """Validate command line arguments."""
    if args.critical_age is not None and args.critical_age < 0:
        console.print("Critical block age must be non-negative")
        return False
    if args.profile and get_profile(args.profile) is None:
        console.print(ERROR_MESSAGES['unknown_profile'].format(
            profile=args.profile, available=", ".join(sorted(PROFILE_REGISTRY))
        ))
        return False
    return True


def _select_profile(args, bundle):
    """Explicit --profile wins, then the measured chain id, then the default."""
    if args.profile:
        return get_profile(args.profile)
    chain_id = bundle.metadata.chain_id
    if chain_id is not None:
        key = profile_for_chain_id(chain_id)
        if key:
            logging.getLogger(__name__).info(f"Detected chain id {chain_id}; using profile {key}")
            return get_profile(key)
    return get_profile(DEFAULT_PROFILE)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        if args.show_profiles:
            ConsoleUI.print_profiles()
            warnings = get_duplicate_warnings()
            if warnings:
                console.print("\n[yellow]Descriptor selection notices:[/]")
                for w in warnings:
                    console.print(f"[yellow]- {w}[/]")
            return EXIT_OK

        if not args.measurements:
            parser.error("--measurements is required (unless using --show-profiles)")

        if not validate_args(args):
            return EXIT_ERROR

        try:
            bundle = load_measurements(args.measurements, now=args.now)
        except MeasurementError as e:
            console.print(str(e), markup=False, soft_wrap=True)
            return EXIT_ERROR

        profile = _select_profile(args, bundle)
        policy = profile.scoring_policy(critical_block_age=args.critical_age) if profile else None
        engine = HealthEngine(profile=profile, policy=policy)
        assessment = engine.evaluate(bundle)

        if not args.no_banner:
            ConsoleUI.print_banner()
        ConsoleUI.print_report(render_report(assessment))

        if args.output:
            if not ReportWriter().save(assessment, args.output):
                return EXIT_ERROR
            console.print(f"\n✅ Report saved to {args.output}", markup=False)

        return EXIT_NOT_SUITABLE if assessment.tier is VerdictTier.WORST else EXIT_OK

    except KeyboardInterrupt:
        console.print(f"\n{ERROR_MESSAGES['interrupted']}")
        return EXIT_INTERRUPTED


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="rpc-health",
        description=f"{APP_NAME} CLI - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score a measurement dump
  %(prog)s -m measurements.json

  # Score against a specific chain profile and save the report
  %(prog)s -m measurements.yaml --profile gnosis --output report.txt

  # Show chain profiles
  %(prog)s --show-profiles

Exit status: 0 when the node is suitable, 1 when it is not, 2 on errors.
        """
    )

    parser.add_argument("--measurements", "-m", help="JSON/YAML file with sampled measurements")
    parser.add_argument("--profile", "-p", help=f"Chain profile key, name or alias (default: by chain id, else {DEFAULT_PROFILE})")
    parser.add_argument("--critical-age", type=int, default=None, help="Override the critical block age in seconds")
    parser.add_argument("--now", type=int, default=None, help="Unix time the measurements were taken (default: file value or current time)")
    parser.add_argument("--output", "-o", help="Save the flat report to a text file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--no-banner", action="store_true", help="Don't show application banner")
    parser.add_argument("--show-profiles", action="store_true", help="Show chain profiles and exit")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} CLI v{APP_VERSION}")

    return parser


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
cudblank CLI - Entry point for pip-installed package.

Replaces the create/update/delete functions of a Terraform provider's
services with no-ops, in place.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import find_config, load_config
from .errors import CudblankError
from .runner import RunReport, run
from .targets import BLUE, GREEN, NC, RED, YELLOW

logger = logging.getLogger("cudblank")


def setup_logging(verbose: bool = False) -> None:
    """Route the cudblank logger hierarchy to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def print_report(report: RunReport) -> None:
    print(f"{BLUE}cudblank{' (dry run)' if report.dry_run else ''}{NC}")
    print("=" * 30)

    label = f"{YELLOW}WOULD REWRITE{NC}" if report.dry_run else f"{GREEN}REWROTE{NC}"
    for path, mutations in report.mutations.items():
        print(f"{label} {report.relative(path)} ({len(mutations)} mutation(s))")
        for m in mutations:
            print(f"  line {m.line}: {m.kind} {m.target}")

    print("=" * 30)
    print(f"SITES: {report.sites} | DEFINITIONS: {report.definitions} | "
          f"MUTATIONS: {report.total} | FILES: {len(report.mutations)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="cudblank - turn provider create/update/delete functions into no-ops",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Run with no arguments from the provider root; the flags below only
tune logging, config lookup and dry runs.

Examples:
  cudblank                 Rewrite the project in the current directory
  cudblank ../provider     Rewrite another checkout
  cudblank --dry-run       List what would be rewritten
        """,
    )
    parser.add_argument("root", nargs="?", default=".", help="Project root containing go.mod")
    parser.add_argument("--version", "-V", action="version", version=f"cudblank {__version__}")
    parser.add_argument("--config", "-c", help="Path to cudblank.yaml")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every phase and match")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config_path = Path(args.config) if args.config else find_config(args.root)
        config = load_config(config_path)
        if args.dry_run:
            config["dry_run"] = True
        report = run(args.root, config)
    except CudblankError as e:
        print(f"{RED}ERROR: {e.phase}: {e}{NC}", file=sys.stderr)
        return 1

    print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())

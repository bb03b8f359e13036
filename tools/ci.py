#!/usr/bin/env python3
# Copyright 2026 ConfParse Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the confparse CI checks locally: format, lint, tests and build."""

import argparse
import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["ruff", "check", "src/", "tests/", "tools/"]),
    ("Tests", ["pytest", "--cov=confparse", "--cov-report=term-missing"]),
    ("Build", [sys.executable, "-m", "build"]),
]


def main() -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run confparse CI checks.")
    parser.add_argument("--skip-build", action="store_true", help="Do not build the distribution")
    args = parser.parse_args()

    steps = [step for step in STEPS if not (args.skip_build and step[0] == "Build")]
    results = [_run_step(name, cmd) for name, cmd in steps]

    _print_banner("Summary")
    for name, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _print_banner(title: str) -> None:
    sep = "=" * 60
    print(f"\n{chalk.blue(sep)}")
    print(chalk.blue(f"  {title}"))
    print(chalk.blue(sep))


def _run_step(name: str, cmd: list[str]) -> tuple[str, bool, float]:
    _print_banner(name)
    start = time.monotonic()
    try:
        proc = subprocess.run(cmd, cwd=Path(__file__).resolve().parent.parent)
    except FileNotFoundError:
        print(chalk.red(f"  command not found: {cmd[0]}"))
        return name, False, time.monotonic() - start
    return name, proc.returncode == 0, time.monotonic() - start


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI checks locally.

Steps: format check, lint, type check, tests with coverage, a smoke run of the
``yangtree`` CLI against the sample modules in ``tests/data``, and the package
build. ``--skip NAME`` leaves out a step (repeatable), ``--fail-fast`` stops at
the first failing step.
"""

import argparse
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Step:
    key: str
    title: str
    command: list[str]


STEPS: list[Step] = [
    Step("format", "Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    Step("lint", "Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    Step("types", "Type check", ["uv", "run", "ty", "check", "src/"]),
    Step("tests", "Tests", ["uv", "run", "pytest", "--cov=yangtree", "--cov-report=term-missing"]),
    Step("smoke", "CLI smoke run", ["uv", "run", "yangtree", "graph", "tests/data/valid"]),
    Step("build", "Build", ["uv", "build"]),
]


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run yangtree CI checks locally.")
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        choices=[step.key for step in STEPS],
        help="Skip a step (may be given more than once)",
    )
    parser.add_argument("--fail-fast", action="store_true", help="Stop after the first failing step")
    args = parser.parse_args(argv)

    results: list[tuple[Step, bool, float]] = []
    for step in STEPS:
        if step.key in args.skip:
            print(chalk.yellow(f"\nSkipping {step.title}"))
            continue
        passed, elapsed = _run(step)
        results.append((step, passed, elapsed))
        if not passed and args.fail_fast:
            break

    _print_summary(results)
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################

_RULE = "=" * 60


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _run(step: Step) -> tuple[bool, float]:
    print(f"\n{chalk.blue(_RULE)}")
    print(chalk.blue(f"{step.title}: {' '.join(step.command)}"))
    print(chalk.blue(_RULE))
    start = time.monotonic()
    proc = subprocess.run(step.command, cwd=_repo_root())
    return proc.returncode == 0, time.monotonic() - start


def _print_summary(results: list[tuple[Step, bool, float]]) -> None:
    print(f"\n{chalk.blue(_RULE)}")
    print(chalk.blue("  Summary"))
    print(chalk.blue(_RULE))
    for step, passed, elapsed in results:
        style = chalk.green if passed else chalk.red
        print(style(f"  {'PASS' if passed else 'FAIL'}  {step.title} ({elapsed:.1f}s)"))
    print()


if __name__ == "__main__":
    sys.exit(main())

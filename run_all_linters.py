#!/usr/bin/env python3
"""Run the formatters, linters and the test suite in one go.

Steps, in order:
1. Black format check
2. isort import order check
3. Ruff static checks
4. Pylint on the source packages
5. pytest

Pass ``--fix`` to let Black, isort and Ruff rewrite files instead of only
checking them. Output of every step is collected and failures are repeated
in the summary.
"""

from pathlib import Path
import subprocess
import sys

SOURCE_PACKAGES = ["app", "core", "infrastructure", "main.py"]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """Run one command and return (success, combined output)."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, check=False, cwd=Path(__file__).parent
        )
    except OSError as e:
        print(f"FAILED to start: {e}")
        return False, str(e)

    success = result.returncode == 0
    output = result.stdout + result.stderr
    print("OK" if success else "FAILED")
    if output.strip():
        print("\nOutput:")
        print(output)
    return success, output


def build_commands(fix: bool) -> list[tuple[list[str], str]]:
    py = sys.executable
    black = [py, "-m", "black", "."] + ([] if fix else ["--check"])
    isort = [py, "-m", "isort", "."] + ([] if fix else ["--check-only"])
    ruff = [py, "-m", "ruff", "check", "."] + (["--fix"] if fix else [])
    return [
        (black, "Black format"),
        (isort, "isort import order"),
        (ruff, "Ruff checks"),
        ([py, "-m", "pylint", *SOURCE_PACKAGES], "Pylint analysis"),
        ([py, "-m", "pytest", "-q"], "pytest"),
    ]


def main() -> None:
    fix = "--fix" in sys.argv[1:]
    results = []
    for cmd, description in build_commands(fix):
        success, output = run_command(cmd, description)
        results.append((description, success, output))

    print(f"\n{'='*60}")
    print("Summary")
    print("=" * 60)
    for description, success, _ in results:
        print(f"{description}: {'passed' if success else 'FAILED'}")

    failed = [(d, o) for d, ok, o in results if not ok]
    for description, output in failed:
        if output.strip():
            print(f"\n--- {description} errors ---")
            print(output)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()

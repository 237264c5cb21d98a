"""Fixtures shared by the amqp-session package health checks."""

import subprocess
import sys
from pathlib import Path
from typing import Callable, List

import pytest


PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "src" / "amqp_session"
END_TO_END_DIR = PROJECT_ROOT / "tests"


@pytest.fixture
def package_dir() -> Path:
    return PACKAGE_DIR


@pytest.fixture
def end_to_end_dir() -> Path:
    return END_TO_END_DIR


@pytest.fixture(scope="session")
def run_mypy() -> Callable[[List[Path]], "subprocess.CompletedProcess[str]"]:
    """Return a runner that type checks paths with the project's mypy settings.

    Fails the requesting test outright when mypy is not installed; it ships in
    the ``test`` extra.
    """
    version = subprocess.run(
        [sys.executable, "-m", "mypy", "--version"], capture_output=True, text=True
    )
    if version.returncode != 0:
        pytest.fail(f"mypy is not installed (pip install -e '.[test]'): {version.stderr.strip()}")

    def run(paths: List[Path]) -> "subprocess.CompletedProcess[str]":
        return subprocess.run(
            [sys.executable, "-m", "mypy", "--no-error-summary", *map(str, paths)],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

    return run

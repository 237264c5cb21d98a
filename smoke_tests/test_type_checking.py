"""Type checks the library together with the code that drives it."""

from pathlib import Path

import pytest


pytestmark = pytest.mark.smoke

MAX_REPORTED_ERRORS = 20


def _report(stdout: str, stderr: str) -> str:
    lines = stdout.strip().splitlines()
    report = [f"  {line}" for line in lines[:MAX_REPORTED_ERRORS]]
    if len(lines) > MAX_REPORTED_ERRORS:
        report.append(f"  ... and {len(lines) - MAX_REPORTED_ERRORS} more errors")
    if stderr.strip():
        report.append(f"mypy stderr: {stderr.strip()}")
    return "\n".join(report)


def test_library_and_end_to_end_tests_type_check(
    run_mypy, package_dir: Path, end_to_end_dir: Path
) -> None:
    """The package (with its co-located tests) and the loopback suite agree on types.

    Checking both trees in one run catches public signatures drifting away
    from the fake broker and the scenarios that call them.
    """
    result = run_mypy([package_dir, end_to_end_dir])

    if result.returncode != 0:
        pytest.fail(f"mypy reported errors:\n{_report(result.stdout, result.stderr)}")


def test_transport_contract_is_type_checked(run_mypy, tmp_path: Path) -> None:
    """A transport missing ``set_timeout`` is rejected, so the contract is enforced."""
    module = tmp_path / "incomplete_transport.py"
    module.write_text(
        "from amqp_session.contracts import ITransport\n"
        "\n"
        "class IncompleteTransport(ITransport):\n"
        "    def write_frame(self, frame_value): ...\n"
        "    def read_frame(self): ...\n"
        "    def close(self) -> None: ...\n"
        "    @property\n"
        "    def is_open(self) -> bool: return True\n"
        "\n"
        "IncompleteTransport()\n"
    )

    result = run_mypy([module])

    assert result.returncode == 1, result.stderr
    assert "set_timeout" in result.stdout

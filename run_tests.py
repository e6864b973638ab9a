#!/usr/bin/env python3
"""
run_tests.py - Test runner for reorg

Runs both unit tests and command line integration tests with proper setup and reporting.
"""

import sys
import subprocess
from pathlib import Path

HERE = Path(__file__).parent


def run_suite(title: str, test_file: str, timeout: int) -> bool:
    """Run one unittest module in a subprocess and report whether it passed."""
    print("=" * 60)
    print(title)
    print("=" * 60)

    try:
        result = subprocess.run(
            [sys.executable, str(HERE / test_file)], capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired:
        print(f"{test_file} timed out")
        return False

    print(result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)
    return result.returncode == 0


def check_dependencies():
    """Check if required dependencies are available."""
    print("Checking dependencies...")

    try:
        import hachoir  # noqa: F401

        print("✓ hachoir available")
    except ImportError:
        print("✗ hachoir not available - install with: pip install hachoir")
        return False

    try:
        import magic  # noqa: F401

        print("✓ python-magic available")
    except ImportError as e:
        print(f"✗ python-magic not usable ({e}) - install with: pip install python-magic, plus libmagic")
        return False

    if not (HERE / "reorg.py").exists():
        print("✗ reorg.py not found next to run_tests.py")
        return False
    print("✓ reorg.py found")

    return True


def main():
    """Run all tests."""
    print("reorg Test Suite")
    print("=" * 60)

    if not check_dependencies():
        print("\n❌ Dependency check failed")
        return 1

    unit_success = run_suite("RUNNING UNIT TESTS", "test_reorg.py", timeout=120)
    integration_success = run_suite("RUNNING INTEGRATION TESTS", "test_integration.py", timeout=300)

    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)
    print(f"Unit Tests: {'✓ PASS' if unit_success else '✗ FAIL'}")
    print(f"Integration Tests: {'✓ PASS' if integration_success else '✗ FAIL'}")

    if unit_success and integration_success:
        print("\n🎉 All tests passed!")
        return 0
    print("\n❌ Some tests failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Test runner script for Uptime Report.

Usage:
    python run_tests.py              # All tests with coverage
    python run_tests.py --quick      # Skip local-server tests, no coverage
    python run_tests.py --html       # Generate HTML coverage report
    python run_tests.py --module pipeline  # Test specific module
"""

import sys
import subprocess


def run_command(cmd):
    """Execute command and return result."""
    print(f"\nExecuting: {' '.join(cmd)}\n")
    result = subprocess.run(cmd)
    return result.returncode


def main():
    """Main test runner function."""
    args = sys.argv[1:]

    print("=" * 60)
    print("Uptime Report Test Runner")
    print("=" * 60)

    if "--quick" in args:
        print("\nRunning tests without the local server...")
        cmd = ["pytest", "-m", "not integration", "-q"]
        return run_command(cmd)

    elif "--html" in args:
        print("\nRunning tests with HTML coverage report...")
        cmd = ["pytest", "--cov=uptime_report", "--cov-report=html", "--cov-report=term", "-v"]
        code = run_command(cmd)
        if code == 0:
            print("\nHTML report generated: htmlcov/index.html")
        return code

    elif "--module" in args:
        try:
            idx = args.index("--module")
            module = args[idx + 1]
        except IndexError:
            print("Error: Specify module name after --module")
            print("Example: python run_tests.py --module pipeline")
            return 1
        print(f"\nRunning tests for module: {module}...")
        cmd = ["pytest", f"tests/test_{module}.py", "--cov=uptime_report", "-v"]
        return run_command(cmd)

    else:
        print("\nRunning all tests with coverage check...")
        cmd = ["pytest", "--cov=uptime_report", "--cov-report=term-missing", "-q"]
        code = run_command(cmd)

        if code == 0:
            print("\n" + "=" * 60)
            print("ALL TESTS PASSED")
            print("=" * 60)
            print("\nFor detailed HTML report: python run_tests.py --html")
        else:
            print("\n" + "=" * 60)
            print("SOME TESTS FAILED")
            print("=" * 60)
            print("\nFor details: pytest --cov=uptime_report -v --tb=short")

        return code


if __name__ == "__main__":
    sys.exit(main())

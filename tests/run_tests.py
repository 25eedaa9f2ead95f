#!/usr/bin/env python3
"""
Test Runner for COLLADA Module Test Suite

Runs all Slash-based tests for the COLLADA module.
"""

import sys
import subprocess
from pathlib import Path


TEST_FILES = [
    'tests/test_chunk_readers.py',
    'tests/test_parser_mode.py',
    'tests/test_builders.py',
    'tests/test_dispatch.py',
    'tests/test_collada_handler.py',
    'tests/test_collada_reader.py',
    'tests/test_error_handling.py',
    'tests/test_performance.py',
]


def run_slash_tests(test_files=None, verbose=False):
    """Run Slash tests for specified test files"""

    # Add current directory to Python path
    current_dir = Path(__file__).parent.parent
    sys.path.insert(0, str(current_dir))

    if test_files is None:
        test_files = TEST_FILES

    print("[TEST] Running COLLADA Module Test Suite")
    print("=" * 50)

    success_count = 0
    total_count = len(test_files)

    for test_file in test_files:
        test_path = current_dir / test_file
        if not test_path.exists():
            print(f"[ERROR] Test file not found: {test_file}")
            continue

        print(f"\n[RUN] Running: {test_file}")
        print("-" * 30)

        cmd = ['slash', 'run', str(test_path)]
        if verbose:
            cmd.append('-v')

        try:
            result = subprocess.run(cmd, cwd=current_dir, capture_output=True, text=True, timeout=300)
        except subprocess.TimeoutExpired:
            print("[TIMEOUT] TIMEOUT (5 minutes)")
            continue

        if result.returncode == 0:
            print("[PASS] PASSED")
            success_count += 1
        else:
            print("[FAIL] FAILED")
            if verbose:
                print("STDOUT:")
                print(result.stdout)
                print("STDERR:")
                print(result.stderr)

    print("\n" + "=" * 50)
    print(f"[STATS] Test Results: {success_count}/{total_count} test files passed")

    if success_count == total_count:
        print("[SUCCESS] All tests passed!")
        return 0
    print("[WARNING] Some tests failed. Check output above for details.")
    return 1


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="COLLADA Module Test Runner")
    parser.add_argument('--test', help='Run specific test file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--list', action='store_true', help='List available tests')

    args = parser.parse_args()

    if args.list:
        print("Available test files:")
        for test_file in sorted(Path(__file__).parent.glob('test_*.py')):
            print(f"  {test_file.name}")
        return 0

    if args.test:
        return run_slash_tests([args.test], args.verbose)
    return run_slash_tests(verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())

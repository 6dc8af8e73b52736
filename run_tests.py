#!/usr/bin/env python
"""
Test runner script for the Abbey connections API.
Runs the Django test suite against the test settings, optionally under coverage.
"""

import os
import sys
import argparse
import subprocess
from datetime import datetime

APPS = ['abbey', 'users', 'connections']


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Run Abbey tests')
    parser.add_argument('--app', choices=APPS, help='Specific app to test')
    parser.add_argument('--test', help='Dotted test path inside the app (e.g. tests.test_services.ConnectionAcceptTests)')
    parser.add_argument('--coverage', action='store_true', help='Generate coverage report')
    parser.add_argument('--html', action='store_true', help='Generate HTML coverage report')
    parser.add_argument('--verbosity', type=int, default=1, help='Verbosity level (0-3)')
    parser.add_argument('--keepdb', action='store_true', help='Preserve test database between runs')
    return parser.parse_args()


def build_command(args):
    cmd = [sys.executable, 'manage.py', 'test']

    if args.app:
        label = args.app
        if args.test:
            label += f".{args.test}"
        cmd.append(label)

    cmd.extend(['--verbosity', str(args.verbosity)])
    if args.keepdb:
        cmd.append('--keepdb')

    if args.coverage:
        cmd = [
            'coverage', 'run',
            f"--source={','.join(APPS)}",
            '--omit=*/migrations/*,*/tests/*,*/tests.py',
        ] + cmd
    return cmd


def run_tests(args):
    """Run the tests with the given arguments"""
    print("=" * 80)
    print(f"Abbey Test Runner - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    os.environ['DJANGO_SETTINGS_MODULE'] = 'abbey.test_settings'

    cmd = build_command(args)
    print(f"Running command: {' '.join(cmd)}")
    print("-" * 80)
    result = subprocess.run(cmd)

    if args.coverage and result.returncode == 0:
        print("\n" + "=" * 80)
        print("COVERAGE REPORT")
        print("=" * 80)
        subprocess.run(['coverage', 'report', '--show-missing'])

        if args.html:
            subprocess.run(['coverage', 'html'])
            print("\nHTML coverage report generated in htmlcov/")

    return result.returncode


def main():
    sys.exit(run_tests(parse_args()))


if __name__ == '__main__':
    main()

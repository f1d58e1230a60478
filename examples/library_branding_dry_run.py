#!/usr/bin/env python3
# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Example: rehearse the default-user branding edits without touching the registry.

This example demonstrates:
- Driving the branding step from Python instead of the CLI
- Using DryRunRunner to print the reg.exe commands that would run

Usage:
    python library_branding_dry_run.py C:\\Users\\Default\\NTUSER.DAT
"""

import sys

from winprovision.core import DryRunRunner
from winprovision.core.logger import Log
from winprovision.steps import apply_branding


def main() -> int:
    hive = sys.argv[1] if len(sys.argv) > 1 else r"C:\Users\Default\NTUSER.DAT"
    logger = Log.setup(verbose=1)
    runner = DryRunRunner(logger)

    out = apply_branding(logger, runner, hive, r"C:\Windows\Web\Wallpaper\Corporate\wallpaper.jpg")

    for cmd in runner.commands:
        print(" ".join(cmd))
    return 0 if out["success"] or out["skipped"] else 1


if __name__ == "__main__":
    sys.exit(main())

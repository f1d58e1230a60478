# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/cli/args/builder.py
from __future__ import annotations

import argparse

from ...core.logger import c

YAML_EXAMPLE = r"""
  # provision.yaml
  log_dir: C:\Windows\Temp\winprovision
  copy:
    source: D:\Payload\Public
    destination: C:\Users\Public\Desktop\Corporate
  default_user_hive: C:\Users\Default\NTUSER.DAT
  wallpaper_source: D:\Payload\wallpaper.jpg
  browser_installer: D:\Payload\browser.msi
  other_installer: D:\Payload\agent-setup.exe
  other_args: /S /norestart
  skip_settings: true

  winprovision --config provision.yaml -vv
  winprovision --config provision.yaml --dry-run
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Combines raw description formatting with default value display in help."""


def _build_epilog() -> str:
    return c("YAML example:\n", "cyan", ["bold"]) + c(YAML_EXAMPLE, "cyan")

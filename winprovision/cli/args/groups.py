# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/cli/args/groups.py
from __future__ import annotations

import argparse

from ...config.settings import (
    DEFAULT_LOG_DIR,
    DEFAULT_OTHER_ARGS,
    DEFAULT_USER_HIVE,
    DEFAULT_WALLPAPER_PATH,
    TOUCH_KEYBOARD_ALIAS,
    WALLPAPER_ALIAS,
)


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged normalized config and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -vv debug, -vvv trace")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Only warnings (-q) or errors (-qq) on the console.")
    p.add_argument("--log-dir", dest="log_dir", default=DEFAULT_LOG_DIR, help="Directory for the per-run log file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON log lines.")
    p.add_argument("--no-color", dest="no_color", action="store_true", help="Disable coloured console output.")


def _add_global_operation_flags(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global operation flags
    # ------------------------------------------------------------------
    p.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Log robocopy/reg/msiexec commands instead of running them.",
    )


def _add_copy_knobs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Folder mirror (robocopy)
    # ------------------------------------------------------------------
    g = p.add_argument_group("copy")
    g.add_argument("--copy-source", dest="copy_source", default=None, help="Folder to mirror from.")
    g.add_argument("--copy-destination", dest="copy_destination", default=None, help="Folder to mirror into.")
    g.add_argument(
        "--copy-log",
        dest="copy_log",
        default=None,
        help="robocopy log file (default: <log-dir>/robocopy-<timestamp>.log).",
    )
    g.add_argument("--skip-copy", dest="skip_copy", action="store_true", help="Disable the copy step.")


def _add_branding_knobs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Default-user branding (offline hive edits)
    # ------------------------------------------------------------------
    g = p.add_argument_group("branding")
    g.add_argument("--default-user-hive", dest="default_user_hive", default=DEFAULT_USER_HIVE, help="Default user NTUSER.DAT.")
    g.add_argument("--wallpaper-source", dest="wallpaper_source", default=None, help="Image to stage as the wallpaper.")
    g.add_argument("--wallpaper-path", dest="wallpaper_path", default=DEFAULT_WALLPAPER_PATH, help="Final wallpaper path written to the hive.")
    g.add_argument("--wallpaper-alias", dest="wallpaper_alias", default=WALLPAPER_ALIAS, help="HKU mount alias for the wallpaper edit.")
    g.add_argument(
        "--touch-keyboard-alias",
        dest="touch_keyboard_alias",
        default=TOUCH_KEYBOARD_ALIAS,
        help="HKU mount alias for the touch keyboard edit.",
    )
    g.add_argument("--skip-branding", dest="skip_branding", action="store_true", help="Disable the branding step.")


def _add_install_knobs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Silent installers
    # ------------------------------------------------------------------
    g = p.add_argument_group("install")
    g.add_argument("--browser-installer", dest="browser_installer", default=None, help="Browser installer (.msi or .exe).")
    g.add_argument("--browser-args", dest="browser_args", default="", help="Extra installer arguments (space separated).")
    g.add_argument("--other-installer", dest="other_installer", default=None, help="Second installer (.msi or .exe).")
    g.add_argument(
        "--other-args",
        dest="other_args",
        default=" ".join(DEFAULT_OTHER_ARGS),
        help="Extra installer arguments (space separated).",
    )
    g.add_argument("--skip-install", dest="skip_install", action="store_true", help="Disable the install step.")


def _add_settings_knobs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Browser / Copilot / OneDrive settings (placeholder)
    # ------------------------------------------------------------------
    g = p.add_argument_group("settings")
    g.add_argument("--association-file", dest="association_file", default=None, help="Default app association XML.")
    g.add_argument("--skip-settings", dest="skip_settings", action="store_true", help="Disable the settings step.")

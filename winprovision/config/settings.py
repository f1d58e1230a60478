# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/config/settings.py
"""Resolved per-run settings and their Windows defaults."""
from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

# ---------------------------
# Windows defaults
# ---------------------------

DEFAULT_LOG_DIR = r"C:\Windows\Temp\winprovision"
DEFAULT_USER_HIVE = r"C:\Users\Default\NTUSER.DAT"
DEFAULT_WALLPAPER_PATH = r"C:\Windows\Web\Wallpaper\Corporate\wallpaper.jpg"

WALLPAPER_ALIAS = "WP_DefaultUser"
TOUCH_KEYBOARD_ALIAS = "TK_DefaultUser"

# Silent switches per package kind; msiexec gets /qn /norestart from the installer step.
DEFAULT_BROWSER_ARGS: List[str] = []
DEFAULT_OTHER_ARGS: List[str] = ["/S"]


def _opt_path(v: Any) -> Optional[Path]:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return Path(v)


def _str_list(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return v.split()
    return [str(x) for x in v]


@dataclass
class ProvisionSettings:
    log_dir: Path = Path(DEFAULT_LOG_DIR)

    copy_source: Optional[Path] = None
    copy_destination: Optional[Path] = None
    copy_log: Optional[Path] = None

    default_user_hive: Path = Path(DEFAULT_USER_HIVE)
    wallpaper_source: Optional[Path] = None
    wallpaper_path: str = DEFAULT_WALLPAPER_PATH
    wallpaper_alias: str = WALLPAPER_ALIAS
    touch_keyboard_alias: str = TOUCH_KEYBOARD_ALIAS

    browser_installer: Optional[Path] = None
    browser_args: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    other_installer: Optional[Path] = None
    other_args: List[str] = field(default_factory=lambda: list(DEFAULT_OTHER_ARGS))

    association_file: Optional[Path] = None

    skip_copy: bool = False
    skip_branding: bool = False
    skip_install: bool = False
    skip_settings: bool = False
    dry_run: bool = False

    def mirror_log_path(self, ts: str) -> Path:
        if self.copy_log is not None:
            return self.copy_log
        return Path(self.log_dir) / f"robocopy-{ts}.log"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ProvisionSettings":
        base = cls()
        return cls(
            log_dir=_opt_path(getattr(args, "log_dir", None)) or base.log_dir,
            copy_source=_opt_path(getattr(args, "copy_source", None)),
            copy_destination=_opt_path(getattr(args, "copy_destination", None)),
            copy_log=_opt_path(getattr(args, "copy_log", None)),
            default_user_hive=_opt_path(getattr(args, "default_user_hive", None)) or base.default_user_hive,
            wallpaper_source=_opt_path(getattr(args, "wallpaper_source", None)),
            wallpaper_path=str(getattr(args, "wallpaper_path", None) or base.wallpaper_path),
            wallpaper_alias=str(getattr(args, "wallpaper_alias", None) or base.wallpaper_alias),
            touch_keyboard_alias=str(getattr(args, "touch_keyboard_alias", None) or base.touch_keyboard_alias),
            browser_installer=_opt_path(getattr(args, "browser_installer", None)),
            browser_args=_str_list(getattr(args, "browser_args", base.browser_args)),
            other_installer=_opt_path(getattr(args, "other_installer", None)),
            other_args=_str_list(getattr(args, "other_args", base.other_args)),
            association_file=_opt_path(getattr(args, "association_file", None)),
            skip_copy=bool(getattr(args, "skip_copy", False)),
            skip_branding=bool(getattr(args, "skip_branding", False)),
            skip_install=bool(getattr(args, "skip_install", False)),
            skip_settings=bool(getattr(args, "skip_settings", False)),
            dry_run=bool(getattr(args, "dry_run", False)),
        )

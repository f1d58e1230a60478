# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/steps/branding.py
"""
Default-user branding.

Two independent edits of the default user hive, each under its own mount
alias:
- wallpaper: Control Panel\\Desktop Wallpaper / TileWallpaper / WallpaperStyle
- touch keyboard: Software\\Microsoft\\TabletTip\\1.7 TipbandDesiredVisibility

New profiles created from C:\\Users\\Default inherit both. The wallpaper image
itself can be staged to its final path first.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.logger import Log
from ..core.process import ProcessRunner
from ..core.utils import U
from ..registry.encoding import RegistryWrite
from ..registry.hive import MutationResult, with_mounted_hive

DESKTOP_KEY = r"Control Panel\Desktop"
TABLET_TIP_KEY = r"Software\Microsoft\TabletTip\1.7"

TILE_OFF = "0"
STYLE_FILL = "10"
TIPBAND_VISIBLE = 1


def wallpaper_writes(wallpaper_path: str) -> List[RegistryWrite]:
    return [
        RegistryWrite.sz(DESKTOP_KEY, "Wallpaper", str(wallpaper_path)),
        RegistryWrite.sz(DESKTOP_KEY, "TileWallpaper", TILE_OFF),
        RegistryWrite.sz(DESKTOP_KEY, "WallpaperStyle", STYLE_FILL),
    ]


def touch_keyboard_writes() -> List[RegistryWrite]:
    return [RegistryWrite.dword(TABLET_TIP_KEY, "TipbandDesiredVisibility", TIPBAND_VISIBLE)]


def stage_wallpaper(logger: logging.Logger, source: Optional[Path], target: Path) -> bool:
    """Copy the wallpaper image into place. Returns True if it was copied."""
    if source is None:
        logger.debug("No wallpaper source configured; assuming %s is already in place", target)
        return False
    if not source.is_file():
        logger.warning("⚠️  Wallpaper image not found: %s; registry will still point at %s", source, target)
        return False
    U.ensure_dir(target.parent)
    shutil.copy2(source, target)
    logger.info("Staged wallpaper %s -> %s", source, target)
    return True


def _mutation_summary(m: MutationResult) -> Dict[str, Any]:
    return {
        "ok": m.ok,
        "alias": m.alias,
        "applied": [w.describe() for w in m.applied],
        "error": str(m.error) if m.error else None,
        "unmount_error": str(m.unmount_error) if m.unmount_error else None,
    }


def apply_branding(
    logger: logging.Logger,
    runner: ProcessRunner,
    hive_path: Path,
    wallpaper_path: str,
    *,
    wallpaper_source: Optional[Path] = None,
    wallpaper_alias: str = "WP_DefaultUser",
    touch_keyboard_alias: str = "TK_DefaultUser",
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "success": False,
        "skipped": False,
        "hive_path": str(hive_path),
        "wallpaper_staged": False,
        "mutations": {},
        "errors": [],
        "warnings": [],
    }

    try:
        out["wallpaper_staged"] = stage_wallpaper(logger, wallpaper_source, Path(wallpaper_path))
    except OSError as e:
        msg = f"Wallpaper staging failed: {e}"
        logger.warning("⚠️  %s", msg)
        out["warnings"].append(msg)

    if not Path(hive_path).is_file():
        msg = f"Default user hive not found: {hive_path}; skipping wallpaper and touch keyboard settings"
        logger.warning("⚠️  %s", msg)
        out["warnings"].append(msg)
        out["skipped"] = True
        return out

    plan = (
        ("wallpaper", wallpaper_alias, wallpaper_writes(wallpaper_path)),
        ("touch_keyboard", touch_keyboard_alias, touch_keyboard_writes()),
    )
    for name, alias, writes in plan:
        Log.step(logger, f"Applying {name} settings to {hive_path}", alias=alias)
        m = with_mounted_hive(logger, runner, hive_path, alias, writes)
        out["mutations"][name] = _mutation_summary(m)
        if not m.ok:
            out["errors"].append(f"{name}: {m.error}")
        if m.unmount_error is not None:
            out["warnings"].append(f"{name}: {m.unmount_error}")

    out["success"] = not out["errors"]
    return out

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/cli/args/validators.py
from __future__ import annotations

import argparse
from typing import Any, Dict

from ...core.exceptions import Fatal
from ...registry.encoding import validate_alias


def _require(v: Any) -> bool:
    return v is not None and not (isinstance(v, str) and not v.strip())


def _validate_copy(args: argparse.Namespace) -> None:
    src = getattr(args, "copy_source", None)
    dst = getattr(args, "copy_destination", None)
    if _require(src) != _require(dst) and not getattr(args, "skip_copy", False):
        raise Fatal(2, "--copy-source and --copy-destination must be given together")
    if _require(src) and _require(dst) and str(src).rstrip("\\/").lower() == str(dst).rstrip("\\/").lower():
        raise Fatal(2, f"Copy source and destination are the same folder: {src}")


def _validate_aliases(args: argparse.Namespace) -> None:
    wp = getattr(args, "wallpaper_alias", None)
    tk = getattr(args, "touch_keyboard_alias", None)
    for flag, alias in (("--wallpaper-alias", wp), ("--touch-keyboard-alias", tk)):
        try:
            validate_alias(str(alias))
        except ValueError as e:
            raise Fatal(2, f"{flag}: {e}") from e
    if str(wp).lower() == str(tk).lower():
        raise Fatal(2, f"Wallpaper and touch keyboard mount aliases must differ (both {wp!r})")


def _validate_wallpaper(args: argparse.Namespace) -> None:
    if not _require(getattr(args, "wallpaper_path", None)) and not getattr(args, "skip_branding", False):
        raise Fatal(2, "--wallpaper-path must not be empty")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    """Reject inconsistent options before any step runs. Raises Fatal(2)."""
    _validate_copy(args)
    _validate_aliases(args)
    _validate_wallpaper(args)

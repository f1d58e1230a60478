# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/steps/settings.py
"""Browser / Copilot / OneDrive settings: placeholder, intentionally a no-op."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional


def configure_settings(logger: logging.Logger, association_file: Optional[Path]) -> None:
    if association_file is None:
        logger.info("Settings configuration: no association file configured; nothing to do")
        return
    if not Path(association_file).is_file():
        logger.warning("⚠️  Settings configuration: association file not found: %s", association_file)
        return
    logger.info("Settings configuration: %s received; not applied (not implemented)", association_file)

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/core/utils.py
from __future__ import annotations

import datetime as _dt
import json
import logging
import subprocess
from pathlib import Path
from typing import Any, List


class U:
    @staticmethod
    def ensure_dir(p: Path) -> None:
        p.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def now_ts() -> str:
        return _dt.datetime.now().strftime("%Y%m%d-%H%M%S")

    @staticmethod
    def json_dump(obj: Any) -> str:
        try:
            return json.dumps(obj, indent=2, sort_keys=True, default=str)
        except Exception:
            return repr(obj)

    @staticmethod
    def pretty_cmd(cmd: List[str]) -> str:
        """Render a command line the way cmd.exe would need it quoted."""
        return subprocess.list2cmdline([str(x) for x in cmd])

    @staticmethod
    def run_cmd(logger: logging.Logger, cmd: List[str]) -> subprocess.CompletedProcess:
        """
        Run a command to completion, capturing its output.

        Never raises on a non-zero exit. Output that is not valid in the
        locale codec is decoded with replacement characters. OSError from a
        command that cannot be started propagates.
        """
        logger.debug("Running: %s", U.pretty_cmd(cmd))
        return subprocess.run(cmd, check=False, capture_output=True, text=True, errors="replace")

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/core/process.py
"""
External process execution behind a narrow interface.

Every OS tool this project drives (robocopy, reg, msiexec, installers) is
reached through `ProcessRunner.run(command, args) -> exit code`, so tests can
substitute a fake that never touches the machine.
"""
from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

from .utils import U


class ProcessRunner(Protocol):
    def run(self, command: str, args: Sequence[str]) -> int:  # pragma: no cover - protocol
        """Run `command args...` to completion and return its exit code.

        Raises OSError when the command cannot be started at all.
        """
        ...


class SubprocessRunner:
    """Blocking runner backed by subprocess; no timeout, no cancellation."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def run(self, command: str, args: Sequence[str]) -> int:
        cmd: List[str] = [command, *[str(a) for a in args]]
        cp = U.run_cmd(self.logger, cmd)
        out = (cp.stdout or "").strip()
        err = (cp.stderr or "").strip()
        if out:
            self.logger.debug("%s stdout: %s", command, out)
        if err:
            self.logger.debug("%s stderr: %s", command, err)
        self.logger.debug("%s exited with %d", command, cp.returncode)
        return int(cp.returncode)


class DryRunRunner:
    """
    Logs each command instead of running it and reports success.

    `reg query` checks answer "not found" (1) so a rehearsal walks the
    create-key path and never reports a stale mount.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.commands: List[List[str]] = []

    def run(self, command: str, args: Sequence[str]) -> int:
        cmd = [command, *[str(a) for a in args]]
        self.commands.append(cmd)
        self.logger.info("[dry-run] %s", U.pretty_cmd(cmd))
        if _is_reg_query(command, args):
            return 1
        return 0


def _is_reg_query(command: str, args: Sequence[str]) -> bool:
    name = command.replace("\\", "/").rsplit("/", 1)[-1].lower()
    return name in ("reg", "reg.exe") and bool(args) and str(args[0]).lower() == "query"

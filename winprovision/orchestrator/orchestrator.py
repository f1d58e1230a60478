# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/orchestrator/orchestrator.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config.settings import ProvisionSettings
from ..core.exceptions import SourceMissing
from ..core.logger import Log
from ..core.logging_utils import log_step
from ..core.process import DryRunRunner, ProcessRunner, SubprocessRunner
from ..core.utils import U
from ..mirror.robocopy import Severity, mirror
from ..steps.branding import apply_branding
from ..steps.installers import default_packages, install_packages
from ..steps.settings import configure_settings


class StepStatus(Enum):
    OK = "ok"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"


_STATUS_STYLE = {
    StepStatus.OK: "green",
    StepStatus.WARNING: "yellow",
    StepStatus.FAILED: "bold red",
    StepStatus.SKIPPED: "dim",
}


@dataclass
class StepOutcome:
    name: str
    status: StepStatus
    detail: str = ""
    elapsed_s: float = 0.0


StepResult = Tuple[StepStatus, str]


class Orchestrator:
    """
    Runs the task-sequence steps in fixed order: copy, branding, install,
    settings. A failing step is logged and the next one still runs; nothing is
    rolled back.
    """

    def __init__(
        self,
        logger: logging.Logger,
        settings: ProvisionSettings,
        runner: Optional[ProcessRunner] = None,
        *,
        console: Optional[Console] = None,
    ):
        self.logger = logger
        self.settings = settings
        if runner is None:
            runner = DryRunRunner(logger) if settings.dry_run else SubprocessRunner(logger)
        self.runner = runner
        self.console = console if console is not None else Console()
        self.outcomes: List[StepOutcome] = []

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _copy(self) -> StepResult:
        s = self.settings
        if s.copy_source is None or s.copy_destination is None:
            return StepStatus.SKIPPED, "copy source/destination not configured"

        res = mirror(self.logger, self.runner, s.copy_source, s.copy_destination, s.mirror_log_path(U.now_ts()))
        if isinstance(res.error, SourceMissing):
            return StepStatus.WARNING, res.message
        if res.severity is Severity.FAILURE:
            return StepStatus.FAILED, res.message
        if res.severity is Severity.WARNING:
            return StepStatus.WARNING, res.message
        return StepStatus.OK, res.message

    def _branding(self) -> StepResult:
        s = self.settings
        out = apply_branding(
            self.logger,
            self.runner,
            s.default_user_hive,
            s.wallpaper_path,
            wallpaper_source=s.wallpaper_source,
            wallpaper_alias=s.wallpaper_alias,
            touch_keyboard_alias=s.touch_keyboard_alias,
        )
        if out["errors"]:
            return StepStatus.FAILED, "; ".join(out["errors"])
        if out["warnings"]:
            return StepStatus.WARNING, "; ".join(out["warnings"])
        return StepStatus.OK, "wallpaper and touch keyboard applied"

    def _install(self) -> StepResult:
        s = self.settings
        pkgs = default_packages(s.browser_installer, s.browser_args, s.other_installer, s.other_args)
        if not pkgs:
            return StepStatus.SKIPPED, "no installers configured"

        results = install_packages(self.logger, self.runner, pkgs)
        detail = ", ".join(f"{name}={'ok' if ok else 'failed'}" for name, ok in results.items())
        if all(results.values()):
            return StepStatus.OK, detail
        return StepStatus.FAILED, detail

    def _settings(self) -> StepResult:
        configure_settings(self.logger, self.settings.association_file)
        return StepStatus.OK, "placeholder (no changes made)"

    def steps(self) -> List[Tuple[str, bool, Callable[[], StepResult]]]:
        s = self.settings
        return [
            ("copy", s.skip_copy, self._copy),
            ("branding", s.skip_branding, self._branding),
            ("install", s.skip_install, self._install),
            ("settings", s.skip_settings, self._settings),
        ]

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _run_step(self, name: str, fn: Callable[[], StepResult]) -> StepOutcome:
        t0 = time.time()
        try:
            with log_step(self.logger, f"Step {name}"):
                status, detail = fn()
        except Exception as e:
            # Step failures never abort the run.
            self.logger.debug("Step %s traceback", name, exc_info=True)
            status, detail = StepStatus.FAILED, f"{type(e).__name__}: {e}"
        return StepOutcome(name, status, detail, time.time() - t0)

    def run(self) -> List[StepOutcome]:
        Log.banner(self.logger, "winprovision")
        if self.settings.dry_run:
            Log.warn(self.logger, "Dry run: external tools are not executed")

        self.outcomes = []
        for name, skipped, fn in self.steps():
            if skipped:
                self.logger.info("Step %s skipped by configuration", name)
                self.outcomes.append(StepOutcome(name, StepStatus.SKIPPED, "disabled in configuration"))
                continue
            outcome = self._run_step(name, fn)
            if outcome.status is StepStatus.OK:
                Log.ok(self.logger, f"Step {name}: {outcome.detail}")
            elif outcome.status is StepStatus.FAILED:
                Log.fail(self.logger, f"Step {name} failed: {outcome.detail}")
            elif outcome.status is StepStatus.WARNING:
                Log.warn(self.logger, f"Step {name} finished with warnings: {outcome.detail}")
            self.outcomes.append(outcome)

        self.print_summary()
        return self.outcomes

    def print_summary(self) -> None:
        table = Table(title="winprovision summary", expand=False)
        table.add_column("Step", style="bold")
        table.add_column("Status")
        table.add_column("Time", justify="right")
        table.add_column("Detail", overflow="fold")
        for o in self.outcomes:
            style = _STATUS_STYLE[o.status]
            table.add_row(o.name, f"[{style}]{o.status.value}[/{style}]", f"{o.elapsed_s:.1f}s", escape(o.detail))
        self.console.print(table)

        for o in self.outcomes:
            self.logger.info("summary: %-8s %-7s %s", o.name, o.status.value, o.detail)

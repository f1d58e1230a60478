# SPDX-License-Identifier: LGPL-3.0-or-later
"""Task-sequence orchestration: ordering, failure isolation and skip flags."""
from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fakes.fake_logger import FakeLogger
from fakes.fake_runner import FakeRunner
from rich.console import Console

from winprovision.config.settings import ProvisionSettings
from winprovision.core.process import DryRunRunner, SubprocessRunner
from winprovision.orchestrator import Orchestrator, StepStatus


class OrchestratorTestCase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        root = Path(self._td.name)
        src = root / "payload"
        src.mkdir()
        (src / "readme.txt").write_text("hi", encoding="utf-8")
        hive = root / "NTUSER.DAT"
        hive.write_bytes(b"regf")
        msi = root / "browser.msi"
        msi.write_bytes(b"msi")

        self.root = root
        self.settings = ProvisionSettings(
            log_dir=root / "logs",
            copy_source=src,
            copy_destination=root / "dest",
            default_user_hive=hive,
            wallpaper_path=str(root / "wallpaper.jpg"),
            browser_installer=msi,
        )
        self.logger = FakeLogger()
        self.runner = FakeRunner(robocopy_rc=1)
        self.out = io.StringIO()

    def tearDown(self):
        self._td.cleanup()

    def run_orchestrator(self):
        orch = Orchestrator(self.logger, self.settings, self.runner, console=Console(file=self.out, width=160))
        outcomes = orch.run()
        return {o.name: o for o in outcomes}, [o.name for o in outcomes]


class TestOrdering(OrchestratorTestCase):
    def test_all_steps_in_order(self):
        by_name, order = self.run_orchestrator()

        self.assertEqual(order, ["copy", "branding", "install", "settings"])
        self.assertEqual({n: o.status for n, o in by_name.items()}, {
            "copy": StepStatus.OK,
            "branding": StepStatus.OK,
            "install": StepStatus.OK,
            "settings": StepStatus.OK,
        })
        tools = [c[0] for c in self.runner.calls]
        self.assertEqual(tools[0], "robocopy")
        self.assertEqual(tools[-1], "msiexec")

    def test_robocopy_log_under_log_dir(self):
        self.run_orchestrator()

        log_arg = self.runner.calls[0][-1]
        self.assertTrue(log_arg.startswith("/LOG:" + str(self.root / "logs" / "robocopy-")))

    def test_summary_table_printed(self):
        self.run_orchestrator()

        text = self.out.getvalue()
        for name in ("copy", "branding", "install", "settings"):
            self.assertIn(name, text)
        self.assertIn("winprovision summary", text)


class TestFailureIsolation(OrchestratorTestCase):
    def test_copy_failure_does_not_stop_later_steps(self):
        self.runner.robocopy_rc = 8

        by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["copy"].status, StepStatus.FAILED)
        self.assertIs(by_name["branding"].status, StepStatus.OK)
        self.assertIs(by_name["install"].status, StepStatus.OK)
        self.assertTrue(self.logger.has("error", "Step copy failed"))

    def test_unexpected_exception_is_contained(self):
        with patch("winprovision.orchestrator.orchestrator.apply_branding", side_effect=RuntimeError("kaboom")):
            by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["branding"].status, StepStatus.FAILED)
        self.assertIn("RuntimeError: kaboom", by_name["branding"].detail)
        self.assertIs(by_name["install"].status, StepStatus.OK)
        self.assertIs(by_name["settings"].status, StepStatus.OK)

    def test_missing_hive_is_warning(self):
        self.settings.default_user_hive = self.root / "absent.dat"

        by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["branding"].status, StepStatus.WARNING)
        self.assertEqual(self.runner.count("reg"), 0)

    def test_missing_source_is_warning(self):
        self.settings.copy_source = self.root / "absent"

        by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["copy"].status, StepStatus.WARNING)
        self.assertEqual(self.runner.count("robocopy"), 0)

    def test_installer_failure(self):
        self.runner.fail_when("msiexec", rc=1603)

        by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["install"].status, StepStatus.FAILED)
        self.assertIs(by_name["settings"].status, StepStatus.OK)


class TestSkipping(OrchestratorTestCase):
    def test_skip_flags(self):
        self.settings.skip_copy = True
        self.settings.skip_install = True

        by_name, order = self.run_orchestrator()

        self.assertEqual(order, ["copy", "branding", "install", "settings"])
        self.assertIs(by_name["copy"].status, StepStatus.SKIPPED)
        self.assertIs(by_name["install"].status, StepStatus.SKIPPED)
        self.assertEqual(self.runner.count("robocopy"), 0)
        self.assertEqual(self.runner.count("msiexec"), 0)
        self.assertGreater(self.runner.count("reg"), 0)

    def test_unconfigured_copy_and_install_skip(self):
        self.settings.copy_source = None
        self.settings.browser_installer = None

        by_name, _ = self.run_orchestrator()

        self.assertIs(by_name["copy"].status, StepStatus.SKIPPED)
        self.assertIs(by_name["install"].status, StepStatus.SKIPPED)


class TestRunnerSelection(unittest.TestCase):
    def test_dry_run_uses_dry_runner(self):
        orch = Orchestrator(FakeLogger(), ProvisionSettings(dry_run=True), console=Console(file=io.StringIO()))
        self.assertIsInstance(orch.runner, DryRunRunner)

    def test_default_is_subprocess(self):
        orch = Orchestrator(FakeLogger(), ProvisionSettings(), console=Console(file=io.StringIO()))
        self.assertIsInstance(orch.runner, SubprocessRunner)

# SPDX-License-Identifier: LGPL-3.0-or-later
"""Hive mount lifecycle against a simulated reg.exe."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from fakes.fake_logger import FakeLogger
from fakes.fake_runner import FakeRunner

from winprovision.core.exceptions import MountFailed, UnmountFailed, WriteFailed
from winprovision.registry import hive
from winprovision.registry.encoding import RegistryWrite
from winprovision.registry.hive import HiveState, mount_hive, mounted_hive, with_mounted_hive

HIVE_BYTES = b"regf\x00\x01\x02binary-hive-content\xff"
DESKTOP = "Control Panel\\Desktop"


def _wallpaper_writes():
    return [
        RegistryWrite.sz(DESKTOP, "Wallpaper", "C:\\Windows\\Web\\Wallpaper\\Corporate\\wallpaper.jpg"),
        RegistryWrite.sz(DESKTOP, "TileWallpaper", "0"),
        RegistryWrite.sz(DESKTOP, "WallpaperStyle", "10"),
    ]


class HiveTestCase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.hive_path = Path(self._td.name) / "NTUSER.DAT"
        self.hive_path.write_bytes(HIVE_BYTES)
        self.logger = FakeLogger()
        self.runner = FakeRunner()

    def tearDown(self):
        self._td.cleanup()


class TestWithMountedHive(HiveTestCase):
    def test_no_writes_leaves_hive_unchanged(self):
        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", [])

        self.assertTrue(res.ok)
        self.assertIsNone(res.unmount_error)
        self.assertEqual(self.hive_path.read_bytes(), HIVE_BYTES)
        self.assertEqual(self.runner.verbs(), ["query", "load", "unload"])
        self.assertEqual(
            res.states,
            [HiveState.UNMOUNTED, HiveState.MOUNTING, HiveState.MOUNTED, HiveState.UNMOUNTING, HiveState.UNMOUNTED],
        )

    def test_writes_applied_and_unmounted(self):
        writes = _wallpaper_writes()

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", writes)

        self.assertTrue(res.ok)
        self.assertTrue(res.mounted)
        self.assertEqual(res.applied, writes)
        self.assertIn(HiveState.WRITING, res.states)
        self.assertEqual(res.states[-1], HiveState.UNMOUNTED)
        self.assertEqual(self.runner.count("reg", "unload"), 1)
        self.assertEqual(self.runner.value(self.hive_path, DESKTOP, "WallpaperStyle"), ["REG_SZ", "10"])
        self.assertEqual(hive._ACTIVE_ALIASES, set())

    def test_key_created_once(self):
        with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", _wallpaper_writes())

        key_adds = [c for c in self.runner.calls if c[:2] == ["reg", "add"] and "/v" not in c]
        self.assertEqual(key_adds, [["reg", "add", "HKU\\WP_DefaultUser\\Control Panel\\Desktop", "/f"]])

    def test_same_write_twice_is_idempotent(self):
        w = RegistryWrite.dword("Software\\Microsoft\\TabletTip\\1.7", "TipbandDesiredVisibility", 1)

        with_mounted_hive(self.logger, self.runner, self.hive_path, "TK_DefaultUser", [w])
        once = self.hive_path.read_bytes()
        with_mounted_hive(self.logger, FakeRunner(), self.hive_path, "TK_DefaultUser", [w, w])
        twice = self.hive_path.read_bytes()

        self.assertEqual(once, twice)
        self.assertEqual(
            self.runner.value(self.hive_path, "Software\\Microsoft\\TabletTip\\1.7", "TipbandDesiredVisibility"),
            ["REG_DWORD", "1"],
        )

    def test_mount_failure_never_unloads(self):
        self.runner.fail_when("reg", "load", rc=5)

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", _wallpaper_writes())

        self.assertIsInstance(res.error, MountFailed)
        self.assertEqual(res.error.code, 5)
        self.assertFalse(res.mounted)
        self.assertEqual(res.applied, [])
        self.assertNotIn("unload", self.runner.verbs())
        self.assertNotIn("add", self.runner.verbs())
        self.assertEqual(hive._ACTIVE_ALIASES, set())
        self.assertTrue(self.logger.has("error", "Mount failed"))

    def test_write_failure_unloads_exactly_once(self):
        self.runner.fail_when("reg", "add", contains="TileWallpaper", rc=1)

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", _wallpaper_writes())

        self.assertIsInstance(res.error, WriteFailed)
        self.assertEqual([w.value_name for w in res.applied], ["Wallpaper"])
        self.assertEqual(self.runner.count("reg", "unload"), 1)
        self.assertEqual(
            res.states,
            [
                HiveState.UNMOUNTED,
                HiveState.MOUNTING,
                HiveState.MOUNTED,
                HiveState.WRITING,
                HiveState.MOUNTED,
                HiveState.WRITING,
                HiveState.UNMOUNTING,
                HiveState.UNMOUNTED,
            ],
        )
        # committed writes stay committed
        self.assertIsNotNone(self.runner.value(self.hive_path, DESKTOP, "Wallpaper"))
        self.assertIsNone(self.runner.value(self.hive_path, DESKTOP, "TileWallpaper"))
        self.assertTrue(self.logger.has("error", "1 of 3 writes applied"))

    def test_unmount_failure_is_warning(self):
        self.runner.fail_when("reg", "unload", rc=1)

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", _wallpaper_writes())

        self.assertTrue(res.ok)
        self.assertIsInstance(res.unmount_error, UnmountFailed)
        self.assertTrue(self.logger.has("warning", "hive may still be mounted"))
        self.assertEqual(hive._ACTIVE_ALIASES, set())

    def test_missing_hive_file(self):
        res = with_mounted_hive(self.logger, self.runner, self.hive_path.with_name("nope.dat"), "WP_DefaultUser", [])

        self.assertIsInstance(res.error, MountFailed)
        self.assertEqual(res.error.code, 2)
        self.assertEqual(self.runner.calls, [])

    def test_reg_not_startable(self):
        self.runner.raise_when("reg")

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", [])

        self.assertIsInstance(res.error, MountFailed)
        self.assertIsInstance(res.error.cause, OSError)
        self.assertTrue(self.logger.has("warning", "Could not check/clean stale mount"))

    def test_invalid_alias_reported_not_raised(self):
        for alias in ("", "   ", "WP\\DefaultUser"):
            res = with_mounted_hive(self.logger, self.runner, self.hive_path, alias, _wallpaper_writes())

            self.assertIsInstance(res.error, MountFailed)
            self.assertEqual(res.error.code, 2)
            self.assertFalse(res.mounted)
        self.assertEqual(self.runner.calls, [])
        self.assertEqual(hive._ACTIVE_ALIASES, set())


class TestStaleMount(HiveTestCase):
    def test_stale_mount_unloaded_first(self):
        self.runner.preload("WP_DefaultUser", self.hive_path)

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", [])

        self.assertTrue(res.ok)
        self.assertEqual(self.runner.verbs(), ["query", "unload", "load", "unload"])
        self.assertTrue(self.logger.has("warning", "Stale mount found"))

    def test_stale_cleanup_failure_is_not_fatal_by_itself(self):
        self.runner.preload("WP_DefaultUser", self.hive_path)
        self.runner.fail_when("reg", "unload", rc=1, times=1)

        res = with_mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser", [])

        self.assertTrue(self.logger.has("warning", "could not be unloaded"))
        # the leftover mount still blocks the load
        self.assertIsInstance(res.error, MountFailed)
        self.assertEqual(self.runner.verbs(), ["query", "unload", "load"])


class TestHandle(HiveTestCase):
    def test_alias_in_use_rejected(self):
        with mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser"):
            before = len(self.runner.calls)
            with self.assertRaises(MountFailed):
                mount_hive(self.logger, self.runner, self.hive_path, "wp_defaultuser")
            self.assertEqual(len(self.runner.calls), before)

        # released after the scope ends
        with mounted_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser") as h:
            self.assertTrue(h.is_mounted)

    def test_unmount_runs_once(self):
        h = mount_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser")

        self.assertIsNone(h.unmount())
        self.assertIsNone(h.unmount())

        self.assertEqual(self.runner.count("reg", "unload"), 1)
        self.assertFalse(h.is_mounted)

    def test_write_after_unmount_rejected(self):
        h = mount_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser")
        h.unmount()

        with self.assertRaises(WriteFailed):
            h.set_value(RegistryWrite.sz(DESKTOP, "Wallpaper", "x"))

    def test_scope_unloads_on_exception(self):
        with self.assertRaises(RuntimeError):
            with mounted_hive(self.logger, self.runner, self.hive_path, "TK_DefaultUser") as h:
                self.assertEqual(h.root, "HKU\\TK_DefaultUser")
                raise RuntimeError("boom")

        self.assertEqual(self.runner.count("reg", "unload"), 1)
        self.assertEqual(hive._ACTIVE_ALIASES, set())

    def test_key_creation_failure(self):
        self.runner.fail_when("reg", "add", rc=1)
        h = mount_hive(self.logger, self.runner, self.hive_path, "WP_DefaultUser")
        try:
            with self.assertRaises(WriteFailed):
                h.set_value(RegistryWrite.sz(DESKTOP, "Wallpaper", "x"))
            self.assertEqual(h.state, HiveState.WRITING)
            self.assertTrue(h.is_mounted)
        finally:
            h.unmount()

        self.assertEqual(h.history[-3:], [HiveState.WRITING, HiveState.UNMOUNTING, HiveState.UNMOUNTED])
        self.assertEqual(self.runner.count("reg", "unload"), 1)

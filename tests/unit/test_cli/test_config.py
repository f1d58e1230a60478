# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Unit Tests for CLI Configuration Loading

Tests YAML/JSON configuration file loading, merging, and two-phase parsing.
"""

import json
import tempfile
import unittest
from pathlib import Path

import pytest
import yaml
from fakes.fake_logger import FakeLogger

from winprovision.cli.args import build_parser, parse_args_with_config
from winprovision.config import Config, ProvisionSettings
from winprovision.core.exceptions import Fatal


class TestConfigLoader(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)
        self.logger = FakeLogger()

    def tearDown(self):
        self._td.cleanup()

    def test_yaml_keys_normalized(self):
        cfg = self.td / "a.yaml"
        cfg.write_text("skip-install: true\ncopy:\n  source: D:\\Payload\n", encoding="utf-8")

        conf = Config.load_file(self.logger, cfg)

        self.assertEqual(conf, {"skip_install": True, "copy": {"source": "D:\\Payload"}})

    def test_json_with_bom(self):
        cfg = self.td / "a.json"
        cfg.write_text("\ufeff" + json.dumps({"dry-run": True}), encoding="utf-8")

        self.assertEqual(Config.load_file(self.logger, cfg), {"dry_run": True})

    def test_missing_file(self):
        with self.assertRaises(Fatal) as cm:
            Config.load_file(self.logger, self.td / "nope.yaml")
        self.assertEqual(cm.exception.code, 2)

    def test_bad_yaml(self):
        cfg = self.td / "bad.yaml"
        cfg.write_text("copy: [unclosed\n", encoding="utf-8")

        with self.assertRaises(Fatal) as cm:
            Config.load_file(self.logger, cfg)
        self.assertEqual(cm.exception.context["path"], str(cfg))

    def test_root_must_be_mapping(self):
        cfg = self.td / "list.yaml"
        cfg.write_text("- a\n- b\n", encoding="utf-8")

        with self.assertRaises(Fatal):
            Config.load_file(self.logger, cfg)

    def test_merge_later_wins_and_nests(self):
        a = self.td / "10-base.yaml"
        b = self.td / "20-site.yaml"
        a.write_text(yaml.safe_dump({"copy": {"source": "A", "destination": "B"}, "skip_settings": True}), encoding="utf-8")
        b.write_text(yaml.safe_dump({"copy": {"destination": "C"}}), encoding="utf-8")

        conf = Config.load_many(self.logger, Config.expand_configs(self.logger, [str(self.td)]))

        self.assertEqual(conf, {"copy": {"source": "A", "destination": "C"}, "skip_settings": True})

    def test_glob_expansion(self):
        (self.td / "x.yaml").write_text("a: 1\n", encoding="utf-8")
        (self.td / "y.yml").write_text("b: 2\n", encoding="utf-8")

        paths = Config.expand_configs(self.logger, [str(self.td / "*.y*ml")])

        self.assertEqual([p.name for p in paths], ["x.yaml", "y.yml"])

    def test_empty_glob_warns(self):
        self.assertEqual(Config.expand_configs(self.logger, [str(self.td / "*.yaml")]), [])
        self.assertTrue(self.logger.has("warning", "matched nothing"))

    def test_flatten(self):
        self.assertEqual(
            Config.flatten({"copy": {"source": "A", "log": "L"}, "dry_run": False}),
            {"copy_source": "A", "copy_log": "L", "dry_run": False},
        )

    def test_apply_as_defaults_ignores_unknown(self):
        parser = build_parser()

        applied = Config.apply_as_defaults(self.logger, parser, {"copy": {"source": "S"}, "bogus": 1})

        self.assertEqual(applied, {"copy_source": "S"})
        self.assertTrue(self.logger.has("warning", "Ignoring unknown config key: bogus"))
        self.assertEqual(parser.parse_args([]).copy_source, "S")


class TestTwoPhaseParse(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)
        self.logger = FakeLogger()

    def tearDown(self):
        self._td.cleanup()

    def _cfg(self, name, data):
        p = self.td / name
        p.write_text(yaml.safe_dump(data), encoding="utf-8")
        return str(p)

    def test_config_drives_settings(self):
        cfg = self._cfg("c.yaml", {
            "copy": {"source": "D:\\Payload", "destination": "C:\\Corp"},
            "browser_installer": "D:\\browser.msi",
            "other_args": "/S /norestart",
            "skip_settings": True,
        })

        args, conf, logger = parse_args_with_config(["--config", cfg], logger=self.logger)
        s = ProvisionSettings.from_args(args)

        self.assertIs(logger, self.logger)
        self.assertIn("copy", conf)
        self.assertEqual(s.copy_source, Path("D:\\Payload"))
        self.assertEqual(s.browser_installer, Path("D:\\browser.msi"))
        self.assertEqual(s.other_args, ["/S", "/norestart"])
        self.assertTrue(s.skip_settings)
        self.assertFalse(s.skip_copy)

    def test_cli_overrides_config(self):
        cfg = self._cfg("c.yaml", {"copy": {"source": "A", "destination": "B"}, "wallpaper_path": "C:\\w1.jpg"})

        args, _conf, _ = parse_args_with_config(
            ["--config", cfg, "--copy-destination", "Z", "--wallpaper-path", "C:\\w2.jpg", "--dry-run"],
            logger=self.logger,
        )

        self.assertEqual(args.copy_source, "A")
        self.assertEqual(args.copy_destination, "Z")
        self.assertEqual(args.wallpaper_path, "C:\\w2.jpg")
        self.assertTrue(args.dry_run)

    def test_multiple_config_files_merge(self):
        a = self._cfg("a.yaml", {"wallpaper_alias": "WP_A", "skip_install": True})
        b = self._cfg("b.yaml", {"wallpaper_alias": "WP_B"})

        args, _conf, _ = parse_args_with_config(["--config", a, "--config", b], logger=self.logger)

        self.assertEqual(args.wallpaper_alias, "WP_B")
        self.assertTrue(args.skip_install)

    def test_defaults_without_config(self):
        args, conf, _ = parse_args_with_config([], logger=self.logger)
        s = ProvisionSettings.from_args(args)

        self.assertEqual(conf, {})
        self.assertEqual(s.default_user_hive, Path("C:\\Users\\Default\\NTUSER.DAT"))
        self.assertEqual(s.wallpaper_alias, "WP_DefaultUser")
        self.assertEqual(s.touch_keyboard_alias, "TK_DefaultUser")
        self.assertEqual(s.other_args, ["/S"])
        self.assertEqual(s.browser_args, [])
        self.assertIsNone(s.copy_source)


@pytest.mark.unit
def test_dump_config_exits(tmp_path, capsys):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("copy:\n  source: A\n", encoding="utf-8")

    with pytest.raises(SystemExit) as ei:
        parse_args_with_config(["--config", str(cfg), "--dump-config"], logger=FakeLogger())

    assert ei.value.code == 0
    assert json.loads(capsys.readouterr().out) == {"copy": {"source": "A"}}

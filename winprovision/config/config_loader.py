# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/config/config_loader.py
"""
YAML/JSON configuration files applied as argparse defaults.

Files are merged in order (later wins, dicts merged recursively), keys are
normalized (dashes -> underscores) and nested sections are flattened so that

    copy:
      source: D:\\Payload

becomes `copy_source`, the dest of `--copy-source`.
"""
from __future__ import annotations

import argparse
import glob
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from ..core.exceptions import Fatal, wrap_fatal

CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def _norm_key(k: Any) -> str:
    return str(k).strip().replace("-", "_")


def _deep_merge(base: Dict[str, Any], over: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = _deep_merge(dict(out[k]), v)
        else:
            out[k] = v
    return out


def _normalize(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return {_norm_key(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_normalize(v) for v in obj]
    return obj


class Config:
    @staticmethod
    def load_file(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        p = Path(path).expanduser()
        if not p.is_file():
            raise Fatal(2, f"Config file not found: {p}")
        try:
            text = p.read_text(encoding="utf-8-sig")
            if p.suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text) or {}
        except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
            raise wrap_fatal(f"Failed to parse config {p}: {e}", e, code=2, path=str(p)) from e

        if not isinstance(data, Mapping):
            raise Fatal(2, f"Config root must be a mapping: {p} (got {type(data).__name__})")

        logger.debug("Loaded config %s (%d top-level keys)", p, len(data))
        return _normalize(data)

    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: Iterable[str]) -> List[Path]:
        """
        Expand config arguments: globs and directories (all *.yaml/*.yml/*.json
        inside, sorted) are allowed. Order is preserved.
        """
        out: List[Path] = []
        for raw in cfgs:
            s = str(raw)
            if any(ch in s for ch in "*?["):
                matches = sorted(glob.glob(s))
                if not matches:
                    logger.warning("Config glob matched nothing: %s", s)
                out.extend(Path(m) for m in matches)
                continue
            p = Path(s).expanduser()
            if p.is_dir():
                found = sorted(x for x in p.iterdir() if x.suffix.lower() in CONFIG_SUFFIXES)
                if not found:
                    logger.warning("Config directory has no config files: %s", p)
                out.extend(found)
                continue
            out.append(p)
        return out

    @staticmethod
    def load_many(logger: logging.Logger, paths: Iterable[Path]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for p in paths:
            merged = _deep_merge(merged, Config.load_file(logger, p))
        return merged

    @staticmethod
    def flatten(conf: Mapping[str, Any], *, sep: str = "_") -> Dict[str, Any]:
        """Flatten nested sections: {"copy": {"source": x}} -> {"copy_source": x}."""
        out: Dict[str, Any] = {}
        for k, v in conf.items():
            if isinstance(v, Mapping):
                for sk, sv in Config.flatten(v, sep=sep).items():
                    out[f"{k}{sep}{sk}"] = sv
            else:
                out[k] = v
        return out

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Set parser defaults from config so that CLI flags still override.
        Returns the subset that was applied; unknown keys are logged and ignored.
        """
        dests = {a.dest for a in parser._actions}  # argparse has no public accessor
        flat = Config.flatten(conf)

        applied: Dict[str, Any] = {}
        for k, v in flat.items():
            if k in dests:
                applied[k] = v
            else:
                logger.warning("Ignoring unknown config key: %s", k)

        if applied:
            parser.set_defaults(**applied)
        return applied

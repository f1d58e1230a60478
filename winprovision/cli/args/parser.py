# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/cli/args/parser.py
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional, Sequence, Tuple

from ...config.config_loader import Config
from ...config.settings import DEFAULT_LOG_DIR
from ...core.exceptions import wrap_fatal
from ...core.logger import Log, c
from ...core.utils import U
from .builder import HelpFormatter, _build_epilog
from .groups import (
    _add_branding_knobs,
    _add_copy_knobs,
    _add_global_config_logging,
    _add_global_operation_flags,
    _add_install_knobs,
    _add_settings_knobs,
)
from .validators import validate_args


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="winprovision",
        description=c("winprovision: Windows task-sequence provisioning", "green", ["bold"]),
        formatter_class=HelpFormatter,
        epilog=_build_epilog(),
    )

    _add_global_config_logging(p)
    _add_global_operation_flags(p)

    _add_copy_knobs(p)
    _add_branding_knobs(p)
    _add_install_knobs(p)
    _add_settings_knobs(p)

    return p


def _build_preparser() -> argparse.ArgumentParser:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("-q", "--quiet", action="count", default=0)
    pre.add_argument("--log-dir", dest="log_dir", default=None)
    pre.add_argument("--json-logs", dest="json_logs", action="store_true")
    pre.add_argument("--no-color", dest="no_color", action="store_true")
    pre.add_argument("--dump-config", action="store_true")
    return pre


def _load_merged_config(logger: Any, cfgs: Sequence[str]) -> Dict[str, Any]:
    if not cfgs:
        return {}
    expanded = Config.expand_configs(logger, list(cfgs))
    return Config.load_many(logger, expanded)


def parse_args_with_config(
    argv: Optional[Sequence[str]] = None,
    logger: Any = None,
) -> Tuple[argparse.Namespace, Dict[str, Any], Any]:
    """
    Flow:
      Phase 0: parse ONLY global flags needed to locate config/logging
      Phase 1: load+merge config files (console-only logger)
      Phase 2: attach the per-run log file (CLI --log-dir, else config log_dir)
      Phase 3: apply config as defaults onto the parser, full parse
      Phase 4: validate
    """
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    parser = build_parser()

    pre = _build_preparser()
    args0, _rest = pre.parse_known_args(argv)

    own_logger = logger is None
    log_kw = dict(
        quiet=args0.quiet,
        color=not args0.no_color,
        json_logs=args0.json_logs,
    )
    if own_logger:
        logger = Log.setup(args0.verbose, **log_kw)

    conf = _load_merged_config(logger, args0.config or [])

    if args0.dump_config:
        print(U.json_dump(conf))
        raise SystemExit(0)

    if own_logger:
        log_dir = args0.log_dir or Config.flatten(conf).get("log_dir") or DEFAULT_LOG_DIR
        try:
            logger = Log.setup(args0.verbose, log_dir, **log_kw)
        except OSError as e:
            raise wrap_fatal(f"Cannot create log directory {log_dir}: {e}", e, code=2, log_dir=str(log_dir))
        logger.info("Log file: %s", Log.log_file_of(logger))

    # Config becomes parser defaults; explicit CLI flags still win.
    Config.apply_as_defaults(logger, parser, conf)

    args = parser.parse_args(argv)

    validate_args(args, conf)
    return args, conf, logger

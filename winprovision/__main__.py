# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/__main__.py
from __future__ import annotations

import sys
import traceback
from typing import Optional, Sequence

from .cli.args import parse_args_with_config
from .config.settings import ProvisionSettings
from .core.exceptions import Fatal, format_exception_for_cli
from .orchestrator.orchestrator import Orchestrator


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Best-effort logging without assuming logger exists or has a given method.
    """
    if logger is None:
        _print_stderr(msg)
        return

    fn = getattr(logger, level, None)
    if callable(fn):
        fn(msg)
    else:
        _print_stderr(msg)


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger: Optional[object] = None

    # Phase 1: parse (Fatal can happen here)
    try:
        args, _conf, logger = parse_args_with_config(argv)
    except Fatal as e:
        _print_stderr(f"💥 ERROR    {format_exception_for_cli(e)}")
        raise SystemExit(e.code)
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(130)

    # Phase 2: run the task sequence; step failures are reported, not propagated
    try:
        Orchestrator(logger, ProvisionSettings.from_args(args)).run()
        rc = 0
    except Fatal as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=getattr(args, "verbose", 0)))
        rc = e.code
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        rc = 130
    except Exception as e:
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        rc = 1

    raise SystemExit(rc)


if __name__ == "__main__":
    main()

# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/mirror/__init__.py
"""Folder mirroring (robocopy) and exit-code classification."""

from .robocopy import (
    MIRROR_FLAGS,
    CopyJob,
    ExitCodeClass,
    MirrorResult,
    Severity,
    classify,
    mirror,
    run_job,
)

__all__ = [
    "MIRROR_FLAGS",
    "CopyJob",
    "ExitCodeClass",
    "MirrorResult",
    "Severity",
    "classify",
    "mirror",
    "run_job",
]

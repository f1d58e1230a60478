# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/core/__init__.py
"""Shared infrastructure: errors, logging, process execution."""

from .exceptions import (
    DestinationUnwritable,
    ExternalToolNonZeroExit,
    Fatal,
    MountFailed,
    SourceMissing,
    UnmountFailed,
    WinProvisionError,
    WriteFailed,
)
from .process import DryRunRunner, ProcessRunner, SubprocessRunner

__all__ = [
    "WinProvisionError",
    "Fatal",
    "SourceMissing",
    "DestinationUnwritable",
    "MountFailed",
    "WriteFailed",
    "UnmountFailed",
    "ExternalToolNonZeroExit",
    "ProcessRunner",
    "SubprocessRunner",
    "DryRunRunner",
]

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/mirror/robocopy.py
"""
Directory mirroring through robocopy.

robocopy reports its outcome as a bitmask exit code:

    bit 0 (1)   one or more files were copied
    bit 1 (2)   extra files/directories present in the destination
    bit 2 (4)   mismatched files/directories detected
    bit 3 (8)   some files could not be copied within the retry budget
    bit 4 (16)  fatal error, nothing copied

Codes below 8 are not failures. This module never raises: every outcome is
returned as a MirrorResult.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from ..core.exceptions import (
    DestinationUnwritable,
    ExternalToolNonZeroExit,
    SourceMissing,
    WinProvisionError,
)
from ..core.process import ProcessRunner
from ..core.utils import U

ROBOCOPY = "robocopy"

# /E recurse incl. empty dirs, /COPY:DATS data+attributes+timestamps+DACL
# (no owner, no auditing), /R:2 /W:5 retry budget, /NP /NFL /NDL /NJH /NJS quiet.
MIRROR_FLAGS: Tuple[str, ...] = (
    "/E",
    "/COPY:DATS",
    "/R:2",
    "/W:5",
    "/NP",
    "/NFL",
    "/NDL",
    "/NJH",
    "/NJS",
)

PathLike = Union[str, Path]


class Severity(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


class ExitCodeClass(Enum):
    NO_CHANGE = "NoChange"
    COPIED = "Copied"
    EXTRA_ITEMS_DETECTED = "ExtraItemsDetected"
    MISMATCH_DETECTED = "MismatchDetected"
    COPY_ERRORS_EXCEEDED_RETRIES = "CopyErrorsExceededRetries"
    FATAL_ERROR = "FatalError"

    @property
    def severity(self) -> Severity:
        return _SEVERITY[self]


_SEVERITY = {
    ExitCodeClass.NO_CHANGE: Severity.SUCCESS,
    ExitCodeClass.COPIED: Severity.SUCCESS,
    ExitCodeClass.EXTRA_ITEMS_DETECTED: Severity.SUCCESS,
    ExitCodeClass.MISMATCH_DETECTED: Severity.WARNING,
    ExitCodeClass.COPY_ERRORS_EXCEEDED_RETRIES: Severity.FAILURE,
    ExitCodeClass.FATAL_ERROR: Severity.FAILURE,
}


def classify(code: int) -> ExitCodeClass:
    """Map a robocopy exit code onto its outcome class."""
    code = int(code)
    if code < 0 or code >= 16:
        return ExitCodeClass.FATAL_ERROR
    if code >= 8:
        return ExitCodeClass.COPY_ERRORS_EXCEEDED_RETRIES
    if code >= 4:
        return ExitCodeClass.MISMATCH_DETECTED
    if code & 1:
        return ExitCodeClass.COPIED
    if code & 2:
        return ExitCodeClass.EXTRA_ITEMS_DETECTED
    return ExitCodeClass.NO_CHANGE


@dataclass(frozen=True)
class CopyJob:
    source: Path
    destination: Path
    log_path: Path
    flags: Tuple[str, ...] = MIRROR_FLAGS

    @classmethod
    def create(cls, source: PathLike, destination: PathLike, log_path: PathLike) -> "CopyJob":
        return cls(Path(source), Path(destination), Path(log_path))

    def command_args(self) -> Tuple[str, ...]:
        return (str(self.source), str(self.destination), *self.flags, f"/LOG:{self.log_path}")


@dataclass
class MirrorResult:
    job: CopyJob
    exit_code: Optional[int] = None
    klass: Optional[ExitCodeClass] = None
    error: Optional[WinProvisionError] = None
    message: str = ""

    @property
    def severity(self) -> Severity:
        if self.klass is not None:
            return self.klass.severity
        return Severity.FAILURE if self.error is not None else Severity.SUCCESS

    @property
    def ok(self) -> bool:
        return self.error is None and self.severity is not Severity.FAILURE


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------


def _check_source(source: Path) -> Optional[SourceMissing]:
    if not source.is_dir():
        return SourceMissing(code=2, msg=f"Mirror source not found: {source}", context={"source": str(source)})
    if not os.access(source, os.R_OK | os.X_OK):
        return SourceMissing(code=2, msg=f"Mirror source not readable: {source}", context={"source": str(source)})
    return None


def _prepare_parent(path: Path, what: str) -> Optional[DestinationUnwritable]:
    parent = path.parent
    try:
        U.ensure_dir(parent)
    except OSError as e:
        return DestinationUnwritable(
            code=3,
            msg=f"Cannot create {what} parent directory {parent}: {e}",
            cause=e,
            context={what: str(path)},
        )
    return None


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def run_job(logger: logging.Logger, runner: ProcessRunner, job: CopyJob) -> MirrorResult:
    result = MirrorResult(job=job)

    err = _check_source(job.source)
    if err is not None:
        result.error = err
        result.message = str(err)
        logger.warning("⚠️  %s; skipping mirror", err)
        return result

    for path, what in ((job.destination, "destination"), (job.log_path, "log")):
        derr = _prepare_parent(path, what)
        if derr is not None:
            result.error = derr
            result.message = str(derr)
            logger.error("💥 %s", derr)
            return result

    logger.info("Mirroring %s -> %s (log: %s)", job.source, job.destination, job.log_path)
    try:
        code = runner.run(ROBOCOPY, job.command_args())
    except OSError as e:
        result.klass = ExitCodeClass.FATAL_ERROR
        result.error = ExternalToolNonZeroExit(code=16, msg=f"Could not start {ROBOCOPY}: {e}", cause=e)
        result.message = str(result.error)
        logger.error("💥 %s", result.message)
        return result

    klass = classify(code)
    result.exit_code = code
    result.klass = klass
    result.message = f"{ROBOCOPY} exit code {code} ({klass.value}): {job.source} -> {job.destination}"

    sev = klass.severity
    if sev is Severity.SUCCESS:
        logger.info("✅ Mirror succeeded: %s", result.message)
    elif sev is Severity.WARNING:
        logger.warning("⚠️  Mirror completed with mismatches: %s", result.message)
    else:
        result.error = ExternalToolNonZeroExit(
            code=code,
            msg=result.message,
            context={"source": str(job.source), "destination": str(job.destination), "log": str(job.log_path)},
        )
        logger.error("💥 Mirror failed: %s (see %s)", result.message, job.log_path)
    return result


def mirror(
    logger: logging.Logger,
    runner: ProcessRunner,
    source: PathLike,
    destination: PathLike,
    log_path: PathLike,
) -> MirrorResult:
    """
    Mirror `source` into `destination` with the fixed robocopy flag set.

    Returns a classified MirrorResult; exit codes >= 8 are reported as
    failures but never raised.
    """
    return run_job(logger, runner, CopyJob.create(source, destination, log_path))

# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/registry/hive.py
"""
Hive-scoped registry mutation.

An on-disk user hive (typically C:\\Users\\Default\\NTUSER.DAT) is loaded
under HKU\\<alias>, written to, and unloaded again. The lifecycle is

    UNMOUNTED -> MOUNTING -> MOUNTED -> WRITING -> UNMOUNTING -> UNMOUNTED

A mount failure returns straight to UNMOUNTED with nothing to clean up. Once a
mount succeeds, unload runs exactly once on every exit path. A failed write
goes from WRITING straight to UNMOUNTING; writes already committed before it
stay committed.

All reg.exe traffic goes through a ProcessRunner.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generator, Iterable, List, Optional, Set, Union

from ..core.exceptions import MountFailed, UnmountFailed, WinProvisionError, WriteFailed
from ..core.process import ProcessRunner
from .encoding import (
    RegistryWrite,
    full_key,
    mount_root,
    reg_add_key_args,
    reg_add_value_args,
    reg_load_args,
    reg_query_args,
    reg_unload_args,
    validate_alias,
)

REG = "reg"

PathLike = Union[str, Path]

# Aliases currently held by a live handle in this process.
_ACTIVE_ALIASES: Set[str] = set()


class HiveState(Enum):
    UNMOUNTED = "unmounted"
    MOUNTING = "mounting"
    MOUNTED = "mounted"
    WRITING = "writing"
    UNMOUNTING = "unmounting"


def _alias_key(alias: str) -> str:
    return alias.lower()


def _reg(runner: ProcessRunner, args: Iterable[str]) -> int:
    return runner.run(REG, list(args))


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


class RegistryHiveHandle:
    """
    Exclusive, temporarily mounted view of a hive file.

    Obtained from mount_hive(); written with set_value(); consumed by unmount(),
    after which every write is rejected.
    """

    def __init__(self, logger: logging.Logger, runner: ProcessRunner, hive_path: Path, alias: str):
        self.logger = logger
        self.runner = runner
        self.hive_path = hive_path
        self.alias = alias
        self.state = HiveState.UNMOUNTED
        self.history: List[HiveState] = [HiveState.UNMOUNTED]
        self.unmount_error: Optional[UnmountFailed] = None
        self._unmount_attempted = False

    def __repr__(self) -> str:
        return f"RegistryHiveHandle(alias={self.alias!r}, hive={str(self.hive_path)!r}, state={self.state.value})"

    @property
    def root(self) -> str:
        return mount_root(self.alias)

    @property
    def is_mounted(self) -> bool:
        return self.state in (HiveState.MOUNTED, HiveState.WRITING)

    def _transition(self, state: HiveState) -> None:
        self.logger.debug("hive %s: %s -> %s", self.alias, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    # -- writes -------------------------------------------------------------

    def _ensure_key(self, key: str) -> None:
        if _reg(self.runner, reg_query_args(key)) == 0:
            return
        self.logger.debug("Creating key %s", key)
        rc = _reg(self.runner, reg_add_key_args(key))
        if rc != 0:
            raise WriteFailed(code=rc, msg=f"reg add failed creating key {key} (exit {rc})", context={"key": key})

    def set_value(self, write: RegistryWrite) -> None:
        """Create the key path if needed, then overwrite the value."""
        if self.state is not HiveState.MOUNTED:
            raise WriteFailed(
                msg=f"hive {self.alias} is not mounted (state={self.state.value})",
                context={"alias": self.alias, "write": write.describe()},
            )

        key = full_key(self.alias, write.key_path)
        self._transition(HiveState.WRITING)
        try:
            self._ensure_key(key)
            rc = _reg(self.runner, reg_add_value_args(key, write))
            if rc != 0:
                raise WriteFailed(
                    code=rc,
                    msg=f"reg add failed for {write.describe()} (exit {rc})",
                    context={"alias": self.alias, "key": key},
                )
        except OSError as e:
            raise WriteFailed(msg=f"could not run {REG} for {write.describe()}: {e}", cause=e) from e

        self._transition(HiveState.MOUNTED)
        self.logger.info("Set %s\\%s = %r (%s)", key, write.value_name, write.data(), write.kind.value)

    # -- release ------------------------------------------------------------

    def unmount(self) -> Optional[UnmountFailed]:
        """
        Unload the hive. Runs the tool at most once per handle; failures are
        logged as warnings and returned, never raised.
        """
        if self._unmount_attempted or self.state is HiveState.UNMOUNTED:
            return self.unmount_error

        self._unmount_attempted = True
        self._transition(HiveState.UNMOUNTING)
        try:
            rc = _reg(self.runner, reg_unload_args(self.alias))
            if rc != 0:
                self.unmount_error = UnmountFailed(
                    code=rc,
                    msg=f"reg unload {self.root} failed (exit {rc})",
                    context={"alias": self.alias, "hive": str(self.hive_path)},
                )
        except OSError as e:
            self.unmount_error = UnmountFailed(msg=f"could not run {REG} unload {self.root}: {e}", cause=e)
        finally:
            _ACTIVE_ALIASES.discard(_alias_key(self.alias))
            self._transition(HiveState.UNMOUNTED)

        if self.unmount_error is not None:
            self.logger.warning("⚠️  %s; hive may still be mounted", self.unmount_error)
        else:
            self.logger.info("Unloaded %s", self.root)
        return self.unmount_error


# ---------------------------------------------------------------------------
# Mount
# ---------------------------------------------------------------------------


def cleanup_stale_mount(logger: logging.Logger, runner: ProcessRunner, alias: str) -> bool:
    """
    Unload a leftover HKU\\<alias> from a crashed earlier run.

    Returns True when nothing is left mounted as far as we can tell. Failures
    are warnings only; the caller mounts anyway.
    """
    root = mount_root(alias)
    try:
        if _reg(runner, reg_query_args(root)) != 0:
            return True
        logger.warning("⚠️  Stale mount found at %s; unloading it first", root)
        rc = _reg(runner, reg_unload_args(alias))
    except OSError as e:
        logger.warning("⚠️  Could not check/clean stale mount %s: %s", root, e)
        return False

    if rc != 0:
        logger.warning("⚠️  Stale mount %s could not be unloaded (exit %d); continuing", root, rc)
        return False
    return True


def mount_hive(logger: logging.Logger, runner: ProcessRunner, hive_path: PathLike, alias: str) -> RegistryHiveHandle:
    """
    Load `hive_path` under HKU\\<alias> and return the owning handle.

    Raises MountFailed; nothing is left to clean up in that case.
    """
    try:
        alias = validate_alias(alias)
    except ValueError as e:
        raise MountFailed(code=2, msg=f"invalid mount alias {alias!r}: {e}", cause=e, context={"alias": alias}) from e
    path = Path(hive_path)
    handle = RegistryHiveHandle(logger, runner, path, alias)

    if _alias_key(alias) in _ACTIVE_ALIASES:
        raise MountFailed(msg=f"mount alias {alias} is already in use", context={"alias": alias})

    if not path.is_file():
        raise MountFailed(code=2, msg=f"hive file not found: {path}", context={"alias": alias})

    cleanup_stale_mount(logger, runner, alias)

    handle._transition(HiveState.MOUNTING)
    try:
        rc = _reg(runner, reg_load_args(alias, str(path)))
    except OSError as e:
        handle._transition(HiveState.UNMOUNTED)
        raise MountFailed(msg=f"could not run {REG} load for {path}: {e}", cause=e) from e

    if rc != 0:
        handle._transition(HiveState.UNMOUNTED)
        raise MountFailed(
            code=rc,
            msg=f"reg load {mount_root(alias)} {path} failed (exit {rc})",
            context={"alias": alias, "hive": str(path)},
        )

    _ACTIVE_ALIASES.add(_alias_key(alias))
    handle._transition(HiveState.MOUNTED)
    logger.info("Loaded %s at %s", path, handle.root)
    return handle


@contextmanager
def mounted_hive(
    logger: logging.Logger, runner: ProcessRunner, hive_path: PathLike, alias: str
) -> Generator[RegistryHiveHandle, None, None]:
    """Scoped mount: the hive is unloaded on every exit path."""
    handle = mount_hive(logger, runner, hive_path, alias)
    try:
        yield handle
    finally:
        handle.unmount()


# ---------------------------------------------------------------------------
# One-shot mutation
# ---------------------------------------------------------------------------


@dataclass
class MutationResult:
    hive_path: str
    alias: str
    applied: List[RegistryWrite] = field(default_factory=list)
    error: Optional[WinProvisionError] = None
    unmount_error: Optional[UnmountFailed] = None
    mounted: bool = False
    states: List[HiveState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def with_mounted_hive(
    logger: logging.Logger,
    runner: ProcessRunner,
    hive_path: PathLike,
    alias: str,
    writes: Iterable[RegistryWrite],
) -> MutationResult:
    """
    Mount, apply `writes` in order, unmount. Never raises for registry errors:
    MountFailed / WriteFailed end up in `result.error`, an unload failure in
    `result.unmount_error`.
    """
    result = MutationResult(hive_path=str(hive_path), alias=alias)
    todo = list(writes)
    handle: Optional[RegistryHiveHandle] = None

    try:
        with mounted_hive(logger, runner, hive_path, alias) as handle:
            result.mounted = True
            try:
                for w in todo:
                    handle.set_value(w)
                    result.applied.append(w)
            except WriteFailed as e:
                result.error = e
                logger.error(
                    "💥 %s (%d of %d writes applied before the failure)", e, len(result.applied), len(todo)
                )
    except MountFailed as e:
        result.error = e
        logger.error("💥 Mount failed: %s", e)
    finally:
        if handle is not None:
            result.unmount_error = handle.unmount_error
            result.states = list(handle.history)

    return result

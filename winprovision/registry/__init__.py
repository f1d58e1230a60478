# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/registry/__init__.py
"""
Offline user-hive editing through reg.exe.

- encoding: value kinds, RegistryWrite, reg.exe argument builders
- hive: mount/write/unmount lifecycle (RegistryHiveHandle, with_mounted_hive)
"""

from .encoding import RegistryWrite, ValueKind
from .hive import (
    HiveState,
    MutationResult,
    RegistryHiveHandle,
    cleanup_stale_mount,
    mount_hive,
    mounted_hive,
    with_mounted_hive,
)

__all__ = [
    "RegistryWrite",
    "ValueKind",
    "HiveState",
    "MutationResult",
    "RegistryHiveHandle",
    "cleanup_stale_mount",
    "mount_hive",
    "mounted_hive",
    "with_mounted_hive",
]

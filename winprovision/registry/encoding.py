# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# winprovision/registry/encoding.py
"""
Registry write descriptions and their reg.exe encoding.

Provides:
- ValueKind (REG_SZ / REG_DWORD)
- RegistryWrite, a validated, immutable key/value write
- Key path normalization and HKU mount-root helpers
- reg.exe argument builders for query/add/load/unload
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

MOUNT_ROOT = "HKU"
DWORD_MAX = 0xFFFFFFFF

# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------


class ValueKind(Enum):
    STRING = "REG_SZ"
    DWORD = "REG_DWORD"


# ---------------------------------------------------------------------------
# Key path normalization
# ---------------------------------------------------------------------------


def key_segments(path: str) -> List[str]:
    """Split a registry key path into segments (accepts / or \\ separators)."""
    raw = str(path or "").replace("/", "\\").strip("\\")
    if not raw:
        raise ValueError("registry key path is empty")
    parts = raw.split("\\")
    for p in parts:
        if not p.strip():
            raise ValueError(f"registry key path has an empty segment: {path!r}")
        if p.strip() in (".", ".."):
            raise ValueError(f"registry key path may not contain '..' or '.': {path!r}")
        if "\x00" in p:
            raise ValueError(f"registry key path contains a null byte: {path!r}")
    return parts


def normalize_key_path(path: str) -> str:
    return "\\".join(key_segments(path))


def validate_alias(alias: str) -> str:
    a = str(alias or "").strip()
    if not a:
        raise ValueError("mount alias is empty")
    if "\\" in a or "/" in a:
        raise ValueError(f"mount alias must be a single key name: {alias!r}")
    return a


def mount_root(alias: str) -> str:
    """HKU\\<alias>, the key a hive is attached under while mounted."""
    return f"{MOUNT_ROOT}\\{validate_alias(alias)}"


def full_key(alias: str, key_path: str) -> str:
    return f"{mount_root(alias)}\\{normalize_key_path(key_path)}"


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

Payload = Union[str, int]


@dataclass(frozen=True)
class RegistryWrite:
    """
    One unconditional value write, relative to the mounted hive root.

    Re-applying the same write leaves the hive in the same state.
    """
    key_path: str
    value_name: str
    payload: Payload
    kind: ValueKind = ValueKind.STRING

    def __post_init__(self) -> None:
        object.__setattr__(self, "key_path", normalize_key_path(self.key_path))
        if not isinstance(self.kind, ValueKind):
            object.__setattr__(self, "kind", ValueKind(self.kind))
        if self.kind is ValueKind.DWORD:
            if isinstance(self.payload, bool) or not isinstance(self.payload, int):
                raise ValueError(f"REG_DWORD payload must be an int: {self.payload!r}")
            if not 0 <= self.payload <= DWORD_MAX:
                raise ValueError(f"REG_DWORD payload out of range: {self.payload}")
        else:
            if not isinstance(self.payload, str):
                raise ValueError(f"REG_SZ payload must be a str: {self.payload!r}")
            if "\x00" in self.payload:
                raise ValueError("REG_SZ payload contains a null byte")

    @classmethod
    def sz(cls, key_path: str, value_name: str, value: str) -> "RegistryWrite":
        return cls(key_path, value_name, value, ValueKind.STRING)

    @classmethod
    def dword(cls, key_path: str, value_name: str, value: int) -> "RegistryWrite":
        return cls(key_path, value_name, value, ValueKind.DWORD)

    def data(self) -> str:
        """Payload as reg.exe /d text (decimal for REG_DWORD)."""
        if self.kind is ValueKind.DWORD:
            return str(int(self.payload))
        return str(self.payload)

    def describe(self) -> str:
        return f"{self.key_path}\\{self.value_name}={self.data()!r} ({self.kind.value})"


# ---------------------------------------------------------------------------
# reg.exe argument builders
# ---------------------------------------------------------------------------


def reg_query_args(key: str) -> Tuple[str, ...]:
    return ("query", key)


def reg_load_args(alias: str, hive_file: str) -> Tuple[str, ...]:
    return ("load", mount_root(alias), str(hive_file))


def reg_unload_args(alias: str) -> Tuple[str, ...]:
    return ("unload", mount_root(alias))


def reg_add_key_args(key: str) -> Tuple[str, ...]:
    return ("add", key, "/f")


def reg_add_value_args(key: str, write: RegistryWrite) -> Tuple[str, ...]:
    return ("add", key, "/v", write.value_name, "/t", write.kind.value, "/d", write.data(), "/f")

# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

_REDACTED = "***REDACTED***"


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    # Process exit codes are 0..255.
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


_SECRET_KEY_PARTS = (
    "pass",
    "password",
    "secret",
    "token",
    "apikey",
    "api_key",
    "auth",
    "credential",
    "private",
)


def _is_secret_key(k: str) -> bool:
    ks = (k or "").lower()
    return any(p in ks for p in _SECRET_KEY_PARTS)


def _redact(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: (_REDACTED if _is_secret_key(str(k)) else _redact(v)) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_redact(v) for v in obj]
    return obj


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    parts = []
    for k in sorted(ctx.keys(), key=str):
        v = ctx.get(k)
        if _is_secret_key(str(k)):
            parts.append(f"{k}=<redacted>")
        else:
            parts.append(f"{k}={v!r}")
    return ", ".join(parts)


@dataclass(eq=False)
class WinProvisionError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what the task-sequence log shows)
      - safe code handling (never crashes on int())
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "WinProvisionError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        base = self.msg or self.__class__.__name__
        parts = [base]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context))}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message(include_context=False, include_cause=False)

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": _redact(dict(self.context or {})),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


class Fatal(WinProvisionError):
    """
    User-facing fatal error (exit code is honored by top-level main()).
    Only raised before the orchestrator starts, e.g. for unusable configuration.
    """
    pass


class SourceMissing(WinProvisionError):
    """Mirror source directory does not exist or cannot be read."""
    pass


class DestinationUnwritable(WinProvisionError):
    """Mirror destination parent (or its log directory) could not be created."""
    pass


class MountFailed(WinProvisionError):
    """Loading a hive file under its mount alias failed."""
    pass


class WriteFailed(WinProvisionError):
    """A key/value write against a mounted hive failed."""
    pass


class UnmountFailed(WinProvisionError):
    """Unloading a mounted hive failed (best-effort cleanup)."""
    pass


class ExternalToolNonZeroExit(WinProvisionError):
    """An external tool reported failure through its exit code."""
    pass


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 1, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context or None)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, WinProvisionError):
        return e.user_message(
            include_context=(verbose >= 1),
            include_cause=(verbose >= 2),
        )

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__

# SPDX-License-Identifier: LGPL-3.0-or-later
# winprovision/core/logger.py
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TextIO, Union

from termcolor import colored as _colored

# ---------------------------------------------------------------------------
# TRACE level (additive)
# ---------------------------------------------------------------------------

TRACE = 5
if not hasattr(logging, "TRACE"):
    logging.TRACE = TRACE  # type: ignore[attr-defined]
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

_LEVEL_EMOJI = {
    "TRACE": "🧬",
    "DEBUG": "🔍",
    "INFO": "✅",
    "WARNING": "⚠️",
    "ERROR": "💥",
    "CRITICAL": "🧨",
}
_LEVEL_COLOR = {
    "TRACE": "cyan",
    "DEBUG": "blue",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}

# Task-sequence logs are read by people grepping for these tokens.
_LEVEL_LABEL = {
    "WARNING": "WARN",
}

LOG_FILE_PREFIX = "winprovision"


def _is_tty(stream: TextIO) -> bool:
    try:
        return bool(stream.isatty())
    except Exception:
        return False


def _supports_unicode(stream: TextIO) -> bool:
    """
    Best-effort check: if the stream encoding can't handle emoji, degrade gracefully.
    Console hosts inside WinPE / task sequences frequently run cp437.
    """
    try:
        enc = getattr(stream, "encoding", None) or "utf-8"
        "✅".encode(enc)
        return True
    except Exception:
        return False


def c(
    text: str,
    color: Optional[str] = None,
    attrs: Optional[List[str]] = None,
    *,
    enable: bool = True,
) -> str:
    """Colorize text with termcolor when enabled."""
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------

Ctx = Mapping[str, Any]


def _safe_str(v: Any, *, max_len: int = 240) -> str:
    try:
        s = str(v)
    except Exception:
        s = repr(v)
    s = s.replace("\n", "\\n").replace("\r", "\\r")
    if len(s) > max_len:
        s = s[: max_len - 1] + "…"
    return s


def _format_ctx_kv(ctx: Optional[Ctx]) -> str:
    if not ctx:
        return ""
    items = sorted(ctx.items(), key=lambda kv: str(kv[0]))
    parts = [f"{_safe_str(k, max_len=80)}={_safe_str(v)}" for k, v in items]
    return " " + " ".join(parts) if parts else ""


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogStyle:
    color: bool = True
    show_date: bool = True
    show_ms: bool = False
    show_src: bool = False  # module:line
    show_pid: bool = False
    show_logger: bool = False
    utc: bool = False
    indent_exceptions: bool = True
    exception_indent: int = 2
    align_level: int = 5  # INFO/WARN/ERROR
    unicode: bool = True


class EmojiFormatter(logging.Formatter):
    def __init__(self, style: LogStyle, stream: Optional[TextIO] = None):
        super().__init__()
        self._style = style
        self._stream = stream

    def _now(self, created: float) -> str:
        dt = (
            _dt.datetime.fromtimestamp(created, tz=_dt.timezone.utc)
            if self._style.utc
            else _dt.datetime.fromtimestamp(created)
        )
        fmt = "%Y-%m-%d %H:%M:%S" if self._style.show_date else "%H:%M:%S"
        s = dt.strftime(fmt)
        if self._style.show_ms:
            s += f".{dt.microsecond // 1000:03d}"
        return s

    def _emoji(self, levelname: str) -> str:
        if not self._style.unicode:
            return "·"
        return _LEVEL_EMOJI.get(levelname, "•")

    def _prefix_bits(self, record: logging.LogRecord) -> str:
        bits: List[str] = []
        if self._style.show_pid:
            bits.append(f"pid={os.getpid()}")
        if self._style.show_logger:
            bits.append(record.name)
        if self._style.show_src:
            bits.append(f"{record.module}:{record.lineno}")
        return (" [" + " ".join(bits) + "]") if bits else ""

    def _format_exception_block(self, record: logging.LogRecord, color_ok: bool) -> str:
        exc_text = self.formatException(record.exc_info) if record.exc_info else ""
        stack_text = record.stack_info if getattr(record, "stack_info", None) else ""
        if not exc_text and not stack_text:
            return ""

        block_text = "\n".join(p for p in (exc_text, stack_text) if p)

        if not self._style.indent_exceptions:
            out = "\n" + block_text
            return c(out, "red", enable=color_ok and bool(exc_text))

        indent = " " * max(0, int(self._style.exception_indent))
        indented = "\n".join(indent + ln for ln in block_text.splitlines())
        return "\n" + c(indented, "red", enable=color_ok and bool(exc_text))

    def format(self, record: logging.LogRecord) -> str:
        ts = self._now(record.created)
        emoji = self._emoji(record.levelname)

        lvl = _LEVEL_LABEL.get(record.levelname, record.levelname)
        msg = record.getMessage()

        color_ok = bool(self._style.color and self._stream is not None and _is_tty(self._stream))

        lvl_out = c(f"{lvl:<{self._style.align_level}}", _LEVEL_COLOR.get(record.levelname), enable=color_ok)
        if record.levelno >= logging.WARNING:
            msg = c(msg, _LEVEL_COLOR.get(record.levelname), attrs=["bold"], enable=color_ok)

        ctx_s = _format_ctx_kv(getattr(record, "ctx", None))

        line = f"{ts} {emoji} {lvl_out}{self._prefix_bits(record)} {msg}{ctx_s}"
        line += self._format_exception_block(record, color_ok)
        return line


class JsonFormatter(logging.Formatter):
    """
    NDJSON formatter (one JSON object per line) for log collection from
    task-sequence hosts.
    """

    def __init__(self, *, utc: bool = True, include_src: bool = True):
        super().__init__()
        self._utc = bool(utc)
        self._include_src = bool(include_src)

    def _iso(self, created: float) -> str:
        dt = _dt.datetime.fromtimestamp(created, tz=_dt.timezone.utc) if self._utc else _dt.datetime.fromtimestamp(created)
        return dt.isoformat(timespec="milliseconds")

    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": self._iso(record.created),
            "level": _LEVEL_LABEL.get(record.levelname, record.levelname),
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
        }
        if self._include_src:
            obj.update({"module": record.module, "lineno": record.lineno})

        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = {str(k): _safe_str(v) for k, v in dict(ctx).items()}

        if record.exc_info:
            et = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            obj["exc_type"] = et
            obj["traceback"] = self.formatException(record.exc_info)

        return json.dumps(obj, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        """
        CLI mapping:
          default / -v: INFO
          -vv: DEBUG
          -vvv: TRACE
          -q: WARNING, -qq: ERROR
        Quiet wins over verbose if both are set.
        """
        if quiet >= 2:
            return logging.ERROR
        if quiet == 1:
            return logging.WARNING
        if verbose >= 3:
            return TRACE
        if verbose >= 2:
            return logging.DEBUG
        return logging.INFO

    @staticmethod
    def log_path_for(log_dir: Union[str, Path], *, prefix: str = LOG_FILE_PREFIX, now: Optional[_dt.datetime] = None) -> Path:
        """Per-invocation log file: <log_dir>/<prefix>-YYYYmmdd-HHMMSS.log"""
        ts = (now or _dt.datetime.now()).strftime("%Y%m%d-%H%M%S")
        return Path(log_dir) / f"{prefix}-{ts}.log"

    @staticmethod
    def banner(logger: logging.Logger, title: str, *, char: str = "─") -> None:
        width = 72
        t = f" {title.strip()} "
        side = char * max(8, (width - len(t)) // 2)
        logger.info((side + t + side)[:width])

    @staticmethod
    def step(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("➡️  %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def ok(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("✅ %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def warn(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.warning("⚠️  %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def fail(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.error("💥 %s", msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def setup(
        verbose: int = 0,
        log_dir: Optional[Union[str, Path]] = None,
        *,
        log_file: Optional[Union[str, Path]] = None,
        quiet: int = 0,
        color: bool = True,
        utc: bool = False,
        logger_name: str = "winprovision",
        json_logs: bool = False,
        stream: Optional[TextIO] = None,
    ) -> logging.Logger:
        """
        Configure and return the run's logger.

        - Console lines go to stdout (task sequence engines capture it).
        - log_dir creates a fresh timestamped file per invocation;
          log_file pins an explicit path instead.
        - json_logs=True emits NDJSON on both handlers.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False

        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        out = stream if stream is not None else sys.stdout
        unicode_ok = _supports_unicode(out)

        style = LogStyle(
            color=bool(color),
            show_ms=bool(verbose >= 3),
            show_src=bool(verbose >= 3),
            show_pid=bool(verbose >= 2),
            utc=bool(utc),
            unicode=bool(unicode_ok),
        )

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        sh = logging.StreamHandler(stream=out)
        sh.setLevel(level)
        if json_logs:
            sh.setFormatter(JsonFormatter(utc=bool(utc), include_src=True))
        else:
            sh.setFormatter(EmojiFormatter(style, stream=out))
        logger.addHandler(sh)

        fp: Optional[Path] = None
        if log_file:
            fp = Path(log_file).expanduser()
        elif log_dir:
            fp = Log.log_path_for(Path(log_dir).expanduser())

        if fp is not None:
            fp.parent.mkdir(parents=True, exist_ok=True)
            if json_logs:
                fh_fmt: logging.Formatter = JsonFormatter(utc=bool(utc), include_src=True)
            else:
                file_style = LogStyle(
                    color=False,
                    show_ms=True,
                    show_src=True,
                    show_pid=True,
                    show_logger=True,
                    utc=style.utc,
                    unicode=True,
                )
                fh_fmt = EmojiFormatter(file_style)

            fh = logging.FileHandler(fp, mode="a", encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(fh_fmt)
            logger.addHandler(fh)

        logger.debug("Logger initialized (level=%s, pid=%s, file=%s)", logging.getLevelName(level), os.getpid(), fp)
        return logger

    @staticmethod
    def log_file_of(logger: logging.Logger) -> Optional[Path]:
        """Path of the first file handler attached to logger, if any."""
        for h in getattr(logger, "handlers", []):
            if isinstance(h, logging.FileHandler):
                return Path(h.baseFilename)
        return None

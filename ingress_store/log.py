"""Levelled logger that prints timestamped lines with an optional call site."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from functools import cache
from pathlib import Path
from typing import Any, TextIO

_ROOT_DIRS = frozenset({"controller", "ingress_store"})

_SILENCED_WARNINGS = (
    "use core.haproxy.org/v1alpha2 Defaults",
    "use core.haproxy.org/v1alpha2 Global",
    "use core.haproxy.org/v1alpha2 Backend",
)


class LogLevel(IntEnum):
    PANIC = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6


def _format(fmt: str, args: tuple[Any, ...]) -> str:
    return fmt % args if args else fmt


def _panic_exception(value: Any, message: str) -> BaseException:
    if isinstance(value, BaseException):
        return value
    return RuntimeError(message)


@dataclass
class Logger:
    """Writes messages whose level is within ``level``; errors always print."""

    level: LogLevel = LogLevel.WARNING
    filename: bool = True
    stream: TextIO | None = None

    def set_level(self, level: LogLevel) -> None:
        self.level = LogLevel(level)

    def show_filename(self, show: bool) -> None:
        self.filename = show

    @staticmethod
    def _caller() -> str | None:
        # frames: _caller, _emit, public method, user code
        try:
            frame = sys._getframe(3)
        except ValueError:
            return None
        path = Path(frame.f_code.co_filename)
        parent = path.parent.name
        if not parent or parent in _ROOT_DIRS:
            name = path.name
        else:
            name = f"{parent}/{path.name}"
        return f"{name}:{frame.f_lineno}"

    def _emit(self, prefix: str, messages: list[str]) -> None:
        location = None
        if self.filename:
            location = self._caller()
            if location is None:
                return
        out = self.stream if self.stream is not None else sys.stderr
        stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
        for message in messages:
            if location is None:
                line = f"{prefix}{message}"
            else:
                line = f"{prefix}{location} {message}"
            out.write(f"{stamp} {line}\n")

    @staticmethod
    def _present(args: tuple[Any, ...]) -> list[str]:
        return [str(arg) for arg in args if arg is not None]

    def print(self, *args: Any) -> None:
        self._emit("", self._present(args))

    def printf(self, fmt: str, *args: Any) -> None:
        self._emit("", [_format(fmt, args)])

    def trace(self, *args: Any) -> None:
        if self.level >= LogLevel.TRACE:
            self._emit("TRACE   ", self._present(args))

    def tracef(self, fmt: str, *args: Any) -> None:
        if self.level >= LogLevel.TRACE:
            self._emit("TRACE   ", [_format(fmt, args)])

    def debug(self, *args: Any) -> None:
        if self.level >= LogLevel.DEBUG:
            self._emit("DEBUG   ", self._present(args))

    def debugf(self, fmt: str, *args: Any) -> None:
        if self.level >= LogLevel.DEBUG:
            self._emit("DEBUG   ", [_format(fmt, args)])

    def info(self, *args: Any) -> None:
        if self.level >= LogLevel.INFO:
            self._emit("INFO    ", self._present(args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self.level >= LogLevel.INFO:
            self._emit("INFO    ", [_format(fmt, args)])

    def warning(self, *args: Any) -> None:
        if self.level >= LogLevel.WARNING:
            self._emit("WARNING ", self._present(args))

    def warningf(self, fmt: str, *args: Any) -> None:
        if self.level >= LogLevel.WARNING:
            self._emit("WARNING ", [_format(fmt, args)])

    def error(self, *args: Any) -> None:
        self._emit("ERROR   ", self._present(args))

    def errorf(self, fmt: str, *args: Any) -> None:
        self._emit("ERROR   ", [_format(fmt, args)])

    def err(self, *args: Any) -> list[BaseException]:
        """Log the arguments as errors and return those that are exceptions."""
        self._emit("ERROR   ", self._present(args))
        return [arg for arg in args if isinstance(arg, BaseException)]

    def panic(self, *args: Any) -> None:
        """Log the arguments, then raise for the first one that is not None."""
        self._emit("PANIC   ", self._present(args))
        for value in args:
            if value is not None:
                raise _panic_exception(value, str(value))

    def panicf(self, fmt: str, *args: Any) -> None:
        line = _format(fmt, args)
        self._emit("PANIC   ", [line])
        for value in args:
            if value is not None:
                raise _panic_exception(value, line)

    def handle_warning_header(self, code: int, agent: str, text: str) -> None:
        """Log a warning header from the API server, skipping known deprecations."""
        if code == 299 and any(phrase in text for phrase in _SILENCED_WARNINGS):
            return
        self._emit("K8s API ", [f" {code} {agent} {text}"])


@cache
def get_logger() -> Logger:
    """Return the shared application logger."""
    return Logger(level=LogLevel.WARNING, filename=True)


@cache
def get_k8s_api_logger() -> Logger:
    """Return the shared logger for API server messages."""
    return Logger(level=LogLevel.TRACE, filename=True)
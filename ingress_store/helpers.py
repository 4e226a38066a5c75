"""Small parsing and comparison helpers."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from .log import get_logger

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

_FNV128_OFFSET = 0x6C62272E07BB014262B821756295C58D
_FNV128_PRIME = 0x0000000001000000000000000000013B
_MASK128 = (1 << 128) - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_TIME_UNITS = (
    ("ms", 1),
    ("s", 1000),
    ("m", 1000 * 60),
    ("h", 1000 * 60 * 60),
    ("d", 1000 * 60 * 60 * 24),
)
_SIZE_UNITS = (
    ("k", 1024),
    ("m", 1024 * 1024),
    ("g", 1024 * 1024 * 1024),
)


def home_dir() -> str:
    """Return the user's home directory from the environment."""
    return os.environ.get("HOME") or os.environ.get("USERPROFILE", "")


def hash_bytes(data: bytes) -> str:
    """Return the 128-bit FNV-1a hash of ``data`` as hex."""
    value = _FNV128_OFFSET
    for byte in data:
        value ^= byte
        value = (value * _FNV128_PRIME) & _MASK128
    return value.to_bytes(16, "big").hex()


def _parse_int64(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def parse_int(data: str) -> int:
    """Parse a plain decimal integer."""
    return _parse_int64(data)


def _parse_with_units(text: str, units: Iterable[tuple[str, int]]) -> int:
    for suffix, factor in units:
        if text.endswith(suffix):
            return _parse_int64(text[: -len(suffix)]) * factor
    return _parse_int64(text)


def parse_time(data: str) -> int:
    """Parse a duration with an optional ms/s/m/h/d suffix into milliseconds."""
    return _parse_with_units(data, _TIME_UNITS)


def parse_size(size: str) -> int:
    """Parse a size with an optional k/m/g suffix into bytes."""
    return _parse_with_units(size, _SIZE_UNITS)


def get_bool_value(value: str, name: str) -> bool:
    """Parse a boolean, accepting deprecated enabled/on/disabled/off words."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    lowered = value.lower()
    if lowered in ("enabled", "on", "disabled", "off"):
        get_logger().warningf('%s - [%s] is DEPRECATED, use "true" or "false"', name, value)
        return lowered in ("enabled", "on")
    raise ValueError(f"invalid boolean value {value!r} for {name}")


def get_pod_prefix(pod_name: str) -> str:
    """Return the pod name without its last two dash-separated parts."""
    last = pod_name.rfind("-")
    if last == -1:
        raise ValueError(f"incorrect podName format: '{pod_name}'")
    previous = pod_name[:last].rfind("-")
    if previous == -1:
        raise ValueError(f"incorrect podName format: '{pod_name}'")
    return pod_name[:previous]


def equal_slice_strings_without_order(a: Sequence[str] | None, b: Sequence[str] | None) -> bool:
    """Tell whether two lists have equal length and every item of ``b`` is in ``a``."""
    a = a or []
    b = b or []
    if len(a) != len(b):
        return False
    present = set(a)
    return all(value in present for value in b)


def copy_map(mapping: Mapping[K, V] | None) -> dict[K, V]:
    """Return a shallow copy of a mapping."""
    return dict(mapping or {})


def copy_map_of_map(mapping: Mapping[K, Mapping[Any, Any]] | None) -> dict[K, dict[Any, Any]]:
    """Return a copy of a mapping of mappings, copying the inner mappings too."""
    return {key: dict(inner) for key, inner in (mapping or {}).items()}


def equal_slice_by_id_func(a: Sequence[T], b: Sequence[T], key: Callable[[T], str]) -> bool:
    """Compare two sequences by identifier, ignoring order and duplicates."""
    if len(a) != len(b):
        return False
    ids = {key(value) for value in a}
    return all(key(value) in ids for value in b)
"""Command-line options of the controller and their value types."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta

from .log import LogLevel

_LOG_LEVELS = {
    "trace": LogLevel.TRACE,
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warning": LogLevel.WARNING,
    "error": LogLevel.ERROR,
}

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


@dataclass
class NamespaceValue:
    """A ``namespace/name`` pair given on the command line."""

    namespace: str = ""
    name: str = ""

    def unmarshal_flag(self, value: str) -> None:
        """Set namespace and name from ``namespace/name``."""
        parts = value.split("/")
        if len(parts) != 2:
            raise ValueError("expected two strings separated by a /")
        self.namespace, self.name = parts

    def marshal_flag(self) -> str:
        return f"{self.namespace}/{self.name}"

    def __str__(self) -> str:
        if not self.namespace or not self.name:
            return ""
        return f"{self.namespace}/{self.name}"


@dataclass
class LogLevelValue:
    """A log level given by name on the command line."""

    log_level: LogLevel = LogLevel.INFO

    def unmarshal_flag(self, value: str) -> None:
        """Set the level from one of trace, debug, info, warning, error."""
        try:
            self.log_level = _LOG_LEVELS[value]
        except KeyError:
            raise ValueError(f"value {value} not permitted") from None


@dataclass
class OSArgs:
    """Arguments that can be given to the controller."""

    configmap_patternfiles: NamespaceValue = field(default_factory=NamespaceValue)
    configmap_tcp_services: NamespaceValue = field(default_factory=NamespaceValue)
    default_backend_service: NamespaceValue = field(default_factory=NamespaceValue)
    configmap_errorfiles: NamespaceValue = field(default_factory=NamespaceValue)
    default_ssl_certificate: NamespaceValue = field(default_factory=NamespaceValue)
    configmap: NamespaceValue = field(default_factory=NamespaceValue)
    ipv6_bind_address: str = "::"
    gateway_controller_name: str = ""
    ipv4_bind_address: str = "0.0.0.0"
    runtime_dir: str = ""
    ingress_class: str = ""
    publish_service: str = ""
    config_dir: str = ""
    program: str = ""
    kubeconfig: str = ""
    version: int = 0
    namespace_whitelist: list[str] = field(default_factory=list)
    namespace_blacklist: list[str] = field(default_factory=list)
    help: int = 0
    localpeer_port: int = 10000
    stats_bind_port: int = 1024
    default_backend_port: int = 6061
    channel_size: int = 0
    controller_port: int = 0
    http_bind_port: int = 80
    https_bind_port: int = 443
    sync_period: timedelta = timedelta(seconds=5)
    cache_resync_period: timedelta = timedelta(minutes=10)
    healthz_bind_port: int = 1042
    log: LogLevelValue = field(default_factory=LogLevelValue)
    disable_ipv4: bool = False
    external: bool = False
    test: bool = False
    empty_ingress_class: bool = False
    disable_service_external_name: bool = False
    with_s6_overlay: bool = False
    disable_https: bool = False
    pprof: bool = False
    prometheus: bool = False
    disable_http: bool = False
    disable_ipv6: bool = False
    disable_config_snippets: str = ""
    with_pebble: bool = False


def _namespace_value(text: str) -> NamespaceValue:
    value = NamespaceValue()
    value.unmarshal_flag(text)
    return value


def _log_level_value(text: str) -> LogLevelValue:
    value = LogLevelValue()
    value.unmarshal_flag(text)
    return value


def _duration(text: str) -> timedelta:
    """Parse a duration such as ``5s``, ``10m`` or ``1h30m``."""
    body = text
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")
    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(body):
        if match.start() != position:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(body):
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(seconds=sign * total)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise ValueError(message)


def _build_parser() -> _Parser:
    parser = _Parser(add_help=False, argument_default=argparse.SUPPRESS)
    add = parser.add_argument

    for option in (
        "configmap-patternfiles",
        "configmap-tcp-services",
        "default-backend-service",
        "configmap-errorfiles",
        "default-ssl-certificate",
        "configmap",
    ):
        add(f"--{option}", dest=option.replace("-", "_"), type=_namespace_value)

    for option in (
        "ipv6-bind-address",
        "gateway-controller-name",
        "ipv4-bind-address",
        "runtime-dir",
        "publish-service",
        "config-dir",
        "program",
        "kubeconfig",
        "disable-config-snippets",
    ):
        add(f"--{option}", dest=option.replace("-", "_"))
    add("--ingress.class", dest="ingress_class")

    add("-v", "--version", dest="version", action="count")
    add("-h", "--help", dest="help", action="count")
    add("--namespace-whitelist", dest="namespace_whitelist", action="append")
    add("--namespace-blacklist", dest="namespace_blacklist", action="append")

    for option in (
        "localpeer-port",
        "stats-bind-port",
        "default-backend-port",
        "channel-size",
        "controller-port",
        "http-bind-port",
        "https-bind-port",
        "healthz-bind-port",
    ):
        add(f"--{option}", dest=option.replace("-", "_"), type=int)

    add("--sync-period", dest="sync_period", type=_duration)
    add("--cache-resync-period", dest="cache_resync_period", type=_duration)
    add("--log", dest="log", type=_log_level_value)

    add("-e", "--external", dest="external", action="store_true")
    add("-t", dest="test", action="store_true")
    add("-p", "--pprof", dest="pprof", action="store_true")
    add("--with-s6-overlay", dest="with_s6_overlay", action="store_true")
    add("--with-pebble", dest="with_pebble", action="store_true")
    for option in (
        "disable-ipv4",
        "empty-ingress-class",
        "disable-service-external-name",
        "disable-https",
        "prometheus",
        "disable-http",
        "disable-ipv6",
    ):
        add(f"--{option}", dest=option.replace("-", "_"), action="store_true")
    return parser


def parse_os_args(argv: Sequence[str] | None = None) -> OSArgs:
    """Parse controller arguments; raise ValueError on bad input."""
    if argv is None:
        argv = sys.argv[1:]
    namespace = _build_parser().parse_args(list(argv))
    return OSArgs(**vars(namespace))
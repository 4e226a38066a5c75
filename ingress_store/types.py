"""Resource records kept in the store and the rules for comparing them."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from .errors import ErrorList
from .helpers import equal_slice_strings_without_order
from .status import Status

T = TypeVar("T")

TCP_PROTOCOL_TYPE = "TCP"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def equal_optional(a: Any, b: Any) -> bool:
    """Compare two optional values.

    Two ``None`` are equal, one ``None`` is not; otherwise the values are
    compared with their ``equal`` method when they have one, else with ``==``.
    """
    if a is None or b is None:
        return a is None and b is None
    equal = getattr(a, "equal", None)
    if callable(equal):
        return bool(equal(b))
    return a == b


def _equal_map(a: Mapping[str, str] | None, b: Mapping[str, str] | None) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if len(a) != len(b):
        return False
    return all(b.get(key, "") == value for key, value in a.items())


def _same_annotations(a: Mapping[str, str] | None, b: Mapping[str, str] | None) -> bool:
    a = a or {}
    b = b or {}
    if len(a) != len(b):
        return False
    return all(b.get(key, "") == value for key, value in a.items())


def _equal_sequence(a: Sequence[Any], b: Sequence[Any]) -> bool:
    if len(a) != len(b):
        return False
    return all(x.equal(y) for x, y in zip(a, b))


def _equal_keyed(
    a: Sequence[T],
    b: Sequence[T],
    key: Callable[[T], str],
    empty: Callable[[], T],
) -> bool:
    """Match items by key in both directions, a missing item being ``empty()``."""
    if len(a) != len(b):
        return False
    by_key_a = {key(item): item for item in a}
    by_key_b = {key(item): item for item in b}
    for name, item in by_key_a.items():
        if not by_key_b.get(name, empty()).equal(item):  # type: ignore[attr-defined]
            return False
    for name, item in by_key_b.items():
        if not by_key_a.get(name, empty()).equal(item):  # type: ignore[attr-defined]
            return False
    return True


@dataclass
class ServicePort:
    """Protocol and number under which a service is reachable."""

    name: str = ""
    protocol: str = ""
    status: Status = Status.EMPTY
    port: int = 0

    def equal(self, other: ServicePort | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.protocol == other.protocol
            and self.port == other.port
        )


@dataclass
class HAProxySrv:
    """A server slot of a backend; an empty address means it is disabled."""

    name: str = ""
    address: str = ""
    modified: bool = False
    port: int = 0

    def __str__(self) -> str:
        modified = "true" if self.modified else "false"
        return (
            f"{{Name:{self.name} Address:{self.address} "
            f"Modified:{modified} Port:{self.port}}}"
        )


@dataclass
class PortEndpoints:
    """Addresses serving one port of a service."""

    addresses: set[str] = field(default_factory=set)
    port: int = 0

    def equal(self, other: PortEndpoints | None) -> bool:
        if other is None:
            return False
        if self.port != other.port:
            return False
        if len(self.addresses) != len(other.addresses):
            return False
        return all(address in other.addresses for address in self.addresses)


@dataclass
class Endpoints:
    """One endpoint slice of a service, keyed by port name."""

    slice_name: str = ""
    namespace: str = ""
    service: str = ""
    ports: dict[str, PortEndpoints | None] = field(default_factory=dict)
    status: Status = Status.EMPTY

    def equal(self, other: Endpoints | None) -> bool:
        if other is None:
            return False
        if (
            self.slice_name != other.slice_name
            or self.namespace != other.namespace
            or self.service != other.service
        ):
            return False
        if len(self.ports) != len(other.ports):
            return False
        for name, value in self.ports.items():
            if name not in other.ports or value is None:
                return False
            if not value.equal(other.ports[name]):
                return False
        return True


@dataclass
class PodEvent:
    """Creation or deletion of a controller pod."""

    created: bool = False


@dataclass
class Service:
    """A service as seen by the controller."""

    annotations: dict[str, str] = field(default_factory=dict)
    namespace: str = ""
    name: str = ""
    dns: str = ""
    status: Status = Status.EMPTY
    ports: list[ServicePort] = field(default_factory=list)
    addresses: list[str] = field(default_factory=list)

    def equal(self, other: Service | None) -> bool:
        """Compare name, annotations and ports; statuses are ignored."""
        if other is None:
            return False
        if self.name != other.name:
            return False
        if not _same_annotations(self.annotations, other.annotations):
            return False
        return _equal_sequence(self.ports, other.ports)

    def equal_with_addresses(self, other: Service) -> bool:
        """Compare only the published addresses, ignoring their order."""
        return equal_slice_strings_without_order(self.addresses, other.addresses)


@dataclass
class RuntimeBackend:
    """Runtime state of a backend: its endpoints and server slots."""

    endpoints: PortEndpoints = field(default_factory=PortEndpoints)
    name: str = ""
    haproxy_srvs: list[HAProxySrv] = field(default_factory=list)
    dyn_update_failed: bool = False


@dataclass
class CustomResources:
    """Configuration taken from custom resources, keyed by resource name."""

    global_configs: dict[str, Any] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)
    log_targets: dict[str, Any] = field(default_factory=dict)
    backends: dict[str, Any] = field(default_factory=dict)


@dataclass
class IngressClass:
    """An ingress class resource."""

    api_version: str = ""
    name: str = ""
    controller: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    status: Status = Status.EMPTY

    def equal(self, other: IngressClass | None) -> bool:
        if other is None:
            return False
        return self.controller == other.controller and self.name == other.name


@dataclass
class IngressPath:
    """A path of an ingress rule and the service port it leads to."""

    svc_port_resolved: ServicePort | None = None
    svc_namespace: str = ""
    svc_name: str = ""
    svc_port_string: str = ""
    path: str = ""
    path_type_match: str = ""
    svc_port_int: int = 0
    is_default_backend: bool = False


@dataclass
class IngressRule:
    """The paths served for one host."""

    paths: dict[str, IngressPath] = field(default_factory=dict)
    host: str = ""


@dataclass
class IngressTLS:
    """The secret holding the certificate of a host."""

    host: str = ""
    secret_name: str = ""


@dataclass
class IngressCore:
    """The content of an ingress that defines routing."""

    annotations: dict[str, str] = field(default_factory=dict)
    rules: dict[str, IngressRule] = field(default_factory=dict)
    default_backend: IngressPath | None = None
    tls: dict[str, IngressTLS] = field(default_factory=dict)
    api_version: str = ""
    namespace: str = ""
    name: str = ""
    ingress_class: str = ""


@dataclass
class Ingress(IngressCore):
    """An ingress with its bookkeeping state."""

    status: Status = Status.EMPTY
    addresses: list[str] = field(default_factory=list)
    ignored: bool = False
    class_updated: bool = False


@dataclass
class ConfigMap:
    """A config map the controller reads."""

    annotations: dict[str, str] = field(default_factory=dict)
    namespace: str = ""
    name: str = ""
    status: Status = Status.EMPTY
    loaded: bool = False

    def equal(self, other: ConfigMap | None) -> bool:
        """Compare name and annotations; statuses are ignored."""
        if other is None:
            return False
        if self.name != other.name:
            return False
        return _same_annotations(self.annotations, other.annotations)


@dataclass
class ConfigMaps:
    """The config maps the controller is configured with."""

    main: ConfigMap = field(default_factory=ConfigMap)
    tcp_services: ConfigMap = field(default_factory=ConfigMap)
    errorfiles: ConfigMap = field(default_factory=ConfigMap)
    pattern_files: ConfigMap = field(default_factory=ConfigMap)


@dataclass
class Secret:
    """A secret with its raw data."""

    namespace: str = ""
    name: str = ""
    data: dict[str, bytes] = field(default_factory=dict)
    status: Status = Status.EMPTY

    def equal(self, other: Secret | None) -> bool:
        """Compare name and data; statuses are ignored."""
        if other is None:
            return False
        if self.name != other.name:
            return False
        if len(self.data) != len(other.data):
            return False
        return all(
            key in other.data and bytes(other.data[key]) == bytes(value)
            for key, value in self.data.items()
        )


@dataclass
class GatewayClass:
    """A gateway class resource."""

    description: str | None = None
    name: str = ""
    controller_name: str = ""
    status: Status = Status.EMPTY
    generation: int = 0

    def equal(self, other: GatewayClass | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.controller_name == other.controller_name
            and equal_optional(self.description, other.description)
        )


@dataclass
class LabelSelectorRequirement:
    """A single match expression of a label selector."""

    key: str = ""
    operator: str = ""
    values: list[str] = field(default_factory=list)

    def equal(self, other: LabelSelectorRequirement) -> bool:
        return (
            self.key == other.key
            and self.operator == other.operator
            and list(self.values) == list(other.values)
        )


@dataclass
class LabelSelector:
    """Labels and expressions that select resources."""

    match_labels: dict[str, str] | None = None
    match_expressions: list[LabelSelectorRequirement] = field(default_factory=list)

    def equal(self, other: LabelSelector | None) -> bool:
        if other is None:
            return False
        return _equal_map(self.match_labels, other.match_labels) and _equal_sequence(
            self.match_expressions, other.match_expressions
        )


@dataclass
class RouteNamespaces:
    """Which namespaces routes may come from."""

    from_: str | None = None
    selector: LabelSelector | None = None

    def equal(self, other: RouteNamespaces | None) -> bool:
        if other is None:
            return False
        return equal_optional(self.from_, other.from_) and equal_optional(
            self.selector, other.selector
        )


@dataclass
class RouteGroupKind:
    """A group and kind of route."""

    group: str | None = None
    kind: str = ""


def route_group_kinds_equal(a: Sequence[RouteGroupKind], b: Sequence[RouteGroupKind]) -> bool:
    """Compare route kinds as sets of group/kind pairs."""
    if len(a) != len(b):
        return False

    def keys(kinds: Sequence[RouteGroupKind]) -> set[str]:
        return {f"{kind.group or ''}/{kind.kind}" for kind in kinds}

    return keys(a) == keys(b)


@dataclass
class AllowedRoutes:
    """Routes a listener accepts."""

    namespaces: RouteNamespaces | None = None
    kinds: list[RouteGroupKind] = field(default_factory=list)

    def equal(self, other: AllowedRoutes | None) -> bool:
        if other is None:
            return False
        return equal_optional(self.namespaces, other.namespaces) and route_group_kinds_equal(
            self.kinds, other.kinds
        )


@dataclass
class Listener:
    """A listener of a gateway."""

    hostname: str | None = None
    allowed_routes: AllowedRoutes | None = None
    name: str = ""
    protocol: str = ""
    gw_namespace: str = ""
    gw_name: str = ""
    port: int = 0

    def equal(self, other: Listener | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.port == other.port
            and self.protocol == other.protocol
            and equal_optional(self.hostname, other.hostname)
            and equal_optional(self.allowed_routes, other.allowed_routes)
        )


def listeners_equal(a: Sequence[Listener], b: Sequence[Listener]) -> bool:
    """Compare listeners matched by name, ignoring order."""
    return _equal_keyed(a, b, lambda listener: listener.name, Listener)


@dataclass
class Gateway:
    """A gateway resource."""

    namespace: str = ""
    name: str = ""
    gateway_class_name: str = ""
    status: Status = Status.EMPTY
    listeners: list[Listener] = field(default_factory=list)
    generation: int = 0

    def equal(self, other: Gateway | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.namespace == other.namespace
            and self.gateway_class_name == other.gateway_class_name
            and listeners_equal(self.listeners, other.listeners)
        )

    def validate(self) -> None:
        """Raise ValueError if there are no listeners or duplicated ones."""
        if not self.listeners:
            raise ValueError(f"Gateway '{self.namespace}/{self.name}' has no listeners")
        errors = ErrorList()
        seen: set[str] = set()
        for listener in self.listeners:
            key = f"{listener.hostname or ''}/{listener.port}/{listener.protocol}"
            if key in seen:
                errors.add(
                    ValueError(
                        f"duplicate combination hostname/port/protocol '{key}' in listeners "
                        f"from gateway '{self.namespace}/{self.name}"
                    )
                )
            seen.add(key)
        combined = errors.result()
        if combined is not None:
            raise ValueError(str(combined)) from combined


@dataclass
class BackendRef:
    """A backend a route sends traffic to."""

    namespace: str | None = None
    port: int | None = None
    weight: int | None = None
    group: str | None = None
    kind: str | None = None
    name: str = ""

    def equal(self, other: BackendRef | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.namespace == other.namespace
            and equal_optional(self.port, other.port)
            and equal_optional(self.weight, other.weight)
        )


def _namespaced_key(ref: BackendRef | ParentRef) -> str:
    namespace = ref.namespace if ref.namespace is not None else "empty"
    return f"{namespace}/{ref.name}"


def backend_refs_equal(a: Sequence[BackendRef], b: Sequence[BackendRef]) -> bool:
    """Compare backend references matched by namespace and name."""
    return _equal_keyed(a, b, _namespaced_key, BackendRef)


@dataclass
class ParentRef:
    """A parent resource a route attaches to."""

    namespace: str | None = None
    section_name: str | None = None
    port: int | None = None
    group: str = ""
    kind: str = ""
    name: str = ""

    def equal(self, other: ParentRef) -> bool:
        return (
            self.name == other.name
            and equal_optional(self.namespace, other.namespace)
            and equal_optional(self.port, other.port)
            and equal_optional(self.section_name, other.section_name)
        )


def parent_refs_equal(a: Sequence[ParentRef], b: Sequence[ParentRef]) -> bool:
    """Compare parent references matched by namespace and name."""
    return _equal_keyed(a, b, _namespaced_key, ParentRef)


@dataclass
class TCPRoute:
    """A TCP route resource."""

    creation_time: datetime = _ZERO_TIME
    name: str = ""
    namespace: str = ""
    status: Status = Status.EMPTY
    backend_refs: list[BackendRef] = field(default_factory=list)
    parent_refs: list[ParentRef] = field(default_factory=list)
    generation: int = 0

    def equal(self, other: TCPRoute | None) -> bool:
        if other is None:
            return False
        return (
            self.name == other.name
            and self.namespace == other.namespace
            and backend_refs_equal(self.backend_refs, other.backend_refs)
            and parent_refs_equal(self.parent_refs, other.parent_refs)
        )

    def sort_key(self) -> tuple[datetime, str]:
        """Order routes by creation time, then by namespace and name."""
        return (self.creation_time, self.namespace + self.name)


@dataclass
class ReferenceGrantFrom:
    """Resources a reference grant allows references from."""

    group: str = ""
    kind: str = ""
    namespace: str = ""


@dataclass
class ReferenceGrantTo:
    """Resources a reference grant allows references to."""

    name: str | None = None
    group: str = ""
    kind: str = ""

    def equal(self, other: ReferenceGrantTo) -> bool:
        return (
            self.group == other.group
            and self.kind == other.kind
            and equal_optional(self.name, other.name)
        )


@dataclass
class ReferenceGrant:
    """A reference grant resource."""

    namespace: str = ""
    name: str = ""
    status: Status = Status.EMPTY
    from_: list[ReferenceGrantFrom] = field(default_factory=list)
    to: list[ReferenceGrantTo] = field(default_factory=list)
    generation: int = 0

    def equal(self, other: ReferenceGrant | None) -> bool:
        if other is None:
            return False
        return (
            self.namespace == other.namespace
            and self.name == other.name
            and list(self.from_) == list(other.from_)
            and _equal_sequence(self.to, other.to)
        )


@dataclass
class Namespace:
    """Everything the store holds for one namespace."""

    secrets: dict[str, Secret] = field(default_factory=dict)
    ingresses: dict[str, Ingress] = field(default_factory=dict)
    endpoints: dict[str, dict[str, Endpoints]] = field(default_factory=dict)
    services: dict[str, Service] = field(default_factory=dict)
    haproxy_runtime: dict[str, dict[str, RuntimeBackend]] = field(default_factory=dict)
    crs: CustomResources = field(default_factory=CustomResources)
    gateways: dict[str, Gateway] = field(default_factory=dict)
    tcp_routes: dict[str, TCPRoute] = field(default_factory=dict)
    reference_grants: dict[str, ReferenceGrant] = field(default_factory=dict)
    labels: dict[str, str] | None = field(default_factory=dict)
    name: str = ""
    status: Status = Status.EMPTY
    relevant: bool = False

    def equal(self, other: Namespace | None) -> bool:
        if other is None:
            return False
        return self.name == other.name and _equal_map(self.labels, other.labels)
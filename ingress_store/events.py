"""Apply cluster events to the store and tell whether a sync is needed."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import fields
from typing import TYPE_CHECKING, Any

from .helpers import copy_map
from .log import get_logger
from .status import Status
from .types import (
    ConfigMap,
    ConfigMaps,
    Endpoints,
    Gateway,
    GatewayClass,
    Ingress,
    IngressClass,
    IngressCore,
    IngressPath,
    Namespace,
    PodEvent,
    PortEndpoints,
    ReferenceGrant,
    RuntimeBackend,
    Secret,
    Service,
    TCPRoute,
)

logger = get_logger()

SyncServers = Callable[[RuntimeBackend, bool], None]

# Marks a path whose resolved service port is known in the stored ingress but
# not yet in the incoming one; such a difference alone is not an update.
_RESOLVED_PORT_UNSET = "svc_port_resolved: unset in new ingress"


def _assign(target: Any, source: Any) -> None:
    """Copy every dataclass field of ``source`` onto ``target`` in place."""
    for item in fields(source):
        setattr(target, item.name, getattr(source, item.name))


def _path_changes(prefix: str, new: IngressPath | None, old: IngressPath | None) -> Iterator[str]:
    if new is None or old is None:
        if new is not old:
            yield prefix
        return
    for item in fields(IngressPath):
        a = getattr(new, item.name)
        b = getattr(old, item.name)
        if item.name == "svc_port_resolved" and a is None and b is not None:
            yield _RESOLVED_PORT_UNSET
        elif a != b:
            yield f"{prefix}.{item.name}"


def _mapping_changes(prefix: str, new: Mapping[str, Any], old: Mapping[str, Any]) -> Iterator[str]:
    for key in sorted(set(new) | set(old)):
        if key not in new or key not in old or new[key] != old[key]:
            yield f"{prefix}[{key}]"


def _core_changes(new: IngressCore, old: IngressCore) -> list[str]:
    """List the differences between two ingress cores, one entry per change."""
    changes: list[str] = []
    if new.ingress_class != old.ingress_class:
        changes.append(f"Class: {new.ingress_class} != {old.ingress_class}")
    for name in ("api_version", "namespace", "name"):
        if getattr(new, name) != getattr(old, name):
            changes.append(name)
    changes.extend(_mapping_changes("Annotations", new.annotations, old.annotations))
    changes.extend(_mapping_changes("TLS", new.tls, old.tls))
    changes.extend(_path_changes("DefaultBackend", new.default_backend, old.default_backend))
    for host in sorted(set(new.rules) | set(old.rules)):
        new_rule = new.rules.get(host)
        old_rule = old.rules.get(host)
        if new_rule is None or old_rule is None:
            changes.append(f"Rules[{host}]")
            continue
        if new_rule.host != old_rule.host:
            changes.append(f"Rules[{host}].host")
        for key in sorted(set(new_rule.paths) | set(old_rule.paths)):
            changes.extend(
                _path_changes(
                    f"Rules[{host}].Paths[{key}]",
                    new_rule.paths.get(key),
                    old_rule.paths.get(key),
                )
            )
    return changes


def merge_endpoints(slices: Mapping[str, Endpoints]) -> dict[str, PortEndpoints]:
    """Merge the addresses of all slices that are not deleted, by port name."""
    merged: dict[str, PortEndpoints] = {}
    for endpoint_slice in slices.values():
        if endpoint_slice.status is Status.DELETED:
            continue
        for port_name, port_endpoints in endpoint_slice.ports.items():
            if port_endpoints is None:
                continue
            target = merged.setdefault(port_name, PortEndpoints(port=port_endpoints.port))
            target.addresses.update(port_endpoints.addresses)
    return merged


class EventHandlers:
    """Event handling for the store; each handler returns whether a sync is needed."""

    namespaces: dict[str, Namespace]
    ingress_classes: dict[str, IngressClass]
    config_maps: ConfigMaps
    gateway_classes: dict[str, GatewayClass]
    gateway_controller_name: str
    publish_service_addresses: list[str]
    update_all_ingresses: bool
    nbr_haproxy_inst: int

    if TYPE_CHECKING:

        def get_namespace(self, name: str) -> Namespace: ...

    def event_namespace(self, data: Namespace) -> bool:
        if data.status in (Status.ADDED, Status.MODIFIED):
            stored = self.get_namespace(data.name)
            stored.labels = copy_map(data.labels)
            return True
        if data.status is Status.DELETED:
            if data.name in self.namespaces:
                del self.namespaces[data.name]
                return True
            logger.warningf("Namespace '%s' not registered with controller, cannot delete !", data.name)
        return False

    def event_ingress_class(self, data: IngressClass) -> bool:
        if data.status is Status.DELETED:
            self.ingress_classes.pop(data.name, None)
            return True
        if not data.equal(self.ingress_classes.get(data.name)):
            self.ingress_classes[data.name] = data
            return True
        return False

    def event_ingress(self, ns: Namespace, data: Ingress) -> bool:
        update_required = True
        if data.status is Status.DELETED:
            ns.ingresses.pop(data.name, None)
            return update_required
        old = ns.ingresses.get(data.name)
        if old is not None:
            changes = _core_changes(data, old)
            if not changes or changes == [_RESOLVED_PORT_UNSET]:
                update_required = False
                data.status = Status.EMPTY
            if any(change.startswith("Class:") for change in changes):
                data.class_updated = True
            if data.annotations.get("ingress.class", "") != old.annotations.get("ingress.class", ""):
                data.class_updated = True
        ns.ingresses[data.name] = data
        return update_required

    def event_endpoints(self, ns: Namespace, data: Endpoints, sync_haproxy_srvs: SyncServers) -> bool:
        """Record an endpoint slice and rebuild the runtime backends of its service.

        ``sync_haproxy_srvs`` is called with each backend that already existed and
        whether its port changed; what it raises is logged as a warning.
        """
        slices = ns.endpoints.setdefault(data.service, {})
        existing = slices.get(data.slice_name)
        if existing is not None and data.status is not Status.DELETED and existing.equal(data):
            return False
        logger.tracef("Treating endpoints event %s", data)
        slices[data.slice_name] = data

        endpoints = merge_endpoints(slices)
        logger.tracef("service %s : endpoints list %s", data.service, endpoints)
        if data.service not in ns.haproxy_runtime or not endpoints:
            ns.haproxy_runtime[data.service] = {}
        runtime = ns.haproxy_runtime[data.service]
        logger.tracef(
            "service %s : number of already existing backend(s) in this transaction for this endpoint: %d",
            data.service,
            len(runtime),
        )
        for port_name, port_endpoints in endpoints.items():
            new_backend = RuntimeBackend(endpoints=port_endpoints)
            backend = runtime.get(port_name)
            if backend is not None:
                port_updated = new_backend.endpoints.port != backend.endpoints.port
                new_backend.haproxy_srvs = backend.haproxy_srvs
                new_backend.name = backend.name
                try:
                    sync_haproxy_srvs(new_backend, port_updated)
                except Exception as error:  # noqa: BLE001 - reported, not fatal
                    logger.warning(error)
            runtime[port_name] = new_backend
        return True

    def event_service(self, ns: Namespace, data: Service) -> bool:
        if data.status is Status.MODIFIED:
            old = ns.services.get(data.name)
            if old is None:
                logger.warningf("Service '%s' not registered with controller !", data.name)
            elif old.equal(data):
                return False
            elif old.status is Status.ADDED:
                data.status = Status.ADDED
            ns.services[data.name] = data
            return True
        if data.status is Status.ADDED:
            old = ns.services.get(data.name)
            if old is not None:
                if old.status is Status.DELETED:
                    old.status = Status.ADDED
                if not old.equal(data):
                    data.status = Status.MODIFIED
                    return self.event_service(ns, data)
                return False
            ns.services[data.name] = data
            return True
        if data.status is Status.DELETED:
            old = ns.services.get(data.name)
            if old is not None:
                old.status = Status.DELETED
                return True
            logger.warningf("Service '%s' not registered with controller, cannot delete !", data.name)
        return False

    def _watched_config_map(self, ns: Namespace, data: ConfigMap) -> ConfigMap | None:
        maps = self.config_maps
        for cm in (maps.main, maps.tcp_services, maps.errorfiles, maps.pattern_files):
            if cm.namespace == ns.name and cm.name == data.name:
                return cm
        return None

    def event_config_map(self, ns: Namespace, data: ConfigMap) -> bool:
        cm = self._watched_config_map(ns, data)
        if cm is None:
            return False
        if data.status is Status.ADDED:
            if cm.loaded and not cm.equal(data):
                data.status = Status.MODIFIED
                return self.event_config_map(ns, data)
            _assign(cm, data)
            cm.loaded = True
            logger.debugf("configmap '%s/%s' processed", cm.namespace, cm.name)
            return True
        if data.status is Status.MODIFIED:
            _assign(cm, data)
            logger.infof("configmap '%s/%s' updated", cm.namespace, cm.name)
            return True
        if data.status is Status.DELETED:
            cm.loaded = False
            cm.annotations = {}
            logger.debugf("configmap '%s/%s' deleted", cm.namespace, cm.name)
            return True
        return False

    def event_secret(self, ns: Namespace, data: Secret) -> bool:
        if data.status is Status.MODIFIED:
            old = ns.secrets.get(data.name)
            if old is None:
                logger.warningf("Secret '%s' not registered with controller !", data.name)
                return False
            if old.equal(data):
                return False
            ns.secrets[data.name] = data
            return True
        if data.status is Status.ADDED:
            old = ns.secrets.get(data.name)
            if old is not None:
                if old.status is Status.DELETED:
                    old.status = Status.ADDED
                if not old.equal(data):
                    data.status = Status.MODIFIED
                    return self.event_secret(ns, data)
                return False
            ns.secrets[data.name] = data
            return True
        if data.status is Status.DELETED:
            old = ns.secrets.get(data.name)
            if old is not None:
                old.status = Status.DELETED
                return True
            logger.warningf("Secret '%s' not registered with controller, cannot delete !", data.name)
        return False

    def event_pod(self, pod_event: PodEvent) -> bool:
        """Count controller instances up or down."""
        self.nbr_haproxy_inst += 1 if pod_event.created else -1
        return True

    def event_publish_service(self, ns: Namespace, data: Service) -> bool:
        """Track the published addresses; ingresses are flagged, no sync is asked."""
        if data.status is Status.MODIFIED:
            old = ns.services.get(data.name)
            if old is None:
                logger.warningf("Service '%s' not registered with controller !", data.name)
            else:
                if old.equal_with_addresses(data):
                    return False
                old.addresses = data.addresses
            self.publish_service_addresses = data.addresses
            self.update_all_ingresses = True
        elif data.status is Status.ADDED:
            service = ns.services.get(data.name)
            if service is not None:
                self.publish_service_addresses = data.addresses
                service.addresses = data.addresses
                self.update_all_ingresses = True
            else:
                logger.errorf("Publish service '%s/%s' not found", data.namespace, data.name)
        elif data.status is Status.DELETED:
            service = ns.services.get(data.name)
            if service is not None:
                self.publish_service_addresses = []
                service.addresses = []
                self.update_all_ingresses = True
            else:
                logger.warningf(
                    "Publish service '%s/%s' not registered with controller, cannot delete !",
                    data.namespace,
                    data.name,
                )
        return False

    def event_gateway_class(self, data: GatewayClass) -> bool:
        if data.controller_name != self.gateway_controller_name:
            return False
        if data.status is Status.ADDED:
            if self.gateway_classes.get(data.name) is not None:
                logger.warningf("Replacing existing gatewayclass %s", data.name)
            self.gateway_classes[data.name] = data
            return True
        if data.status is Status.DELETED:
            if self.gateway_classes.get(data.name) is None:
                logger.warningf("Trying to delete unexisting gatewayclass %s", data.name)
                return False
            del self.gateway_classes[data.name]
            return True
        if data.status is Status.MODIFIED:
            old = self.gateway_classes.get(data.name)
            if old is None:
                logger.warningf("Modification of unexisting gatewayclass %s", data.name)
            if (old is not None and old.generation == data.generation) or data.equal(old):
                return False
            self.gateway_classes[data.name] = data
            return True
        return False

    def event_gateway(self, ns: Namespace, data: Gateway) -> bool:
        if data.status is Status.ADDED:
            if ns.gateways.get(data.name) is not None:
                logger.warningf("Replacing existing gateway %s", data.name)
            ns.gateways[data.name] = data
            return True
        if data.status is Status.DELETED:
            if ns.gateways.get(data.name) is None:
                logger.warningf("Trying to delete unexisting gateway %s", data.name)
                return False
            ns.gateways[data.name] = data
            return True
        if data.status is Status.MODIFIED:
            old = ns.gateways.get(data.name)
            if old is None:
                logger.warningf("Modification of unexisting gateway %s", data.name)
            if (old is not None and data.generation == old.generation) or data.equal(old):
                return False
            ns.gateways[data.name] = data
            return True
        return False

    def event_tcp_route(self, ns: Namespace, data: TCPRoute) -> bool:
        if data.status is Status.ADDED:
            if ns.tcp_routes.get(data.name) is not None:
                logger.warningf("Replacing existing tcproute %s", data.name)
            ns.tcp_routes[data.name] = data
            return True
        if data.status is Status.DELETED:
            if ns.tcp_routes.get(data.name) is None:
                logger.warningf("Trying to delete unexisting tcproute %s", data.name)
                return False
            # Kept so that the listener attached to this route gets updated.
            ns.tcp_routes[data.name] = data
            return True
        if data.status is Status.MODIFIED:
            old = ns.tcp_routes.get(data.name)
            if old is None:
                logger.warningf("Modification of unexisting tcproute %s", data.name)
            if (old is not None and data.generation == old.generation) or data.equal(old):
                return False
            ns.tcp_routes[data.name] = data
            return True
        return False

    def event_reference_grant(self, ns: Namespace, data: ReferenceGrant) -> bool:
        if data.status is Status.ADDED:
            if ns.reference_grants.get(data.name) is not None:
                logger.warningf("Replacing existing referencegrant %s", data.name)
            ns.reference_grants[data.name] = data
            return True
        if data.status is Status.DELETED:
            if ns.reference_grants.get(data.name) is None:
                logger.warningf("Trying to delete unexisting refrencegrant %s", data.name)
                return False
            del ns.reference_grants[data.name]
            return True
        if data.status is Status.MODIFIED:
            old = ns.reference_grants.get(data.name)
            if old is None:
                logger.warningf("Modification of unexisting referencegrant %s", data.name)
                return False
            if data.generation == old.generation or data.equal(old):
                return False
            ns.reference_grants[data.name] = data
            return True
        return False
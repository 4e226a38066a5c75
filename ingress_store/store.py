"""The controller's view of cluster resources."""

from __future__ import annotations

from dataclasses import dataclass, field

from .events import EventHandlers
from .flags import OSArgs
from .log import get_logger
from .status import Status
from .types import (
    ConfigMap,
    ConfigMaps,
    GatewayClass,
    IngressClass,
    Namespace,
    PortEndpoints,
    Secret,
    Service,
)

logger = get_logger()

DEFAULT_LOCAL_BACKEND = "default-local-service"


class NotFoundError(LookupError):
    """A resource is missing from its namespace or was deleted."""


@dataclass
class NamespacesWatch:
    """Namespaces to watch (whitelist) or to ignore (blacklist)."""

    whitelist: set[str] = field(default_factory=set)
    blacklist: set[str] = field(default_factory=set)


@dataclass
class K8s(EventHandlers):
    """All resources known to the controller, grouped by namespace."""

    config_maps: ConfigMaps = field(default_factory=ConfigMaps)
    namespaces_access: NamespacesWatch = field(default_factory=NamespacesWatch)
    namespaces: dict[str, Namespace] = field(default_factory=dict)
    ingress_classes: dict[str, IngressClass] = field(default_factory=dict)
    secrets_processed: set[str] = field(default_factory=set)
    backends_processed: set[str] = field(default_factory=set)
    gateway_classes: dict[str, GatewayClass] = field(default_factory=dict)
    gateway_controller_name: str = ""
    publish_service_addresses: list[str] = field(default_factory=list)
    nbr_haproxy_inst: int = 0
    update_all_ingresses: bool = False
    backends_with_no_config_snippets: set[str] = field(default_factory=set)

    @classmethod
    def from_args(cls, args: OSArgs) -> K8s:
        """Create an empty store watching the config maps and namespaces in ``args``."""
        return cls(
            config_maps=ConfigMaps(
                main=ConfigMap(namespace=args.configmap.namespace, name=args.configmap.name),
                tcp_services=ConfigMap(
                    namespace=args.configmap_tcp_services.namespace,
                    name=args.configmap_tcp_services.name,
                ),
                errorfiles=ConfigMap(
                    namespace=args.configmap_errorfiles.namespace,
                    name=args.configmap_errorfiles.name,
                ),
                pattern_files=ConfigMap(
                    namespace=args.configmap_patternfiles.namespace,
                    name=args.configmap_patternfiles.name,
                ),
            ),
            namespaces_access=NamespacesWatch(
                whitelist=set(args.namespace_whitelist),
                blacklist=set(args.namespace_blacklist),
            ),
        )

    def clean(self) -> None:
        """Drop deleted resources and reset the status of the others."""
        for namespace in self.namespaces.values():
            for ingress in namespace.ingresses.values():
                ingress.status = Status.EMPTY
            for service in list(namespace.services.values()):
                if service.status is Status.DELETED:
                    namespace.services.pop(service.name, None)
                else:
                    service.status = Status.EMPTY
            for slices in list(namespace.endpoints.values()):
                for endpoint_slice in list(slices.values()):
                    if endpoint_slice.status is Status.DELETED:
                        service_slices = namespace.endpoints.get(endpoint_slice.service, {})
                        service_slices.pop(endpoint_slice.slice_name, None)
                        if not service_slices:
                            namespace.endpoints.pop(endpoint_slice.service, None)
                            namespace.haproxy_runtime.pop(endpoint_slice.service, None)
                    else:
                        endpoint_slice.status = Status.EMPTY
                        for backend in namespace.haproxy_runtime.get(endpoint_slice.service, {}).values():
                            for srv in backend.haproxy_srvs:
                                srv.modified = False
            for secret in list(namespace.secrets.values()):
                if secret.status is Status.DELETED:
                    namespace.secrets.pop(secret.name, None)
                else:
                    secret.status = Status.EMPTY
        for ingress_class in self.ingress_classes.values():
            ingress_class.status = Status.EMPTY
        maps = self.config_maps
        for cm in (maps.main, maps.tcp_services, maps.errorfiles):
            if cm.status is Status.DELETED:
                cm.annotations = {}
            else:
                cm.status = Status.EMPTY
        self.secrets_processed = set()

    def get_namespace(self, name: str) -> Namespace:
        """Return the named namespace, creating it when it is not known yet."""
        namespace = self.namespaces.get(name)
        if namespace is None:
            namespace = Namespace(
                name=name,
                relevant=self.is_relevant_namespace(name),
                status=Status.ADDED,
            )
            self.namespaces[name] = namespace
        return namespace

    def get_secret(self, namespace: str, name: str) -> Secret:
        """Return a secret; raise LookupError, or NotFoundError when missing or deleted."""
        ns = self.namespaces.get(namespace)
        if ns is None:
            raise LookupError(f"secret '{namespace}/{name}' does not exist, namespace not found")
        secret = ns.secrets.get(name)
        if secret is None:
            raise NotFoundError(f"secret '{namespace}/{name}' does not exist")
        if secret.status is Status.DELETED:
            raise NotFoundError(f"secret '{namespace}/{name}' deleted")
        return secret

    def get_service(self, namespace: str, name: str) -> Service:
        """Return a service; raise LookupError, or NotFoundError when missing or deleted."""
        ns = self.namespaces.get(namespace)
        if ns is None:
            raise LookupError(f"service '{namespace}/{name}' does not exist, namespace not found")
        service = ns.services.get(name)
        if service is None:
            raise NotFoundError(f"service '{namespace}/{name}' does not exist")
        if service.status is Status.DELETED:
            raise NotFoundError(f"service '{namespace}/{name}' deleted")
        return service

    def get_endpoints(self, namespace: str, name: str) -> dict[str, PortEndpoints | None]:
        """Return the endpoints of a service by port name, over all its slices."""
        ns = self.namespaces.get(namespace)
        if ns is None:
            raise LookupError(f"service '{namespace}/{name}' does not exist, namespace not found")
        slices = ns.endpoints.get(name)
        if slices is None:
            raise LookupError(f"endpoints for service '{namespace}/{name}', does not exist")
        endpoints: dict[str, PortEndpoints | None] = {}
        for endpoint_slice in slices.values():
            endpoints.update(endpoint_slice.ports)
        return endpoints

    def is_relevant_namespace(self, namespace: str) -> bool:
        """Tell whether the controller watches the namespace."""
        if not namespace:
            return False
        if self.namespaces_access.whitelist:
            return namespace in self.namespaces_access.whitelist
        return namespace not in self.namespaces_access.blacklist
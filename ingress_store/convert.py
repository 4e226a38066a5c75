"""Turn API server ingress documents into store records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .log import get_logger
from .types import Ingress, IngressClass, IngressPath, IngressRule, IngressTLS

logger = get_logger()

NETWORKING_V1 = "networking.k8s.io/v1"

PATH_TYPE_EXACT = "Exact"
PATH_TYPE_PREFIX = "Prefix"
PATH_TYPE_IMPLEMENTATION_SPECIFIC = "ImplementationSpecific"


def _section(data: Mapping[str, Any] | None, key: str) -> Mapping[str, Any]:
    if not data:
        return {}
    return data.get(key) or {}


def _is_resource(resource: Any, kind: str) -> bool:
    return (
        isinstance(resource, Mapping)
        and resource.get("apiVersion") == NETWORKING_V1
        and resource.get("kind") == kind
    )


def _unrecognized(resource: Any) -> TypeError:
    if isinstance(resource, Mapping):
        described = f"{resource.get('apiVersion', '')}/{resource.get('kind', '')}"
    else:
        described = type(resource).__name__
    return TypeError(f"unrecognized type for: {described}")


def copy_annotations(annotations: Mapping[str, str] | None) -> dict[str, str]:
    """Copy annotations, dropping any ``prefix/`` from their names."""
    return {name.split("/", 1)[-1]: value for name, value in (annotations or {}).items()}


def _convert_rules(namespace: str, name: str, rules: list[Mapping[str, Any]]) -> dict[str, IngressRule]:
    result: dict[str, IngressRule] = {}
    for rule in rules:
        host = rule.get("host", "") or ""
        http = rule.get("http")
        if http is None:
            logger.warningf("Ingress HTTP rules for [%s] does not exists", host)
            continue
        paths: dict[str, IngressPath] = {}
        for path in http.get("paths") or []:
            path_type = path.get("pathType") or ""
            service = _section(path, "backend").get("service")
            if service is None:
                logger.errorf(
                    "backend in ingress '%s/%s' should have service but none found", namespace, name
                )
                continue
            port = service.get("port") or {}
            port_name = port.get("name", "") or ""
            path_value = path.get("path", "") or ""
            paths[f"{path_type}-{path_value}-{port_name}"] = IngressPath(
                path=path_value,
                path_type_match=path_type,
                svc_namespace=namespace,
                svc_name=service.get("name", "") or "",
                svc_port_int=int(port.get("number", 0) or 0),
                svc_port_string=port_name,
            )
        if host in result:
            result[host].paths.update(paths)
        else:
            result[host] = IngressRule(host=host, paths=paths)
    return result


def _convert_default_backend(namespace: str, backend: Mapping[str, Any] | None) -> IngressPath | None:
    if backend is None:
        return None
    path = IngressPath(svc_namespace=namespace, is_default_backend=True)
    service = backend.get("service")
    if service is not None:
        port = service.get("port") or {}
        path.svc_name = service.get("name", "") or ""
        path.svc_port_int = int(port.get("number", 0) or 0)
        path.svc_port_string = port.get("name", "") or ""
    return path


def _convert_tls(entries: list[Mapping[str, Any]]) -> dict[str, IngressTLS]:
    return {
        host: IngressTLS(host=host, secret_name=entry.get("secretName", "") or "")
        for entry in entries
        for host in entry.get("hosts") or []
    }


def convert_to_ingress(resource: Any) -> Ingress:
    """Convert a networking.k8s.io/v1 Ingress document; raise TypeError otherwise."""
    if not _is_resource(resource, "Ingress"):
        raise _unrecognized(resource)
    metadata = _section(resource, "metadata")
    spec = _section(resource, "spec")
    namespace = metadata.get("namespace", "") or ""
    name = metadata.get("name", "") or ""
    ingress = Ingress(
        api_version=NETWORKING_V1,
        namespace=namespace,
        name=name,
        ingress_class=spec.get("ingressClassName") or "",
        annotations=copy_annotations(metadata.get("annotations")),
        rules=_convert_rules(namespace, name, spec.get("rules") or []),
        default_backend=_convert_default_backend(namespace, spec.get("defaultBackend")),
        tls=_convert_tls(spec.get("tls") or []),
    )
    balancers = _section(_section(resource, "status"), "loadBalancer").get("ingress") or []
    ingress.addresses = [
        balancer.get("hostname") or balancer.get("ip", "") or "" for balancer in balancers
    ]
    return ingress


def convert_to_ingress_class(resource: Any) -> IngressClass:
    """Convert a networking.k8s.io/v1 IngressClass document; raise TypeError otherwise."""
    if not _is_resource(resource, "IngressClass"):
        raise _unrecognized(resource)
    metadata = _section(resource, "metadata")
    return IngressClass(
        api_version=NETWORKING_V1,
        name=metadata.get("name", "") or "",
        controller=_section(resource, "spec").get("controller", "") or "",
        annotations=dict(metadata.get("annotations") or {}),
    )
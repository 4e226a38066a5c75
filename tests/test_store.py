import pytest

from ingress_store.flags import parse_os_args
from ingress_store.status import Status
from ingress_store.store import K8s, NamespacesWatch, NotFoundError
from ingress_store.types import (
    ConfigMap,
    Endpoints,
    HAProxySrv,
    Ingress,
    IngressClass,
    Namespace,
    PortEndpoints,
    RuntimeBackend,
    Secret,
    Service,
)


def test_from_args():
    args = parse_os_args(
        ["--configmap", "ctl/main", "--configmap-tcp-services", "ctl/tcp", "--namespace-blacklist", "kube-system"]
    )
    store = K8s.from_args(args)
    assert store.config_maps.main.namespace == "ctl"
    assert store.config_maps.main.name == "main"
    assert store.config_maps.tcp_services.name == "tcp"
    assert store.config_maps.errorfiles.name == ""
    assert store.namespaces_access.blacklist == {"kube-system"}
    assert store.namespaces == {}


def test_get_namespace_creates_once():
    store = K8s()
    ns = store.get_namespace("apps")
    assert ns.name == "apps"
    assert ns.status is Status.ADDED
    assert ns.relevant
    assert store.get_namespace("apps") is ns


def test_is_relevant_namespace():
    store = K8s(namespaces_access=NamespacesWatch(whitelist={"a"}, blacklist={"a"}))
    assert store.is_relevant_namespace("a")
    assert not store.is_relevant_namespace("b")
    assert not store.is_relevant_namespace("")
    blacklisted = K8s(namespaces_access=NamespacesWatch(blacklist={"b"}))
    assert blacklisted.is_relevant_namespace("a")
    assert not blacklisted.is_relevant_namespace("b")


def test_get_service_errors():
    store = K8s()
    with pytest.raises(LookupError) as info:
        store.get_service("apps", "svc")
    assert not isinstance(info.value, NotFoundError)
    ns = store.get_namespace("apps")
    with pytest.raises(NotFoundError):
        store.get_service("apps", "svc")
    ns.services["svc"] = Service(name="svc", status=Status.DELETED)
    with pytest.raises(NotFoundError, match="deleted"):
        store.get_service("apps", "svc")
    ns.services["svc"].status = Status.ADDED
    assert store.get_service("apps", "svc") is ns.services["svc"]


def test_get_secret():
    store = K8s()
    with pytest.raises(LookupError):
        store.get_secret("apps", "tls")
    ns = store.get_namespace("apps")
    with pytest.raises(NotFoundError):
        store.get_secret("apps", "tls")
    ns.secrets["tls"] = Secret(name="tls", data={"k": b"v"})
    assert store.get_secret("apps", "tls").data == {"k": b"v"}


def test_get_endpoints_merges_slices():
    store = K8s()
    ns = store.get_namespace("apps")
    http = PortEndpoints(addresses={"10.0.0.1"}, port=80)
    https = PortEndpoints(addresses={"10.0.0.2"}, port=443)
    ns.endpoints["svc"] = {
        "s1": Endpoints(slice_name="s1", service="svc", ports={"http": http}),
        "s2": Endpoints(slice_name="s2", service="svc", ports={"https": https}),
    }
    assert store.get_endpoints("apps", "svc") == {"http": http, "https": https}
    with pytest.raises(LookupError):
        store.get_endpoints("apps", "other")


def test_clean_resets_and_removes_deleted():
    store = K8s()
    ns = store.get_namespace("apps")
    ns.ingresses["ing"] = Ingress(name="ing", status=Status.MODIFIED)
    ns.services["gone"] = Service(name="gone", status=Status.DELETED)
    ns.services["kept"] = Service(name="kept", status=Status.ADDED)
    ns.secrets["gone"] = Secret(name="gone", status=Status.DELETED)
    ns.secrets["kept"] = Secret(name="kept", status=Status.MODIFIED)
    srv = HAProxySrv(name="SRV_1", modified=True)
    ns.endpoints["live"] = {"s1": Endpoints(slice_name="s1", service="live", status=Status.ADDED)}
    ns.haproxy_runtime["live"] = {"http": RuntimeBackend(haproxy_srvs=[srv])}
    ns.endpoints["dead"] = {"s1": Endpoints(slice_name="s1", service="dead", status=Status.DELETED)}
    ns.haproxy_runtime["dead"] = {"http": RuntimeBackend()}
    store.ingress_classes["c"] = IngressClass(name="c", status=Status.ADDED)
    store.config_maps.main = ConfigMap(annotations={"a": "b"}, status=Status.DELETED)
    store.config_maps.tcp_services = ConfigMap(status=Status.ADDED)
    store.secrets_processed.add("x")

    store.clean()

    assert ns.ingresses["ing"].status is Status.EMPTY
    assert set(ns.services) == {"kept"}
    assert ns.services["kept"].status is Status.EMPTY
    assert set(ns.secrets) == {"kept"}
    assert ns.secrets["kept"].status is Status.EMPTY
    assert "dead" not in ns.endpoints
    assert "dead" not in ns.haproxy_runtime
    assert ns.endpoints["live"]["s1"].status is Status.EMPTY
    assert srv.modified is False
    assert store.ingress_classes["c"].status is Status.EMPTY
    assert store.config_maps.main.annotations == {}
    assert store.config_maps.main.status is Status.DELETED
    assert store.config_maps.tcp_services.status is Status.EMPTY
    assert store.secrets_processed == set()


def test_events_through_store():
    store = K8s()
    assert store.event_namespace(Namespace(name="apps", labels={"x": "y"}, status=Status.ADDED))
    assert store.namespaces["apps"].labels == {"x": "y"}
    assert store.event_namespace(Namespace(name="apps", status=Status.DELETED))
    assert "apps" not in store.namespaces
    assert not store.event_namespace(Namespace(name="apps", status=Status.DELETED))
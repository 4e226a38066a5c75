import pytest

from ingress_store.convert import (
    NETWORKING_V1,
    convert_to_ingress,
    convert_to_ingress_class,
    copy_annotations,
)


def _ingress(**spec):
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {
            "namespace": "apps",
            "name": "web",
            "annotations": {"haproxy.org/timeout-server": "5s", "plain": "x"},
        },
        "spec": spec,
    }


def test_copy_annotations_strips_prefix():
    result = copy_annotations({"haproxy.org/ssl-redirect": "true", "plain": "v"})
    assert result == {"ssl-redirect": "true", "plain": "v"}


def test_copy_annotations_none():
    assert copy_annotations(None) == {}


def test_convert_basic_fields():
    ing = convert_to_ingress(_ingress(ingressClassName="haproxy"))
    assert ing.api_version == NETWORKING_V1
    assert ing.namespace == "apps"
    assert ing.name == "web"
    assert ing.ingress_class == "haproxy"
    assert ing.annotations == {"timeout-server": "5s", "plain": "x"}
    assert ing.default_backend is None
    assert ing.rules == {}


def test_convert_rules_and_merge_same_host():
    rules = [
        {
            "host": "a.example.com",
            "http": {
                "paths": [
                    {
                        "path": "/x",
                        "pathType": "Prefix",
                        "backend": {"service": {"name": "svc", "port": {"name": "http"}}},
                    }
                ]
            },
        },
        {
            "host": "a.example.com",
            "http": {
                "paths": [
                    {
                        "path": "/y",
                        "pathType": "Exact",
                        "backend": {"service": {"name": "svc2", "port": {"number": 8080}}},
                    },
                    {"path": "/z", "backend": {"resource": {}}},
                ]
            },
        },
        {"host": "nohttp.example.com"},
    ]
    ing = convert_to_ingress(_ingress(rules=rules))
    assert set(ing.rules) == {"a.example.com"}
    paths = ing.rules["a.example.com"].paths
    assert set(paths) == {"Prefix-/x-http", "Exact-/y-"}
    assert paths["Prefix-/x-http"].svc_name == "svc"
    assert paths["Prefix-/x-http"].svc_port_string == "http"
    assert paths["Prefix-/x-http"].svc_namespace == "apps"
    assert paths["Exact-/y-"].svc_port_int == 8080


def test_convert_default_backend_tls_and_addresses():
    spec = {
        "defaultBackend": {"service": {"name": "def", "port": {"number": 80}}},
        "tls": [{"hosts": ["a.example.com", "b.example.com"], "secretName": "cert"}],
    }
    doc = _ingress(**spec)
    doc["status"] = {
        "loadBalancer": {"ingress": [{"ip": "10.0.0.1"}, {"ip": "10.0.0.2", "hostname": "lb.example.com"}]}
    }
    ing = convert_to_ingress(doc)
    assert ing.default_backend.is_default_backend
    assert ing.default_backend.svc_name == "def"
    assert ing.default_backend.svc_port_int == 80
    assert set(ing.tls) == {"a.example.com", "b.example.com"}
    assert ing.tls["b.example.com"].secret_name == "cert"
    assert ing.addresses == ["10.0.0.1", "lb.example.com"]


def test_convert_ingress_rejects_other_types():
    with pytest.raises(TypeError, match="unrecognized type"):
        convert_to_ingress({"apiVersion": "v1", "kind": "Service"})
    with pytest.raises(TypeError):
        convert_to_ingress("not a resource")


def test_convert_ingress_class():
    doc = {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "IngressClass",
        "metadata": {"name": "haproxy", "annotations": {"a/b": "c"}},
        "spec": {"controller": "haproxy.org/ingress-controller"},
    }
    cls = convert_to_ingress_class(doc)
    assert cls.name == "haproxy"
    assert cls.controller == "haproxy.org/ingress-controller"
    assert cls.annotations == {"a/b": "c"}
    assert cls.api_version == NETWORKING_V1


def test_convert_ingress_class_rejects_ingress():
    with pytest.raises(TypeError):
        convert_to_ingress_class(_ingress())
# ingress_store

`ingress_store` keeps an in-memory picture of the Kubernetes resources an
HAProxy ingress controller cares about — namespaces, services, endpoint
slices, ingresses, ingress classes, secrets, config maps and Gateway API
objects (gateway classes, gateways, TCP routes, reference grants) — and
decides, event by event, whether the HAProxy configuration needs to be
regenerated.

It uses only the standard library.

## What is inside

| Module | Purpose |
| --- | --- |
| `ingress_store.store` | `K8s`, the store itself, with `NamespacesWatch` and `NotFoundError` |
| `ingress_store.events` | `EventHandlers` (mixed into `K8s`) and `merge_endpoints` |
| `ingress_store.types` | data classes for services, endpoints, ingresses, gateways, routes and their equality rules |
| `ingress_store.convert` | `convert_to_ingress`, `convert_to_ingress_class`, `copy_annotations` |
| `ingress_store.status` | the `Status` enum: `ADDED`, `MODIFIED`, `DELETED`, `ERROR`, `EMPTY` |
| `ingress_store.stringw` | `StringW` / `MapStringW`: string values that remember what changed |
| `ingress_store.flags` | `OSArgs`, `NamespaceValue`, `LogLevelValue` and `parse_os_args` |
| `ingress_store.helpers` | parsing of durations, sizes, integers and booleans, pod-name prefixes, FNV-1a hashing |
| `ingress_store.log` | `Logger`, `LogLevel`, `get_logger`, `get_k8s_api_logger` |
| `ingress_store.errors` | `ErrorList`, a collector that turns many errors into one |

## A store from command-line options

```python
from ingress_store.flags import parse_os_args
from ingress_store.store import K8s, NotFoundError

args = parse_os_args(["--configmap", "haproxy-controller/haproxy-kubernetes-ingress"])
k8s = K8s.from_args(args)

ns = k8s.get_namespace("default")      # created on first use
print(ns.relevant)                      # follows --namespace-whitelist / --namespace-blacklist

try:
    k8s.get_service("default", "web")
except NotFoundError as exc:
    print(exc)                          # service 'default/web' does not exist
```

`parse_os_args` raises `ValueError` on an unknown option or a bad value.
`get_service`, `get_secret` and `get_endpoints` raise `LookupError` when the
namespace is unknown; `get_service` and `get_secret` raise `NotFoundError`
(a `LookupError`) when the resource is missing or marked deleted.

## Applying events

Each `event_*` method of the store takes the incoming record, whose `status`
says what happened, and returns whether a sync is needed:

```python
from ingress_store.status import Status
from ingress_store.types import Service

ns = k8s.get_namespace("default")
k8s.event_service(ns, Service(namespace="default", name="web", status=Status.ADDED))  # True
k8s.get_service("default", "web").name                                                # "web"
```

`event_endpoints` also takes a callable that is given each runtime backend
that already existed and whether its port changed; whatever it raises is
logged as a warning. `K8s.clean()` is called once a sync cycle has been
applied: services, secrets and endpoint slices marked `DELETED` are dropped
and every other status is reset to `EMPTY`.

## Converting ingress documents

`convert_to_ingress` and `convert_to_ingress_class` take the object as a
plain mapping (for example decoded JSON) with `apiVersion` set to
`networking.k8s.io/v1`; anything else raises `TypeError`. Annotation names
lose their `prefix/` part:

```python
from ingress_store.convert import convert_to_ingress

ing = convert_to_ingress({
    "apiVersion": "networking.k8s.io/v1",
    "kind": "Ingress",
    "metadata": {"namespace": "default", "name": "web",
                 "annotations": {"haproxy.org/timeout-server": "30s"}},
    "spec": {"rules": [{"host": "example.com", "http": {"paths": [
        {"path": "/", "pathType": "Prefix",
         "backend": {"service": {"name": "web", "port": {"number": 80}}}}]}}]},
})
ing.annotations          # {"timeout-server": "30s"}
ing.rules["example.com"].paths["Prefix-/-"].svc_port_int   # 80
```

## Comparing resources

The equality rules ignore statuses, and lists such as listeners, backend
references and parent references are matched by name rather than position:

```python
from ingress_store.types import GatewayClass

a = GatewayClass(name="haproxy-gw-class", controller_name="example.net/gateway-controller")
b = GatewayClass(name="haproxy-gw-class", controller_name="example.net/gateway-controller")
assert a.equal(b)
```

`Gateway.validate()` raises `ValueError` for a gateway without listeners or
with two listeners on the same hostname/port/protocol.

## Small helpers

```python
from ingress_store.helpers import parse_time, parse_size, get_pod_prefix

parse_time("5s")                       # 5000 (milliseconds)
parse_size("2k")                       # 2048 (bytes)
get_pod_prefix("haproxy-7d9f-abcde")   # "haproxy"
```

Invalid input raises `ValueError` rather than returning an error value.

## What it does not do

The package holds and compares state only. It does not talk to a Kubernetes
API server, does not watch resources, does not write or reload an HAProxy
configuration, and has no command to run; `parse_os_args` only parses the
options into an `OSArgs` record.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.
"""In-memory store of Kubernetes ingress resources, their change events and comparison rules."""

__version__ = "0.1.0"
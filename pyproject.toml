[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ingress_store"
version = "0.1.0"
description = "In-memory store of Kubernetes ingress resources and their change events for an HAProxy ingress controller"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kubernetes",
    "ingress",
    "haproxy",
    "gateway-api",
    "controller",
    "store",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ingress_store"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iotkube"
version = "0.1.0"
description = "Opinionated Kubernetes provisioning for edge, IoT and resilient data platforms."
requires-python = ">=3.10"
keywords = ["kubernetes", "kubeadm", "iot", "edge", "cluster", "ssh", "provisioning"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "paramiko>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
iotkube = "iotkube.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["iotkube"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

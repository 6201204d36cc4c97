[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bootchart"
version = "0.1.0"
description = "Configuration, option handling and system helpers for a boot-time process chart recorder."
requires-python = ">=3.10"
dependencies = []
keywords = ["bootchart", "boot", "configuration", "cgroup", "os-release", "init"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Boot",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bootchart"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

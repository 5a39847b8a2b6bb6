[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pytraceroute"
version = "1.0.0"
description = "A small UDP traceroute that sends hand-built IPv4 probes and reads ICMP replies"
requires-python = ">=3.10"
dependencies = []
keywords = ["traceroute", "icmp", "udp", "network", "diagnostics", "raw-socket"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pytraceroute = "pytraceroute.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pytraceroute"]

[tool.pytest.ini_options]
addopts = "-ra"

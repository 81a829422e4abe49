[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pktcraft"
version = "0.1.0"
description = "Build and decode Ethernet, ARP, IPv4, ICMP, TCP, UDP, DNS, DHCP and AR.Drone packets as raw bytes"
requires-python = ">=3.10"
dependencies = []
keywords = ["packet", "ethernet", "arp", "ipv4", "tcp", "udp", "icmp", "dns", "dhcp", "network"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pktcraft"]

[tool.pytest.ini_options]
addopts = "-ra"

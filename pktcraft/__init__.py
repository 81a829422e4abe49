"""Build and decode Ethernet, ARP, IPv4, ICMP, TCP, UDP, DNS, DHCP and AR.Drone packets as raw bytes."""

__version__ = "0.1.0"
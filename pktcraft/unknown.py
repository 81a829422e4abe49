"""Quick classification of raw frames whose protocol is not known in advance."""

from __future__ import annotations

import ipaddress
import struct

from .eth import (
    ETH_HDR_LEN,
    MAX_PACKET_LEN,
    ZERO_MAC,
    PacketError,
    format_mac,
    hexdump,
    parse_mac,
)
from .ip import IP_HDR_LEN, _ipv4_text

_ETHERTYPE_IPV4 = 0x0800
_ETHERTYPE_ARP = 0x0806
_IPPROTO_ICMP = 1
_IPPROTO_TCP = 6
_IPPROTO_UDP = 17

_PORTS = struct.Struct("!HH")
_L4_OFFSET = ETH_HDR_LEN + IP_HDR_LEN


class UnknownPacket:
    """A frame decoded only far enough to tell its protocols, addresses and ports."""

    def __init__(self, packet=None):
        self.clear()
        if packet is not None:
            self.cast(packet)

    @property
    def length(self) -> int:
        """Length of the parsed frame."""
        return len(self.data)

    def clear(self):
        """Reset every flag and field to its default."""
        self.is_eth = False
        self.is_arp = False
        self.is_ip = False
        self.is_icmp = False
        self.is_tcp = False
        self.is_udp = False
        self.eth_src = ZERO_MAC
        self.eth_dst = ZERO_MAC
        self.ip_src = "0.0.0.0"
        self.ip_dst = "0.0.0.0"
        self.tcp_src = 0
        self.tcp_dst = 0
        self.udp_src = 0
        self.udp_dst = 0
        self.data = b""

    def cast(self, packet) -> bool:
        """Classify the frame; return False when its L3 or L4 protocol is not known."""
        packet = bytes(packet)
        self.clear()
        if not ETH_HDR_LEN <= len(packet) <= MAX_PACKET_LEN:
            raise PacketError(
                f"UnknownPacket: packet length is not supported (len={len(packet)})"
            )
        self.data = packet
        self.is_eth = True
        self.eth_dst = format_mac(packet[0:6])
        self.eth_src = format_mac(packet[6:12])
        (ether_type,) = struct.unpack_from("!H", packet, 12)

        if ether_type == _ETHERTYPE_ARP:
            self.is_arp = True
            return True
        if ether_type != _ETHERTYPE_IPV4:
            return False

        if len(packet) < _L4_OFFSET:
            raise PacketError("UnknownPacket: truncated IPv4 header")
        self.is_ip = True
        protocol = packet[ETH_HDR_LEN + 9]
        self.ip_src = _ipv4_text(packet[ETH_HDR_LEN + 12:ETH_HDR_LEN + 16])
        self.ip_dst = _ipv4_text(packet[ETH_HDR_LEN + 16:ETH_HDR_LEN + 20])

        if protocol == _IPPROTO_ICMP:
            self.is_icmp = True
            return True
        if protocol not in (_IPPROTO_TCP, _IPPROTO_UDP):
            return False
        if len(packet) < _L4_OFFSET + _PORTS.size:
            raise PacketError("UnknownPacket: truncated transport header")
        src, dst = _PORTS.unpack_from(packet, _L4_OFFSET)
        if protocol == _IPPROTO_TCP:
            self.is_tcp = True
            self.tcp_src, self.tcp_dst = src, dst
        else:
            self.is_udp = True
            self.udp_src, self.udp_dst = src, dst
        return True

    def summary(self) -> str:
        kinds = (
            (self.is_tcp, "TCP"),
            (self.is_udp, "UDP"),
            (self.is_icmp, "ICMP"),
            (self.is_ip, "IP"),
            (self.is_arp, "ARP"),
        )
        head = "unknown(packet=[" + "".join(f"{name}|" for flag, name in kinds if flag)
        if self.is_eth:
            head += "ETH]  "

        if self.is_tcp:
            body = f"{self.ip_src}:{self.tcp_src} > {self.ip_dst}:{self.tcp_dst}"
        elif self.is_udp:
            body = f"{self.ip_src}:{self.udp_src} > {self.ip_dst}:{self.udp_dst}"
        elif self.is_icmp:
            body = f"{self.ip_src} > {self.ip_dst} "
        elif self.is_ip:
            body = f"{self.ip_src} > {self.ip_dst}"
        elif self.is_arp:
            body = f"{self.eth_src} > {self.eth_dst} "
        elif self.is_eth:
            body = f"{self.eth_src} > {self.eth_dst}"
        else:
            body = "no support"
        return f"{head}{body} len={self.length}"

    def ipaddr_is(self, addr) -> bool:
        """True if the frame is IPv4 and the address is its source or destination."""
        if not self.is_ip:
            return False
        try:
            wanted = ipaddress.IPv4Address(addr)
        except (ValueError, TypeError) as exc:
            raise PacketError(f"invalid IPv4 address: {addr!r}") from exc
        return wanted in (
            ipaddress.IPv4Address(self.ip_src),
            ipaddress.IPv4Address(self.ip_dst),
        )

    def macaddr_is(self, addr) -> bool:
        """True if the MAC address is the frame's source or destination."""
        if not self.is_eth:
            return False
        wanted = parse_mac(addr)
        return wanted in (parse_mac(self.eth_src), parse_mac(self.eth_dst))

    def port_is(self, port) -> bool:
        """True if the frame is TCP or UDP and the port is its source or destination."""
        if self.is_tcp:
            return port in (self.tcp_src, self.tcp_dst)
        if self.is_udp:
            return port in (self.udp_src, self.udp_dst)
        return False

    def hex(self) -> str:
        """Return a hex dump of the frame."""
        return hexdump(self.data)
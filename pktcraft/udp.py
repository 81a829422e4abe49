"""UDP datagrams carried in IPv4 packets."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass

from .eth import ETH_HDR_LEN, PacketError
from .ip import IP_HDR_LEN, IPPacket

UDP_HDR_LEN = 8
IPPROTO_UDP = 17

_UDP_HEADER = struct.Struct("!HHHH")

_HELP = """\
UDP Packet Class---------------------------------------
src    : source port : 16 bit field
dst    : dest port   : 16 bit field
length : length      : 16 bit field
-------------------------------------------------------"""


def _service(port: int) -> str:
    try:
        return socket.getservbyport(port, "udp")
    except (OSError, OverflowError, TypeError):
        return "unknown"


@dataclass
class UdpHeader:
    """User-facing UDP header fields."""

    src: int = 53
    dst: int = 53
    length: int = 8


class UdpPacket(IPPacket):
    """A UDP datagram with IPv4 and Ethernet framing."""

    MIN_LEN = ETH_HDR_LEN + IP_HDR_LEN + UDP_HDR_LEN

    def clear(self):
        super().clear()
        self.udp = UdpHeader()

    def _udp_frame(self) -> bytes:
        """Return the Ethernet, IPv4 and UDP headers."""
        self.ip.protocol = IPPROTO_UDP
        self.ip.tot_len = IP_HDR_LEN + self.udp.length
        frame = self._ip_frame()
        try:
            header = _UDP_HEADER.pack(self.udp.src, self.udp.dst, self.udp.length, 0)
        except struct.error as exc:
            raise PacketError(f"bad UDP field: {exc}") from exc
        return frame + header

    def compile(self) -> bytes:
        self.data = self._udp_frame() + self.payload
        return self.data

    def cast(self, packet):
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        src, dst, length, _ = _UDP_HEADER.unpack_from(packet, ETH_HDR_LEN + IP_HDR_LEN)
        self.udp = UdpHeader(src=src, dst=dst, length=length)
        self.payload = packet[self.MIN_LEN:]

    def summary(self) -> str:
        return f"UDP({self.udp.src} -> {self.udp.dst}) "

    def info(self) -> str:
        self.compile()
        udp = self.udp
        return "\n".join([
            super().info(),
            " * User Datagram Protocol ",
            f"    - Source Port     :  {udp.src} ({_service(udp.src)})",
            f"    - Destination Port:  {udp.dst} ({_service(udp.dst)})",
            f"    - Length          :  {udp.length} ",
        ])

    def help(self) -> str:
        return _HELP
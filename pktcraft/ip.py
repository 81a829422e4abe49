"""IPv4 packets carried in Ethernet frames."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass

from .eth import ETH_HDR_LEN, EthernetPacket, PacketError, format_mac

IP_HDR_LEN = 20
ETHERTYPE_IPV4 = 0x0800

_IP_HEADER = struct.Struct("!BBHHHBBH4s4s")

_PROTOCOLS = {
    0: "Not Set. Empty IP Packet",
    1: "ICMP",
    2: "IGMP",
    4: "IPv4 on IP",
    6: "TCP",
    17: "UDP",
    41: "IPv6 on IP",
}

_HELP = """\
IP Packet Class------------------------------------------------
tos      : type of service   :  8 bit field
tot_len  : total length      : 16 bit field
id       : identification    : 16 bit field
frag_off : fragment offset   : 16 bit field
ttl      : time to leave     :  8 bit field
protocol : L4 protocol       :  8 bit field
src      : source ip address : 32 bit field
dst      : dest ip address   : 32 bit field
----------------------------------------------------------------"""


def _ipv4_bytes(addr) -> bytes:
    try:
        return ipaddress.IPv4Address(addr).packed
    except (ValueError, TypeError) as exc:
        raise PacketError(f"invalid IPv4 address: {addr!r}") from exc


def _ipv4_text(addr) -> str:
    return str(ipaddress.IPv4Address(_ipv4_bytes(addr)))


def internet_checksum(data) -> int:
    """Return the one's-complement checksum of the bytes."""
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    total = sum(word for (word,) in struct.iter_unpack("!H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


@dataclass
class IPHeader:
    """User-facing IPv4 header fields."""

    tos: int = 0
    tot_len: int = 20
    id: int = 1
    frag_off: int = 0
    ttl: int = 64
    protocol: int = 0
    src: str = "0.0.0.0"
    dst: str = "127.0.0.1"


class IPPacket(EthernetPacket):
    """An IPv4 packet with Ethernet framing."""

    MIN_LEN = ETH_HDR_LEN + IP_HDR_LEN

    def clear(self):
        super().clear()
        self.ip = IPHeader()

    def _ip_frame(self) -> bytes:
        """Return the Ethernet and IPv4 headers, checksum filled in."""
        self.eth.type = ETHERTYPE_IPV4
        ip = self.ip
        try:
            header = _IP_HEADER.pack(
                0x45, ip.tos, ip.tot_len, ip.id, ip.frag_off, ip.ttl, ip.protocol, 0,
                _ipv4_bytes(ip.src), _ipv4_bytes(ip.dst),
            )
        except struct.error as exc:
            raise PacketError(f"bad IP field: {exc}") from exc
        checksum = struct.pack("!H", internet_checksum(header))
        return self._eth_bytes() + header[:10] + checksum + header[12:]

    def compile(self) -> bytes:
        self.data = self._ip_frame() + self.payload
        return self.data

    def cast(self, packet):
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        (_, tos, tot_len, ident, frag_off, ttl, protocol, _, src, dst) = (
            _IP_HEADER.unpack_from(packet, ETH_HDR_LEN)
        )
        self.ip = IPHeader(
            tos=tos, tot_len=tot_len, id=ident, frag_off=frag_off, ttl=ttl,
            protocol=protocol, src=_ipv4_text(src), dst=_ipv4_text(dst),
        )
        self.payload = packet[ETH_HDR_LEN + IP_HDR_LEN:]

    def summary(self) -> str:
        self.compile()
        return (
            f"IP{{ {_ipv4_text(self.ip.src)}({format_mac(self.eth.src)}) -> "
            f"{_ipv4_text(self.ip.dst)}({format_mac(self.eth.dst)}) }}"
        )

    def info(self) -> str:
        self.compile()
        ip = self.ip
        name = _PROTOCOLS.get(ip.protocol, "Unknown")
        return "\n".join([
            super().info(),
            " * Internet Protocol version 4",
            f"    - Source          :  {_ipv4_text(ip.src)} ",
            f"    - Destination     :  {_ipv4_text(ip.dst)} ",
            f"    - Protocol        :  {name} ({ip.protocol}) ",
            f"    - Time to Leave   :  {ip.ttl} ",
            f"    - Total Length    :  {ip.tot_len} ",
            f"    - Identification  :  {ip.id} ",
        ])

    def help(self) -> str:
        return _HELP
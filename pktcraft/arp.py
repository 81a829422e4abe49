"""ARP packets carried in Ethernet frames."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass
from enum import IntEnum

from .eth import ETH_HDR_LEN, ZERO_MAC, EthernetPacket, PacketError, format_mac, parse_mac

ARP_HDR_LEN = 28
ETHERTYPE_ARP = 0x0806

_ARP_HEADER = struct.Struct("!HHBBH6s4s6s4s")

_HELP = """\
ARP Packet Class----------------------------------------------------
operation : ARP operation code      : 16 bit field
src_mac   : sender hardware address : 48 bit field
src_ip    : sender protocol address : 32 bit field
dst_mac   : target hardware address : 48 bit field
dst_ip    : target protocol address : 32 bit field
--------------------------------------------------------------------"""


class ArpOperation(IntEnum):
    REQUEST = 1
    REPLY = 2
    RARP_REQUEST = 3
    RARP_REPLY = 4


_OPERATION_NAMES = {
    ArpOperation.REQUEST: "ARP Request",
    ArpOperation.REPLY: "ARP Reply",
    ArpOperation.RARP_REQUEST: "RARP Request",
    ArpOperation.RARP_REPLY: "RARP Reply",
    -1: "Not Set",
}


def _ipv4_bytes(addr) -> bytes:
    try:
        return ipaddress.IPv4Address(addr).packed
    except (ValueError, TypeError) as exc:
        raise PacketError(f"invalid IPv4 address: {addr!r}") from exc


def _ipv4_text(addr) -> str:
    return str(ipaddress.IPv4Address(_ipv4_bytes(addr)))


@dataclass
class ArpHeader:
    """User-facing ARP fields."""

    src_ip: str = "0.0.0.0"
    dst_ip: str = "0.0.0.0"
    src_mac: str = ZERO_MAC
    dst_mac: str = ZERO_MAC
    operation: int = ArpOperation.REQUEST


class ArpPacket(EthernetPacket):
    """An Ethernet/IPv4 ARP packet."""

    MIN_LEN = ETH_HDR_LEN + ARP_HDR_LEN

    def clear(self):
        super().clear()
        self.arp = ArpHeader()

    def compile(self) -> bytes:
        self.eth.type = ETHERTYPE_ARP
        arp = self.arp
        try:
            header = _ARP_HEADER.pack(
                1, 0x0800, 6, 4, arp.operation,
                parse_mac(arp.src_mac), _ipv4_bytes(arp.src_ip),
                parse_mac(arp.dst_mac), _ipv4_bytes(arp.dst_ip),
            )
        except struct.error as exc:
            raise PacketError(f"bad ARP field: {exc}") from exc
        self.data = self._eth_bytes() + header + self.payload
        return self.data

    def cast(self, packet):
        """Fill the fields from raw bytes; bytes after the ARP header are not kept."""
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        _, _, _, _, operation, sha, spa, tha, tpa = _ARP_HEADER.unpack_from(packet, ETH_HDR_LEN)
        self.arp = ArpHeader(
            src_ip=_ipv4_text(spa), dst_ip=_ipv4_text(tpa),
            src_mac=format_mac(sha), dst_mac=format_mac(tha),
            operation=operation,
        )
        self.payload = b""

    def summary(self) -> str:
        arp = self.arp
        if arp.operation == ArpOperation.REQUEST:
            return f"ARP{{ who has {_ipv4_text(arp.dst_ip)} tell {format_mac(arp.src_mac)} }}"
        if arp.operation == ArpOperation.REPLY:
            return f"ARP{{ {_ipv4_text(arp.src_ip)} is at {format_mac(arp.src_mac)} }}"
        return "ARP{ other arp operation!! }"

    def info(self) -> str:
        self.compile()
        arp = self.arp
        name = _OPERATION_NAMES.get(arp.operation, "Unknown")
        return "\n".join([
            super().info(),
            " * Address Resolution Protocol ",
            f"    - Opcode          :  {name} ({int(arp.operation)}) ",
            f"    - Sender Mac      :  {format_mac(arp.src_mac)} ",
            f"    - Sender IP       :  {_ipv4_text(arp.src_ip)}  ",
            f"    - Target Mac      :  {format_mac(arp.dst_mac)} ",
            f"    - Target IP       :  {_ipv4_text(arp.dst_ip)}  ",
        ])

    def help(self) -> str:
        return _HELP
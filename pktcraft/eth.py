"""Ethernet frames, MAC address helpers and hex dumps."""

from __future__ import annotations

import string
import struct
from dataclasses import dataclass

ETH_HDR_LEN = 14
MAX_PACKET_LEN = 10000
ZERO_MAC = "00:00:00:00:00:00"

_ETH_HEADER = struct.Struct("!6s6sH")

_ETHER_TYPES = {
    0x0800: "IPv4",
    0x0806: "ARP",
    0x8035: "RARP",
    0x8191: "NetBios",
    0x86DD: "IPv6",
}

_HELP = """\
Ethernet Packet Class-------------------------------------------------
dst   : Destination Hardware Address : 48 bit field
src   : source      Hardware Address : 48 bit field
type  : ethernet type                : 16 bit field
----------------------------------------------------------------------"""


class PacketError(ValueError):
    """A packet or one of its fields cannot be built or parsed."""


def parse_mac(text) -> bytes:
    """Return the six octets of a MAC address given as text or bytes."""
    if isinstance(text, (bytes, bytearray)):
        if len(text) != 6:
            raise PacketError(f"MAC address must be 6 octets, got {len(text)}")
        return bytes(text)
    parts = str(text).split(":")
    well_formed = len(parts) == 6 and all(
        1 <= len(part) <= 2 and all(c in string.hexdigits for c in part)
        for part in parts
    )
    if not well_formed:
        raise PacketError(f"invalid MAC address: {text!r}")
    return bytes(int(part, 16) for part in parts)


def format_mac(value) -> str:
    """Return a MAC address as lower-case colon-separated text."""
    return ":".join(f"{octet:02x}" for octet in parse_mac(value))


def _hexdump_row(offset: int, chunk: bytes) -> str:
    cells = [f"{octet:02x} " for octet in chunk] + ["   "] * (16 - len(chunk))
    prefix = f"{offset:04x}:    " if chunk else ""
    hex_part = prefix + "".join(cells[:8]) + " " + "".join(cells[8:])
    chars = "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in chunk)
    text = chars[:8] + ("  " + chars[8:] if len(chunk) > 8 else "")
    ascii_part = ("  " + text if chunk else "") + " " * (16 - len(chunk))
    return hex_part + ascii_part + ("\n" if len(chunk) == 16 else "")


def hexdump(data) -> str:
    """Return a hex and ASCII dump of the bytes, sixteen to a row."""
    data = bytes(data)
    offsets = range(0, len(data), 16) or range(1)
    rows = "".join(_hexdump_row(offset, data[offset:offset + 16]) for offset in offsets)
    return f"hexdump len: {len(data)} \n{rows}\n"


@dataclass
class EthernetHeader:
    """User-facing Ethernet header fields."""

    src: str = ZERO_MAC
    dst: str = ZERO_MAC
    type: int = 0


class EthernetPacket:
    """An Ethernet frame with an optional payload."""

    MIN_LEN = ETH_HDR_LEN
    MAX_LEN = MAX_PACKET_LEN

    def __init__(self, packet=None):
        self.clear()
        if packet is not None:
            self.cast(packet)

    @property
    def length(self) -> int:
        """Length of the last compiled or parsed packet."""
        return len(self.data)

    def clear(self):
        """Reset every field to its default."""
        self.eth = EthernetHeader()
        self.payload = b""
        self.data = b""

    def _check_length(self, packet: bytes) -> None:
        if not self.MIN_LEN <= len(packet) <= self.MAX_LEN:
            raise PacketError(
                f"{type(self).__name__}: packet length is not supported ({len(packet)})"
            )

    def _eth_bytes(self) -> bytes:
        try:
            return _ETH_HEADER.pack(
                parse_mac(self.eth.dst), parse_mac(self.eth.src), self.eth.type
            )
        except struct.error as exc:
            raise PacketError(f"bad Ethernet field: {exc}") from exc

    def compile(self) -> bytes:
        """Build the wire bytes from the fields and return them."""
        self.data = self._eth_bytes() + self.payload
        return self.data

    def cast(self, packet):
        """Fill the fields from raw packet bytes."""
        packet = bytes(packet)
        self._check_length(packet)
        dst, src, ether_type = _ETH_HEADER.unpack_from(packet)
        self.eth = EthernetHeader(src=format_mac(src), dst=format_mac(dst), type=ether_type)
        self.payload = packet[ETH_HDR_LEN:]
        self.data = packet

    def add_data(self, data):
        """Set the bytes that follow the headers."""
        data = bytes(data)
        if len(data) > MAX_PACKET_LEN:
            raise PacketError(f"payload too long ({len(data)})")
        self.payload = data

    def hex(self) -> str:
        """Compile and return a hex dump of the packet."""
        return hexdump(self.compile())

    def summary(self) -> str:
        return (
            f"Ethernet{{{format_mac(self.eth.src)} -> {format_mac(self.eth.dst)} "
            f"type=0x{self.eth.type:04x}}}"
        )

    def info(self) -> str:
        self.compile()
        src = format_mac(self.eth.src)
        dst = format_mac(self.eth.dst)
        name = _ETHER_TYPES.get(self.eth.type, "Unknown")
        return "\n".join([
            f" * Ethernet  {src} -> {dst} ",
            f"    - Destination     :  {dst}   ",
            f"    - Source          :  {src}   ",
            f"    - Type            :  {name}  (0x{self.eth.type:04x})   ",
        ])

    def help(self) -> str:
        return _HELP
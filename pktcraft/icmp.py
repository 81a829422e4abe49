"""ICMP messages carried in IPv4 packets."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .eth import ETH_HDR_LEN, PacketError
from .ip import IP_HDR_LEN, IPPacket, _ipv4_bytes, _ipv4_text, internet_checksum

ICMP_HDR_LEN = 4
IPPROTO_ICMP = 1

ECHO_REPLY = 0
DESTINATION_UNREACHABLE = 3
REDIRECT = 5
ECHO_REQUEST = 8
ROUTER_ADVERTISEMENT = 9
ROUTER_SOLICITATION = 10
TIME_EXCEEDED = 11

_ICMP_HEADER = struct.Struct("!BBH")
_ECHO = struct.Struct("!HH")
_WORD = struct.Struct("!BBH")

_UNREACH_CODES = {
    0: "Net Unreachable",
    1: "Host Unreachable",
    2: "Protocol Unreachable",
    3: "Port Unreachable",
    255: "Not Set",
}

_HELP = """\
ICMP Packet Class--------------------------------------------------
type
code
echo_id
echo_seq
gw_addr
unreach_len
next_mtu
exceeded_len
-------------------------------------------------------------------"""


@dataclass
class IcmpHeader:
    """User-facing ICMP fields for the supported message types."""

    type: int = ECHO_REQUEST
    code: int = 0
    echo_id: int = 0
    echo_seq: int = 0
    gw_addr: str = "0.0.0.0"
    unreach_len: int = 0
    next_mtu: int = 0
    exceeded_len: int = 0


def _unsupported(header: IcmpHeader) -> PacketError:
    if header.type == ROUTER_ADVERTISEMENT and header.code == 0:
        return PacketError("ICMP router advertisement is not supported")
    if header.type == ROUTER_SOLICITATION and header.code == 0:
        return PacketError("ICMP router solicitation is not supported")
    return PacketError(
        f"ICMP type {header.type} code {header.code} is not supported"
    )


class IcmpPacket(IPPacket):
    """An ICMP message with IPv4 and Ethernet framing."""

    MIN_LEN = ETH_HDR_LEN + IP_HDR_LEN + ICMP_HDR_LEN

    def clear(self):
        super().clear()
        self.icmp = IcmpHeader()
        self.ext_data = b""
        self.checksum = 0

    def _icmp_body(self) -> bytes:
        h = self.icmp
        try:
            if h.type in (ECHO_REQUEST, ECHO_REPLY):
                return _ECHO.pack(h.echo_id, h.echo_seq)
            if h.type == DESTINATION_UNREACHABLE:
                return _WORD.pack(0, h.unreach_len, h.next_mtu)
            if h.type == TIME_EXCEEDED:
                return _WORD.pack(0, h.exceeded_len, 0)
            if h.type == REDIRECT:
                return _ipv4_bytes(h.gw_addr)
        except struct.error as exc:
            raise PacketError(f"bad ICMP field: {exc}") from exc
        raise _unsupported(h)

    def compile(self) -> bytes:
        body = self._icmp_body()
        h = self.icmp
        self.ip.tot_len = IP_HDR_LEN + ICMP_HDR_LEN + len(body) + len(self.ext_data)
        self.ip.protocol = IPPROTO_ICMP
        frame = self._ip_frame()
        try:
            head = _ICMP_HEADER.pack(h.type, h.code, 0)
        except struct.error as exc:
            raise PacketError(f"bad ICMP field: {exc}") from exc
        self.checksum = internet_checksum(head + body + self.ext_data)
        head = _ICMP_HEADER.pack(h.type, h.code, self.checksum)
        self.data = frame + head + body + self.ext_data
        return self.data

    def cast(self, packet):
        """Fill the fields from raw bytes; bytes after the message body become ext_data."""
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        offset = ETH_HDR_LEN + IP_HDR_LEN
        icmp_type, code, checksum = _ICMP_HEADER.unpack_from(packet, offset)
        header = IcmpHeader(type=icmp_type, code=code)
        offset += ICMP_HDR_LEN
        try:
            if icmp_type in (ECHO_REQUEST, ECHO_REPLY):
                header.echo_id, header.echo_seq = _ECHO.unpack_from(packet, offset)
                offset += _ECHO.size
            elif icmp_type == DESTINATION_UNREACHABLE:
                _, header.unreach_len, header.next_mtu = _WORD.unpack_from(packet, offset)
                offset += _WORD.size
            elif icmp_type == TIME_EXCEEDED:
                _, header.exceeded_len, _ = _WORD.unpack_from(packet, offset)
                offset += _WORD.size
            elif icmp_type == REDIRECT:
                if len(packet) < offset + 4:
                    raise struct.error("redirect gateway address truncated")
                header.gw_addr = _ipv4_text(packet[offset:offset + 4])
                offset += 4
            else:
                raise _unsupported(header)
        except struct.error as exc:
            raise PacketError(f"truncated ICMP message: {exc}") from exc
        self.icmp = header
        self.checksum = checksum
        self.ext_data = packet[offset:]

    def icmp_add_data(self, data):
        """Set the bytes that follow the ICMP message body."""
        self.ext_data = bytes(data)

    def summary(self) -> str:
        self.compile()
        h = self.icmp
        if h.type == ECHO_REQUEST:
            text = f"Echo Request id=0x{h.echo_id:04x} seq={h.echo_seq} ttl={self.ip.ttl}"
        elif h.type == ECHO_REPLY:
            text = f"Echo Reply id=0x{h.echo_id:04x} seq={h.echo_seq} ttl={self.ip.ttl}"
        elif h.type == DESTINATION_UNREACHABLE:
            text = f"Destination Unreachable code={h.code}"
        elif h.type == TIME_EXCEEDED:
            text = "Time Exceeded"
        else:
            text = f"Redirect gw_addr={_ipv4_text(h.gw_addr)}"
        return f"ICMP{{ {text} }}"

    def info(self) -> str:
        self.compile()
        h = self.icmp
        lines = [
            super().info(),
            " * Internet Control Message Protocol ",
            f"    - Type            :  {h.type} ",
            f"    - Code            :  {h.code} ",
            f"    - Header Checksum :  0x{self.checksum:x} ",
        ]
        if h.type in (ECHO_REQUEST, ECHO_REPLY):
            lines.append(f"    - Identifier      :  0x{h.echo_id:04x} ")
            lines.append(f"    - Sequence Number :  {h.echo_seq} ")
        elif h.type == DESTINATION_UNREACHABLE:
            lines.append(
                f"    - Dest Unreach    :  {_UNREACH_CODES.get(h.code, 'Unknown')} "
            )
        elif h.type == TIME_EXCEEDED:
            lines.append("    - Time Exceeded   :  This is Time Exceeded ")
        else:
            lines.append(f"    - Redirect GW     :  {_ipv4_text(h.gw_addr)} ")
        return "\n".join(lines)

    def help(self) -> str:
        return _HELP
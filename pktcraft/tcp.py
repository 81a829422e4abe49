"""TCP segments carried in IPv4 packets."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass, field

from .eth import ETH_HDR_LEN, PacketError
from .ip import IP_HDR_LEN, IPPacket, _ipv4_bytes, internet_checksum

TCP_HDR_LEN = 20
IPPROTO_TCP = 6

_TCP_HEADER = struct.Struct("!HHIIBBHHH")
_CHECKSUM_OFFSET = 16

# (field name, bit in the flags octet, summary name, info letter)
_FLAG_BITS = (
    ("fin", 0x01, "FIN", "F"),
    ("syn", 0x02, "SYN", "S"),
    ("rst", 0x04, "RST", "R"),
    ("psh", 0x08, "PSH", "P"),
    ("ack", 0x10, "ACK", "A"),
    ("urg", 0x20, "URG", "U"),
)

_HELP = """\
TCP Packet Class----------------------------------------
src       : source port        : 16 bit field
dst       : dest port          : 16 bit field
seq       : sequence number    : 32 bit field
ack       : acknowledge number : 32 bit field
flags.fin : fin flag           :  1 bit field
flags.syn : syn flag           :  1 bit field
flags.rst : rst flag           :  1 bit field
flags.psh : psh flag           :  1 bit field
flags.ack : ack flag           :  1 bit field
flags.urg : urg flag           :  1 bit field
window    : window size        : 16 bit field
--------------------------------------------------------"""


def _service(port: int) -> str:
    try:
        return socket.getservbyport(port, "tcp")
    except (OSError, OverflowError, TypeError):
        return "unknown"


@dataclass
class TcpFlags:
    """The six TCP control flags, each 0 or 1."""

    fin: int = 0
    syn: int = 0
    rst: int = 0
    psh: int = 0
    ack: int = 0
    urg: int = 0


def _flags_to_byte(flags: TcpFlags) -> int:
    return sum(bit for name, bit, _, _ in _FLAG_BITS if getattr(flags, name))


def _flags_from_byte(value: int) -> TcpFlags:
    return TcpFlags(**{name: int(bool(value & bit)) for name, bit, _, _ in _FLAG_BITS})


@dataclass
class TcpHeader:
    """User-facing TCP header fields."""

    src: int = 20
    dst: int = 80
    flags: TcpFlags = field(default_factory=TcpFlags)
    window: int = 8192
    seq: int = 0
    ack: int = 0


class TcpPacket(IPPacket):
    """A TCP segment with IPv4 and Ethernet framing."""

    MIN_LEN = ETH_HDR_LEN + IP_HDR_LEN + TCP_HDR_LEN

    def clear(self):
        super().clear()
        self.tcp = TcpHeader()
        self.checksum = 0

    def compile(self) -> bytes:
        self.ip.protocol = IPPROTO_TCP
        self.ip.tot_len = IP_HDR_LEN + TCP_HDR_LEN + len(self.payload)
        frame = self._ip_frame()
        tcp = self.tcp
        try:
            header = _TCP_HEADER.pack(
                tcp.src, tcp.dst, tcp.seq, tcp.ack,
                (TCP_HDR_LEN >> 2) << 4, _flags_to_byte(tcp.flags),
                tcp.window, 0, 0,
            )
        except struct.error as exc:
            raise PacketError(f"bad TCP field: {exc}") from exc
        segment_len = len(header) + len(self.payload)
        pseudo = (
            _ipv4_bytes(self.ip.src) + _ipv4_bytes(self.ip.dst)
            + struct.pack("!BBH", 0, IPPROTO_TCP, segment_len)
        )
        self.checksum = internet_checksum(pseudo + header + self.payload)
        header = (
            header[:_CHECKSUM_OFFSET]
            + struct.pack("!H", self.checksum)
            + header[_CHECKSUM_OFFSET + 2:]
        )
        self.data = frame + header + self.payload
        return self.data

    def cast(self, packet):
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        src, dst, seq, ack, _, flags, window, checksum, _ = _TCP_HEADER.unpack_from(
            packet, ETH_HDR_LEN + IP_HDR_LEN
        )
        self.tcp = TcpHeader(
            src=src, dst=dst, flags=_flags_from_byte(flags),
            window=window, seq=seq, ack=ack,
        )
        self.checksum = checksum
        self.payload = packet[self.MIN_LEN:]

    def summary(self) -> str:
        self.compile()
        tcp = self.tcp
        names = "".join(
            label for name, _, label, _ in _FLAG_BITS if getattr(tcp.flags, name) == 1
        )
        return (
            f"TCP{{ {tcp.src} > {tcp.dst} [{names}] seq={tcp.seq} "
            f"win={tcp.window} len={TCP_HDR_LEN >> 2} }}"
        )

    def info(self) -> str:
        self.compile()
        tcp = self.tcp
        letters = "".join(
            letter for name, _, _, letter in _FLAG_BITS if getattr(tcp.flags, name)
        )
        return "\n".join([
            super().info(),
            " * Transmission Control Protocol ",
            f"    - Source Port     :  {tcp.src} ({_service(tcp.src)}) ",
            f"    - Dest Port       :  {tcp.dst} ({_service(tcp.dst)}) ",
            f"    - Frags           :  {letters}",
            f"    - Window size     :  {tcp.window} ",
            f"    - Checksum        :  0x{self.checksum:04x} ",
            f"    - sequence        :  {tcp.seq} ",
            f"    - acknowledge     :  {tcp.ack} ",
        ])

    def help(self) -> str:
        return _HELP
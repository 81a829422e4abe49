"""DHCP messages carried in UDP datagrams."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .eth import ETH_HDR_LEN, ZERO_MAC, PacketError, format_mac, parse_mac
from .ip import IP_HDR_LEN, _ipv4_bytes, _ipv4_text
from .udp import UDP_HDR_LEN, UdpPacket

DHCP_HDR_LEN = 240
DHCP_MAGIC = bytes((0x63, 0x82, 0x53, 0x63))
MAX_OPTION_DATA = 128
OPTION_END = 255

_DHCP_HEADER = struct.Struct("!BBBBIHH4s4s4s4s16s64s128s4s")
_SNAME_LEN = 64
_FILE_LEN = 128

_MESSAGE_TYPES = {
    1: "Discover",
    2: "Offer",
    3: "Request",
    4: "Decline",
    5: "ACK",
    6: "NAK",
    7: "Release",
    8: "Inform",
    9: "Forcerenew",
    10: "Lease Query",
    11: "Lease Unassigned",
    12: "Lease Unknown",
    13: "Lease Active",
}

_HELP = """\
DHCP Packet Class-----------------------------------
op                  : message type            :   8 bit field
htype               : hardware type           :   8 bit field
hlen                : hardware address length :   8 bit field
hops                : hop                     :   8 bit field
xid                 : transaction id          :  32 bit field
secs                : seconds elapsed         :  16 bit field
flags               : flags                   :  16 bit field
ciaddr              : client ip address       :  32 bit field
yiaddr              : your(client) ip address :  32 bit field
siaddr              : next server ip address  :  32 bit field
giaddr              : relay agent ip address  :  32 bit field
chaddr              : client hardware address :  48 bit field
sname               : server hostname         :  64 byte field
file                : boot filename           : 128 byte field

options             : option list             :  list of DhcpOption
  DhcpOption {type: 8 bit, data: up to 128 bytes}
----------------------------------------------------"""


@dataclass
class DhcpOption:
    """One DHCP option: its type code and its data bytes."""

    type: int
    data: bytes = b""


@dataclass
class DhcpHeader:
    """User-facing DHCP fields and options."""

    op: int = 1
    htype: int = 0x01
    hlen: int = 6
    hops: int = 0
    xid: int = 0
    secs: int = 0
    flags: int = 0
    ciaddr: str = "0.0.0.0"
    yiaddr: str = "0.0.0.0"
    siaddr: str = "0.0.0.0"
    giaddr: str = "0.0.0.0"
    chaddr: str = ZERO_MAC
    sname: bytes = b""
    file: bytes = b""
    options: list = field(default_factory=list)


def _fixed_bytes(value, size: int, name: str) -> bytes:
    raw = value.encode("latin-1") if isinstance(value, str) else bytes(value)
    if len(raw) > size:
        raise PacketError(f"DHCP {name} longer than {size} bytes ({len(raw)})")
    return raw


def _c_string(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def _option_bytes(options) -> bytes:
    out = bytearray()
    for option in options:
        data = bytes(option.data)
        if not 0 <= option.type <= 255:
            raise PacketError(f"DHCP option type out of range: {option.type}")
        if len(data) > MAX_OPTION_DATA:
            raise PacketError(f"DHCP option data too long ({len(data)})")
        out += bytes((option.type, len(data))) + data
    return bytes(out)


class DhcpPacket(UdpPacket):
    """A DHCP message with UDP, IPv4 and Ethernet framing."""

    MIN_LEN = ETH_HDR_LEN + IP_HDR_LEN + UDP_HDR_LEN + DHCP_HDR_LEN

    def clear(self):
        super().clear()
        self.dhcp = DhcpHeader()

    def compile(self) -> bytes:
        d = self.dhcp
        hw_len = max(0, min(d.hlen, 6))
        try:
            header = _DHCP_HEADER.pack(
                d.op, d.htype, d.hlen, d.hops, d.xid, d.secs, d.flags,
                _ipv4_bytes(d.ciaddr), _ipv4_bytes(d.yiaddr),
                _ipv4_bytes(d.siaddr), _ipv4_bytes(d.giaddr),
                parse_mac(d.chaddr)[:hw_len],
                _fixed_bytes(d.sname, _SNAME_LEN, "sname"),
                _fixed_bytes(d.file, _FILE_LEN, "file"),
                DHCP_MAGIC,
            )
        except struct.error as exc:
            raise PacketError(f"bad DHCP field: {exc}") from exc
        options = _option_bytes(d.options)
        self.udp.length = UDP_HDR_LEN + DHCP_HDR_LEN + len(options)
        self.data = self._udp_frame() + header + options
        return self.data

    def cast(self, packet):
        """Fill the fields from raw bytes; option parsing stops at the end option."""
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        offset = ETH_HDR_LEN + IP_HDR_LEN + UDP_HDR_LEN
        (op, htype, hlen, hops, xid, secs, flags, ciaddr, yiaddr, siaddr, giaddr,
         chaddr, sname, file, _magic) = _DHCP_HEADER.unpack_from(packet, offset)

        options = []
        pos = offset + DHCP_HDR_LEN
        while pos < len(packet):
            kind = packet[pos]
            if kind == OPTION_END:
                options.append(DhcpOption(OPTION_END, b""))
                break
            if pos + 2 > len(packet):
                raise PacketError("truncated DHCP option header")
            end = pos + 2 + packet[pos + 1]
            if end > len(packet):
                raise PacketError("truncated DHCP option data")
            options.append(DhcpOption(kind, packet[pos + 2:end]))
            pos = end

        hw = chaddr[:min(hlen, 6)].ljust(6, b"\x00")
        self.dhcp = DhcpHeader(
            op=op, htype=htype, hlen=hlen, hops=hops, xid=xid, secs=secs, flags=flags,
            ciaddr=_ipv4_text(ciaddr), yiaddr=_ipv4_text(yiaddr),
            siaddr=_ipv4_text(siaddr), giaddr=_ipv4_text(giaddr),
            chaddr=format_mac(hw),
            sname=sname.rstrip(b"\x00"), file=file.rstrip(b"\x00"),
            options=options,
        )
        self.payload = b""

    def set_option(self, index, type, data):
        """Put an option at the index, replacing one there or appending after the last."""
        options = self.dhcp.options
        if not 0 <= index <= len(options):
            raise IndexError(f"DHCP option index out of range: {index}")
        option = DhcpOption(type, bytes(data))
        if index == len(options):
            options.append(option)
        else:
            options[index] = option

    def summary(self) -> str:
        self.compile()
        options = self.dhcp.options
        message_type = options[0].data[0] if options and options[0].data else 0
        name = _MESSAGE_TYPES.get(message_type)
        if name is None:
            raise PacketError("DHCP message type not found")
        return f"DHCP{{ {name} Transaction ID 0x{self.dhcp.xid:04x} }}"

    def info(self) -> str:
        d = self.dhcp
        lines = [
            " * Dynamic Host Configuration Protocol ",
            f"    - Message Tpye    : {d.op} ",
            f"    - Hardware Type   : 0x{d.htype:02x} ",
            f"    - Hardware Len    : {d.hlen} ",
            f"    - Hops            : {d.hops} ",
            f"    - Transaction ID  : 0x{d.xid:08x} ",
            f"    - Seconds Elapsed : {d.secs} ",
            f"    - Flags           : 0x{d.flags:04x} ",
            f"    - Client IP       : {_ipv4_text(d.ciaddr)} ",
            f"    - Your IP         : {_ipv4_text(d.yiaddr)} ",
            f"    - Next Server IP  : {_ipv4_text(d.siaddr)} ",
            f"    - Relay Agent IP  : {_ipv4_text(d.giaddr)} ",
            f"    - Client Mac Addr : {format_mac(d.chaddr)} ",
            f"    - Server Hostname : {_c_string(_fixed_bytes(d.sname, _SNAME_LEN, 'sname'))} ",
            f"    - Boot Filename   : {_c_string(_fixed_bytes(d.file, _FILE_LEN, 'file'))} ",
        ]
        lines.extend(f"    - Option          : ({option.type}) " for option in d.options)
        return "\n".join(lines)

    def help(self) -> str:
        return _HELP
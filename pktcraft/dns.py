"""DNS messages carried in UDP datagrams."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .eth import ETH_HDR_LEN, PacketError
from .ip import IP_HDR_LEN
from .udp import UDP_HDR_LEN, UdpPacket

DNS_HDR_LEN = 12
MAX_LABEL_LEN = 63
MAX_NAME_LEN = 255

TYPE_A = 1
TYPE_NS = 2
TYPE_CNAME = 5
TYPE_AAAA = 28

_DNS_HEADER = struct.Struct("!HHHHHH")
_QUESTION_TAIL = struct.Struct("!HH")
_RECORD_TAIL = struct.Struct("!HHIH")
_POINTER = struct.Struct("!H")
_DNS_OFFSET = ETH_HDR_LEN + IP_HDR_LEN + UDP_HDR_LEN

_HELP = """\
DNS Packet Class----------------------------------------------------------------
id                  : identifier                           : 16 bit field
flags.qr            : query response flag                  :  1 bit field
flags.opcode        : operation code                       :  4 bit field
flags.aa            : authoritative answer                 :  1 bit field
flags.tc            : truncation flag                      :  1 bit field
flags.rd            : recursion desired flag               :  1 bit field
flags.ra            : recursion available flag             :  1 bit field
flags.nouse         : not use this field                   :  3 bit field
flags.rcode         : response code                        :  4 bit field
queries[n].name     : query name                           : character string
queries[n].type     : query type                           : 16 bit field
queries[n].cls      : query class                          : 16 bit field
answers[n].name     : answer record name                   : 16 bit field
answers[n].type     : answer record type                   : 16 bit field
answers[n].cls      : answer record class                  : 16 bit field
answers[n].ttl      : answer record time to leave          : 32 bit field
answers[n].data     : answer record data                   : bytes
authorities[n].name : authority record name                : 16 bit field
authorities[n].type : authority record type                : 16 bit field
authorities[n].cls  : authority record class               : 16 bit field
authorities[n].ttl  : authority record time                : 32 bit field
authorities[n].data : authority record data                : bytes
additionals[n].name : additional record name               : 16 bit field
additionals[n].type : additional record type               : 16 bit field
additionals[n].cls  : additional record class              : 16 bit field
additionals[n].ttl  : additional record time               : 32 bit field
additionals[n].data : additional record data               : bytes
--------------------------------------------------------------------------------"""


def _is_name_char(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c == "-")


def encode_dns_name(name) -> bytes:
    """Return a dotted name as length-prefixed labels ending in a zero octet."""
    out = bytearray()
    for label in str(name).split("."):
        if not label:
            continue
        raw = label.encode("latin-1")
        if len(raw) > MAX_LABEL_LEN:
            raise PacketError(f"DNS label longer than {MAX_LABEL_LEN} octets: {label!r}")
        out += bytes((len(raw),)) + raw
    out += b"\x00"
    if len(out) > MAX_NAME_LEN:
        raise PacketError(f"DNS name longer than {MAX_NAME_LEN} octets")
    return bytes(out)


def format_record_data(data, type) -> str:
    """Return record data as text for A, NS, CNAME and AAAA records."""
    data = bytes(data)
    if type == TYPE_A:
        if len(data) < 4:
            raise PacketError("A record data shorter than 4 octets")
        return ".".join(str(octet) for octet in data[:4])
    if type in (TYPE_NS, TYPE_CNAME):
        raw = data[1:33].split(b"\x00", 1)[0].decode("latin-1")
        return "".join(c if _is_name_char(c) else "." for c in raw)
    if type == TYPE_AAAA:
        if len(data) < 16:
            raise PacketError("AAAA record data shorter than 16 octets")
        return ":".join(f"{word:04x}" for (word,) in struct.iter_unpack("!H", data[:16]))
    raise PacketError(f"DNS record type {type} is not supported")


@dataclass
class DnsFlags:
    """The flag bits of a DNS header."""

    qr: int = 0
    opcode: int = 0
    aa: int = 0
    tc: int = 0
    rd: int = 1
    ra: int = 0
    nouse: int = 0
    rcode: int = 0

    def to_word(self) -> int:
        parts = (
            (self.qr, 1, 15), (self.opcode, 4, 11), (self.aa, 1, 10), (self.tc, 1, 9),
            (self.rd, 1, 8), (self.ra, 1, 7), (self.nouse, 3, 4), (self.rcode, 4, 0),
        )
        return sum((value & ((1 << width) - 1)) << shift for value, width, shift in parts)

    @classmethod
    def from_word(cls, word: int) -> "DnsFlags":
        return cls(
            qr=(word >> 15) & 1, opcode=(word >> 11) & 0xF, aa=(word >> 10) & 1,
            tc=(word >> 9) & 1, rd=(word >> 8) & 1, ra=(word >> 7) & 1,
            nouse=(word >> 4) & 0x7, rcode=word & 0xF,
        )


@dataclass
class DnsQuery:
    """One entry of the question section."""

    name: str = "example.com"
    type: int = TYPE_A
    cls: int = 1


@dataclass
class DnsRecord:
    """One resource record; name is 0 for the root or a compression pointer."""

    name: int = 0xC00C
    type: int = TYPE_A
    cls: int = 1
    ttl: int = 0x00000B44
    data: bytes = bytes(4)


@dataclass
class DnsHeader:
    """User-facing DNS fields; section counts follow the list lengths."""

    id: int = 0
    flags: DnsFlags = field(default_factory=DnsFlags)
    queries: list = field(default_factory=lambda: [DnsQuery()])
    answers: list = field(default_factory=list)
    authorities: list = field(default_factory=list)
    additionals: list = field(default_factory=list)


def _encode_record(record: DnsRecord) -> bytes:
    data = bytes(record.data)
    try:
        name = b"\x00" if record.name == 0 else _POINTER.pack(record.name)
        tail = _RECORD_TAIL.pack(record.type, record.cls, record.ttl, len(data))
    except struct.error as exc:
        raise PacketError(f"bad DNS record field: {exc}") from exc
    return name + tail + data


def _decode_name(packet: bytes, offset: int) -> tuple:
    labels = []
    while True:
        if offset >= len(packet):
            raise PacketError("truncated DNS name")
        length = packet[offset]
        offset += 1
        if length == 0:
            break
        if length & 0xC0:
            raise PacketError("compressed names in the question section are not supported")
        if offset + length > len(packet):
            raise PacketError("truncated DNS label")
        labels.append(packet[offset:offset + length].decode("latin-1"))
        offset += length
    name = ".".join(labels)
    return "".join(c if _is_name_char(c) else "." for c in name), offset


def _decode_records(packet: bytes, offset: int, count: int, section: str) -> tuple:
    records = []
    for _ in range(count):
        if offset >= len(packet):
            raise PacketError(f"truncated DNS {section} record")
        first = packet[offset]
        try:
            if first == 0x00:
                name = 0
                offset += 1
            elif first & 0xC0 == 0xC0:
                (name,) = _POINTER.unpack_from(packet, offset)
                offset += 2
            else:
                raise PacketError(f"DNS {section} record name form is not supported")
            rtype, cls, ttl, length = _RECORD_TAIL.unpack_from(packet, offset)
        except struct.error as exc:
            raise PacketError(f"truncated DNS {section} record: {exc}") from exc
        offset += _RECORD_TAIL.size
        if offset + length > len(packet):
            raise PacketError(f"truncated DNS {section} record data")
        records.append(DnsRecord(name, rtype, cls, ttl, packet[offset:offset + length]))
        offset += length
    return records, offset


def _record_lines(title: str, index: int, record: DnsRecord) -> list:
    return [
        f"    - {title}[{index}]  ",
        f"         - name       : 0x{record.name:04x}",
        f"         - type       : 0x{record.type:04x} ",
        f"         - class      : 0x{record.cls:04x} ",
        f"         - ttl        : 0x{record.ttl:08x} ",
        f"         - data len   : 0x{len(record.data):04x} ",
        f"         - data       : {format_record_data(record.data, record.type)}",
    ]


class DnsPacket(UdpPacket):
    """A DNS message with UDP, IPv4 and Ethernet framing."""

    MIN_LEN = _DNS_OFFSET + DNS_HDR_LEN

    def clear(self):
        super().clear()
        self.dns = DnsHeader()

    def _dns_header(self) -> bytes:
        d = self.dns
        try:
            return _DNS_HEADER.pack(
                d.id, d.flags.to_word(), len(d.queries), len(d.answers),
                len(d.authorities), len(d.additionals),
            )
        except struct.error as exc:
            raise PacketError(f"bad DNS field: {exc}") from exc

    def _sections(self) -> bytes:
        d = self.dns
        out = bytearray()
        for query in d.queries:
            out += encode_dns_name(query.name)
            try:
                out += _QUESTION_TAIL.pack(query.type, query.cls)
            except struct.error as exc:
                raise PacketError(f"bad DNS query field: {exc}") from exc
        if d.flags.qr == 1:
            for record in (*d.answers, *d.authorities, *d.additionals):
                out += _encode_record(record)
        return bytes(out)

    def compile(self) -> bytes:
        header = self._dns_header()
        body = self._sections()
        self.udp.length = UDP_HDR_LEN + DNS_HDR_LEN + len(body)
        self.data = self._udp_frame() + header + body
        return self.data

    def cast(self, packet):
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        ident, word, qdcnt, ancnt, nscnt, arcnt = _DNS_HEADER.unpack_from(packet, _DNS_OFFSET)
        offset = _DNS_OFFSET + DNS_HDR_LEN

        queries = []
        for _ in range(qdcnt):
            name, offset = _decode_name(packet, offset)
            try:
                qtype, qcls = _QUESTION_TAIL.unpack_from(packet, offset)
            except struct.error as exc:
                raise PacketError(f"truncated DNS query: {exc}") from exc
            offset += _QUESTION_TAIL.size
            queries.append(DnsQuery(name, qtype, qcls))

        answers, offset = _decode_records(packet, offset, ancnt, "answer")
        authorities, offset = _decode_records(packet, offset, nscnt, "authority")
        additionals, offset = _decode_records(packet, offset, arcnt, "additional")

        self.dns = DnsHeader(
            id=ident, flags=DnsFlags.from_word(word), queries=queries,
            answers=answers, authorities=authorities, additionals=additionals,
        )
        self.payload = b""
        self.data = packet[:offset]

    def summary(self) -> str:
        self.compile()
        d = self.dns
        query = d.queries[0] if d.queries else DnsQuery()
        if d.flags.qr == 1:
            answer = d.answers[0] if d.answers else DnsRecord()
            data = format_record_data(answer.data, answer.type)
            return (
                f"DNS{{ Query response 0x{d.id:04x} {query.name} type={answer.type} "
                f"{data} }}"
            )
        return f"DNS{{ Query 0x{d.id:04x} {query.name} type={query.type} }}"

    def _count_lines(self) -> list:
        d = self.dns
        return [
            f"    - Question        : 0x{len(d.queries):04x}",
            f"    - Answer RRs      : 0x{len(d.answers):04x}",
            f"    - Authority RRs   : 0x{len(d.authorities):04x}",
            f"    - Additional RRs  : 0x{len(d.additionals):04x}",
        ]

    def _query_lines(self) -> list:
        lines = []
        for index, query in enumerate(self.dns.queries):
            lines += [
                f"    - Queries[{index}] ",
                f"         - name       : {query.name} ",
                f"         - type       : 0x{query.type:04x} ",
                f"         - class      : 0x{query.cls:04x} ",
            ]
        return lines

    def debug(self) -> str:
        self.compile()
        d = self.dns
        lines = [
            " **Domain Name System *******************************",
            f"    - Identification  : 0x{d.id:04x}",
            *self._count_lines(),
            *self._query_lines(),
        ]
        for index, record in enumerate(d.answers):
            address = bytes(record.data).split(b"\x00", 1)[0].decode("latin-1")
            lines += [
                f"    - Answer[{index}]  ",
                f"         - name       : 0x{record.name:04x}",
                f"         - type       : 0x{record.type:04x} ",
                f"         - class      : 0x{record.cls:04x} ",
                f"         - ttl        : 0x{record.ttl:08x} ",
                f"         - data len   : 0x{len(record.data):04x} ",
                f"         - address    : {address} ",
            ]
        lines.append(" ****************************************************")
        return "\n".join(lines)

    def info(self) -> str:
        self.compile()
        d = self.dns
        f = d.flags
        opcodes = {0: "standard query", 1: "inverse query", 2: "server status request"}
        lines = [
            super().info(),
            " * Domain Name System ",
            f"    - Identification  : 0x{d.id:04x}",
            f"    - Flags           : 0x{f.to_word():04x}",
            f"         - qr         : {f.qr}   " + ("(response)" if f.qr else "(query) "),
            f"         - opcode     : {f.opcode}   ({opcodes.get(f.opcode, 'malformed')}) ",
            f"         - aa         : {f.aa}   "
            + ("(have authority) " if f.aa == 1 else "(no authority)"),
            f"         - tc         : {f.tc}   "
            + ("(caption) " if f.tc == 1 else "(no caption)"),
            f"         - rd         : {f.rd}   "
            + ("(recursion desired) " if f.rd == 1 else "(no recursion)"),
            f"         - ra         : {f.ra}   "
            + ("(recursion available) " if f.ra == 1 else "(recursion unavailable)"),
            f"         - nouse      : {f.nouse}",
            f"         - rcode      : {f.rcode}",
            *self._count_lines(),
            *self._query_lines(),
        ]
        for index, record in enumerate(d.answers):
            lines += _record_lines("Answers", index, record)
        for index, record in enumerate(d.authorities):
            lines += _record_lines("Authoritative nameservers", index, record)
        for index, record in enumerate(d.additionals):
            lines += _record_lines("Additional records", index, record)
        return "\n".join(lines)

    def help(self) -> str:
        return _HELP
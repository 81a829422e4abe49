import struct

import pytest

from pktcraft.dns import (
    DnsFlags,
    DnsPacket,
    DnsQuery,
    DnsRecord,
    encode_dns_name,
    format_record_data,
)
from pktcraft.eth import PacketError

DNS_OFFSET = 14 + 20 + 8


def _response():
    pack = DnsPacket()
    pack.ip.src = "10.0.0.2"
    pack.ip.dst = "10.0.0.1"
    pack.dns.id = 0x1234
    pack.dns.flags.qr = 1
    pack.dns.flags.ra = 1
    pack.dns.queries = [DnsQuery("host.example.com", 1, 1)]
    pack.dns.answers = [DnsRecord(0xC00C, 1, 1, 0x0B44, bytes([10, 0, 0, 9]))]
    pack.dns.authorities = [
        DnsRecord(0xC00C, 2, 1, 300, encode_dns_name("ns.example.com"))
    ]
    pack.dns.additionals = [DnsRecord(0, 1, 1, 60, bytes([10, 0, 0, 53]))]
    return pack


def test_encode_dns_name_wire_form():
    assert encode_dns_name("example.com") == b"\x07example\x03com\x00"


def test_encode_dns_name_skips_empty_labels():
    assert encode_dns_name("a..b.") == encode_dns_name("a.b")


def test_encode_dns_name_rejects_long_label():
    with pytest.raises(PacketError):
        encode_dns_name("x" * 64 + ".com")


def test_format_a_record():
    assert format_record_data(bytes([10, 0, 0, 1]), 1) == "10.0.0.1"


def test_format_cname_record_reads_encoded_name():
    assert format_record_data(encode_dns_name("www.example.com"), 5) == "www.example.com"


def test_format_unsupported_type_raises():
    with pytest.raises(PacketError):
        format_record_data(b"\x00\x01", 15)


def test_defaults_follow_source():
    pack = DnsPacket()
    assert pack.dns.id == 0
    assert pack.dns.flags.rd == 1
    assert pack.dns.queries == [DnsQuery("example.com", 1, 1)]
    assert pack.udp.src == 53 and pack.udp.dst == 53


def test_flags_word_round_trip():
    flags = DnsFlags(qr=1, opcode=2, aa=1, tc=0, rd=1, ra=1, nouse=3, rcode=5)
    assert DnsFlags.from_word(flags.to_word()) == flags


def test_query_round_trip():
    pack = DnsPacket()
    pack.dns.id = 0x95DE
    pack.dns.queries = [DnsQuery("host.example.com", 28, 1)]
    raw = pack.compile()
    parsed = DnsPacket(raw)
    assert parsed.dns.id == 0x95DE
    assert parsed.dns.queries == pack.dns.queries
    assert parsed.dns.flags == pack.dns.flags
    assert parsed.data == raw


def test_response_round_trip():
    pack = _response()
    raw = pack.compile()
    parsed = DnsPacket(raw)
    assert parsed.dns == pack.dns
    assert parsed.compile() == raw


def test_header_counts_follow_lists():
    pack = _response()
    raw = pack.compile()
    _, _, qd, an, ns, ar = struct.unpack_from("!HHHHHH", raw, DNS_OFFSET)
    assert (qd, an, ns, ar) == (1, 1, 1, 1)


def test_udp_length_matches_compiled_size():
    raw = _response().compile()
    (udp_len,) = struct.unpack_from("!H", raw, 14 + 20 + 4)
    assert udp_len == len(raw) - 14 - 20


def test_query_omits_record_sections():
    with_records = _response()
    with_records.dns.flags.qr = 0
    plain = _response()
    plain.dns.flags.qr = 0
    plain.dns.answers = []
    plain.dns.authorities = []
    plain.dns.additionals = []
    assert len(with_records.compile()) == len(plain.compile())


def test_summary_query():
    pack = DnsPacket()
    pack.dns.id = 0x1234
    assert pack.summary() == "DNS{ Query 0x1234 example.com type=1 }"


def test_summary_response_shows_answer():
    text = _response().summary()
    assert text.startswith("DNS{ Query response 0x1234 host.example.com type=1")
    assert "10.0.0.9" in text


def test_info_lists_sections():
    text = _response().info()
    assert " * Domain Name System " in text
    assert "(recursion desired)" in text
    assert "ns.example.com" in text
    assert "10.0.0.53" in text


def test_debug_lists_query():
    text = DnsPacket().debug()
    assert "example.com" in text
    assert "Queries[0]" in text


def test_cast_too_short_raises():
    raw = DnsPacket().compile()
    with pytest.raises(PacketError):
        DnsPacket(raw[:DNS_OFFSET + 4])


def test_cast_rejects_unknown_record_name_form():
    pack = _response()
    raw = bytearray(pack.compile())
    record_at = DNS_OFFSET + 12 + len(encode_dns_name("host.example.com")) + 4
    raw[record_at] = 0x41
    with pytest.raises(PacketError):
        DnsPacket(bytes(raw))


def test_root_name_record_round_trip():
    pack = _response()
    parsed = DnsPacket(pack.compile())
    assert parsed.dns.additionals[0].name == 0
    assert parsed.dns.additionals[0].data == pack.dns.additionals[0].data


def test_help_mentions_fields():
    assert "flags.rcode" in DnsPacket().help()
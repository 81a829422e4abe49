import struct

import pytest

from pktcraft.eth import PacketError
from pktcraft.icmp import IcmpHeader, IcmpPacket
from pktcraft.ip import internet_checksum


def _echo():
    pack = IcmpPacket()
    pack.ip.src = "10.0.0.1"
    pack.ip.dst = "10.0.0.2"
    pack.icmp.echo_id = 0x1234
    pack.icmp.echo_seq = 7
    return pack


def test_echo_request_layout():
    data = _echo().compile()
    assert len(data) == 14 + 20 + 4 + 4
    assert data[14 + 9] == 1
    assert data[34] == 8
    assert data[35] == 0
    assert struct.unpack("!HH", data[38:42]) == (0x1234, 7)


def test_icmp_checksum_is_valid():
    pack = _echo()
    pack.icmp_add_data(b"0123456789")
    data = pack.compile()
    assert internet_checksum(data[34:]) == 0
    assert internet_checksum(data[14:34]) == 0


def test_total_length_counts_ext_data():
    pack = _echo()
    pack.icmp_add_data(b"0123456789")
    pack.compile()
    assert pack.ip.tot_len == 20 + 4 + 4 + 10


def test_echo_round_trip():
    pack = _echo()
    pack.icmp_add_data(b"ping data")
    parsed = IcmpPacket(pack.compile())
    assert parsed.icmp == pack.icmp
    assert parsed.ext_data == b"ping data"
    assert parsed.checksum == pack.checksum
    assert parsed.compile() == pack.data


def test_redirect_round_trip():
    pack = IcmpPacket()
    pack.icmp.type = 5
    pack.icmp.gw_addr = "123.123.123.123"
    parsed = IcmpPacket(pack.compile())
    assert parsed.icmp.gw_addr == "123.123.123.123"
    assert parsed.summary() == "ICMP{ Redirect gw_addr=123.123.123.123 }"


def test_unreachable_round_trip():
    pack = IcmpPacket()
    pack.icmp.type = 3
    pack.icmp.code = 3
    pack.icmp.next_mtu = 1500
    parsed = IcmpPacket(pack.compile())
    assert parsed.icmp == IcmpHeader(type=3, code=3, next_mtu=1500)
    assert parsed.summary() == "ICMP{ Destination Unreachable code=3 }"
    assert "    - Dest Unreach    :  Port Unreachable " in parsed.info()


def test_time_exceeded_round_trip():
    pack = IcmpPacket()
    pack.icmp.type = 11
    pack.icmp.exceeded_len = 5
    parsed = IcmpPacket(pack.compile())
    assert parsed.icmp.exceeded_len == 5
    assert parsed.summary() == "ICMP{ Time Exceeded }"


def test_echo_summary():
    assert _echo().summary() == "ICMP{ Echo Request id=0x1234 seq=7 ttl=64 }"


def test_echo_reply_summary():
    pack = _echo()
    pack.icmp.type = 0
    assert pack.summary() == "ICMP{ Echo Reply id=0x1234 seq=7 ttl=64 }"


@pytest.mark.parametrize("icmp_type", [9, 10, 13])
def test_unsupported_type_rejected_on_compile(icmp_type):
    pack = IcmpPacket()
    pack.icmp.type = icmp_type
    with pytest.raises(PacketError):
        pack.compile()


def test_unsupported_type_rejected_on_cast():
    data = bytearray(_echo().compile())
    data[34] = 10
    with pytest.raises(PacketError):
        IcmpPacket(bytes(data))


def test_truncated_echo_rejected():
    data = _echo().compile()[:40]
    with pytest.raises(PacketError):
        IcmpPacket(data)


def test_short_packet_rejected():
    with pytest.raises(PacketError):
        IcmpPacket(b"\x00" * 30)


def test_info_shows_identifier():
    text = _echo().info()
    assert " * Internet Control Message Protocol " in text
    assert "    - Identifier      :  0x1234 " in text


def test_help_lists_fields():
    assert "echo_seq" in IcmpPacket().help()
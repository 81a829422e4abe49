import pytest

from pktcraft.eth import ETH_HDR_LEN, PacketError
from pktcraft.ip import IP_HDR_LEN, IPHeader, IPPacket, internet_checksum


def make_packet():
    packet = IPPacket()
    packet.eth.src = "02:00:00:00:00:01"
    packet.eth.dst = "02:00:00:00:00:02"
    packet.ip.src = "10.0.0.1"
    packet.ip.dst = "10.0.0.2"
    return packet


def test_checksum_worked_example():
    header = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")
    assert internet_checksum(header) == 0xB861


def test_checksum_pads_odd_length():
    assert internet_checksum(b"\x01") == internet_checksum(b"\x01\x00")


def test_defaults():
    packet = IPPacket()
    assert packet.ip == IPHeader()
    assert packet.ip.ttl == 64
    assert packet.ip.dst == "127.0.0.1"


def test_compile_layout_and_checksum():
    data = make_packet().compile()
    assert len(data) == ETH_HDR_LEN + IP_HDR_LEN
    assert data[12:14] == b"\x08\x00"
    assert data[ETH_HDR_LEN] == 0x45
    assert internet_checksum(data[ETH_HDR_LEN:ETH_HDR_LEN + IP_HDR_LEN]) == 0


def test_round_trip():
    packet = make_packet()
    packet.ip.ttl = 7
    packet.ip.id = 4242
    packet.add_data(b"payload")
    raw = packet.compile()
    parsed = IPPacket(raw)
    assert parsed.ip == packet.ip
    assert parsed.eth == packet.eth
    assert parsed.payload == b"payload"
    assert parsed.compile() == raw


def test_cast_too_short():
    with pytest.raises(PacketError):
        IPPacket(bytes(ETH_HDR_LEN + IP_HDR_LEN - 1))


def test_invalid_address():
    packet = make_packet()
    packet.ip.dst = "10.0.0.300"
    with pytest.raises(PacketError):
        packet.compile()


def test_summary():
    assert make_packet().summary() == (
        "IP{ 10.0.0.1(02:00:00:00:00:01) -> 10.0.0.2(02:00:00:00:00:02) }"
    )


def test_info_names_protocol():
    packet = make_packet()
    packet.ip.protocol = 1
    info = packet.info()
    assert "ICMP (1)" in info
    assert "IPv4" in info


def test_help_mentions_fields():
    assert "source ip address" in IPPacket().help()
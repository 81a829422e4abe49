import pytest

from pktcraft.arp import ARP_HDR_LEN, ArpHeader, ArpOperation, ArpPacket
from pktcraft.eth import ETH_HDR_LEN, PacketError


def make_packet(operation=ArpOperation.REQUEST):
    packet = ArpPacket()
    packet.eth.src = "02:00:00:00:00:01"
    packet.eth.dst = "ff:ff:ff:ff:ff:ff"
    packet.arp = ArpHeader(
        src_ip="10.0.0.1",
        dst_ip="10.0.0.2",
        src_mac="02:00:00:00:00:01",
        dst_mac="02:00:00:00:00:02",
        operation=operation,
    )
    return packet


def test_default_operation_is_request():
    assert ArpPacket().arp.operation == ArpOperation.REQUEST


def test_compile_layout():
    data = make_packet().compile()
    assert len(data) == ETH_HDR_LEN + ARP_HDR_LEN
    assert data[12:14] == b"\x08\x06"
    assert data[14:20] == b"\x00\x01\x08\x00\x06\x04"
    assert data[20:22] == b"\x00\x01"


def test_round_trip():
    packet = make_packet(ArpOperation.REPLY)
    raw = packet.compile()
    parsed = ArpPacket(raw)
    assert parsed.arp == packet.arp
    assert parsed.eth == packet.eth
    assert parsed.compile() == raw


def test_cast_drops_trailing_bytes():
    raw = make_packet().compile() + b"extra"
    assert ArpPacket(raw).payload == b""


def test_cast_too_short():
    with pytest.raises(PacketError):
        ArpPacket(bytes(ETH_HDR_LEN + ARP_HDR_LEN - 1))


def test_summary_request():
    assert make_packet().summary() == "ARP{ who has 10.0.0.2 tell 02:00:00:00:00:01 }"


def test_summary_reply():
    packet = make_packet(ArpOperation.REPLY)
    assert packet.summary() == "ARP{ 10.0.0.1 is at 02:00:00:00:00:01 }"


def test_summary_other_operation():
    assert make_packet(7).summary() == "ARP{ other arp operation!! }"


def test_info_names_operation():
    info = make_packet(ArpOperation.REPLY).info()
    assert "ARP Reply (2)" in info
    assert "Address Resolution Protocol" in info


def test_invalid_mac_rejected():
    packet = make_packet()
    packet.arp.dst_mac = "not-a-mac"
    with pytest.raises(PacketError):
        packet.compile()


def test_help_mentions_fields():
    assert "sender hardware address" in ArpPacket().help()
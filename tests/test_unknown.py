import pytest

from pktcraft.arp import ArpPacket
from pktcraft.eth import EthernetPacket, PacketError, hexdump
from pktcraft.icmp import IcmpPacket
from pktcraft.tcp import TcpPacket
from pktcraft.udp import UdpPacket
from pktcraft.unknown import UnknownPacket

SRC_MAC = "02:00:00:00:00:01"
DST_MAC = "02:00:00:00:00:02"


def _tcp_bytes():
    pkt = TcpPacket()
    pkt.eth.src = SRC_MAC
    pkt.eth.dst = DST_MAC
    pkt.ip.src = "10.0.0.1"
    pkt.ip.dst = "10.0.0.2"
    pkt.tcp.src = 1234
    pkt.tcp.dst = 80
    return pkt.compile()


def _udp_bytes():
    pkt = UdpPacket()
    pkt.eth.src = SRC_MAC
    pkt.eth.dst = DST_MAC
    pkt.ip.src = "10.0.0.3"
    pkt.ip.dst = "10.0.0.4"
    pkt.udp.src = 5000
    pkt.udp.dst = 53
    return pkt.compile()


def test_tcp_frame_is_classified():
    data = _tcp_bytes()
    pkt = UnknownPacket(data)
    assert (pkt.is_eth, pkt.is_ip, pkt.is_tcp) == (True, True, True)
    assert (pkt.is_udp, pkt.is_icmp, pkt.is_arp) == (False, False, False)
    assert (pkt.tcp_src, pkt.tcp_dst) == (1234, 80)
    assert (pkt.ip_src, pkt.ip_dst) == ("10.0.0.1", "10.0.0.2")
    assert (pkt.eth_src, pkt.eth_dst) == (SRC_MAC, DST_MAC)
    assert pkt.length == len(data)


def test_tcp_summary():
    data = _tcp_bytes()
    pkt = UnknownPacket(data)
    assert pkt.summary() == (
        f"unknown(packet=[TCP|IP|ETH]  10.0.0.1:1234 > 10.0.0.2:80 len={len(data)}"
    )


def test_udp_frame_and_ports():
    pkt = UnknownPacket(_udp_bytes())
    assert pkt.is_udp and not pkt.is_tcp
    assert (pkt.udp_src, pkt.udp_dst) == (5000, 53)
    assert pkt.port_is(53) is True
    assert pkt.port_is(5000) is True
    assert pkt.port_is(80) is False
    assert pkt.summary().startswith("unknown(packet=[UDP|IP|ETH]  10.0.0.3:5000 > 10.0.0.4:53")


def test_icmp_frame():
    icmp = IcmpPacket()
    icmp.ip.src = "10.0.0.5"
    icmp.ip.dst = "10.0.0.6"
    pkt = UnknownPacket(icmp.compile())
    assert pkt.is_icmp and pkt.is_ip
    assert pkt.port_is(0) is False
    assert "ICMP|IP|ETH]  10.0.0.5 > 10.0.0.6 " in pkt.summary()


def test_arp_frame():
    arp = ArpPacket()
    arp.eth.src = SRC_MAC
    arp.eth.dst = DST_MAC
    pkt = UnknownPacket(arp.compile())
    assert pkt.is_arp and not pkt.is_ip
    assert pkt.ipaddr_is("0.0.0.0") is False
    assert pkt.summary().startswith(f"unknown(packet=[ARP|ETH]  {SRC_MAC} > {DST_MAC} ")


def test_other_ether_type_returns_false():
    eth = EthernetPacket()
    eth.eth.type = 0x86DD
    pkt = UnknownPacket()
    assert pkt.cast(eth.compile()) is False
    assert pkt.is_eth and not pkt.is_ip


def test_cast_returns_true_for_known_protocol():
    pkt = UnknownPacket()
    assert pkt.cast(_tcp_bytes()) is True


def test_address_matching():
    pkt = UnknownPacket(_tcp_bytes())
    assert pkt.ipaddr_is("10.0.0.1")
    assert pkt.ipaddr_is("10.0.0.2")
    assert not pkt.ipaddr_is("10.0.0.9")
    assert pkt.macaddr_is(SRC_MAC)
    assert pkt.macaddr_is(DST_MAC.upper())
    assert not pkt.macaddr_is("02:00:00:00:00:09")


def test_invalid_mac_argument_raises():
    pkt = UnknownPacket(_tcp_bytes())
    with pytest.raises(PacketError):
        pkt.macaddr_is("not-a-mac")


def test_empty_packet_summary():
    pkt = UnknownPacket()
    assert pkt.summary() == "unknown(packet=[no support len=0"
    assert pkt.macaddr_is(SRC_MAC) is False


@pytest.mark.parametrize("size", [0, 13, 10001])
def test_bad_length_raises(size):
    with pytest.raises(PacketError):
        UnknownPacket(b"\x00" * size)


def test_truncated_ip_raises():
    frame = bytes(12) + b"\x08\x00" + bytes(5)
    with pytest.raises(PacketError):
        UnknownPacket(frame)


def test_hex_matches_hexdump_of_frame():
    data = _udp_bytes()
    pkt = UnknownPacket(data)
    assert pkt.hex() == hexdump(data)
    assert pkt.hex().startswith(f"hexdump len: {len(data)} ")


def test_recast_clears_previous_state():
    pkt = UnknownPacket(_tcp_bytes())
    pkt.cast(_udp_bytes())
    assert not pkt.is_tcp
    assert (pkt.tcp_src, pkt.tcp_dst) == (0, 0)
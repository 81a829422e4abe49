# pktcraft

Build network packets field by field and get their raw bytes, or decode
captured frames back into fields. Everything happens in memory: pktcraft
assembles and parses bytes and returns text descriptions of them.

## Layers

| Module              | Class            | Field attributes                          |
|---------------------|------------------|-------------------------------------------|
| `pktcraft.eth`      | `EthernetPacket` | `eth`                                     |
| `pktcraft.arp`      | `ArpPacket`      | `eth`, `arp`                              |
| `pktcraft.ip`       | `IPPacket`       | `eth`, `ip`                               |
| `pktcraft.icmp`     | `IcmpPacket`     | `eth`, `ip`, `icmp`, `ext_data`           |
| `pktcraft.tcp`      | `TcpPacket`      | `eth`, `ip`, `tcp`                        |
| `pktcraft.udp`      | `UdpPacket`      | `eth`, `ip`, `udp`                        |
| `pktcraft.dns`      | `DnsPacket`      | `eth`, `ip`, `udp`, `dns`                 |
| `pktcraft.dhcp`     | `DhcpPacket`     | `eth`, `ip`, `udp`, `dhcp`                |
| `pktcraft.ardrone`  | `ArdronePacket`  | `eth`, `ip`, `udp`, `ardrone`             |
| `pktcraft.unknown`  | `UnknownPacket`  | `is_eth`, `is_ip`, `is_tcp`, ... flags    |

Each field attribute is a dataclass (`EthernetHeader`, `IPHeader`,
`TcpHeader`, `DnsHeader` and so on). MAC addresses are colon-separated text,
IPv4 addresses are dotted text.

## Installation

```
pip install .
```

The package needs nothing beyond the standard library.

## Building a packet

Set the fields you need and call `compile()`. It returns the frame's bytes
and also keeps them in `data`; `length` gives their count. Lengths, protocol
numbers, the EtherType and checksums are filled in for you.

```python
from pktcraft.tcp import TcpPacket

pkt = TcpPacket()
pkt.eth.src = "02:00:00:00:00:01"
pkt.eth.dst = "ff:ff:ff:ff:ff:ff"
pkt.ip.src = "10.0.0.2"
pkt.ip.dst = "10.0.0.1"
pkt.tcp.src = 12345
pkt.tcp.dst = 80
pkt.tcp.flags.syn = 1
frame = pkt.compile()
print(pkt.summary())
print(pkt.hex())
```

Bytes that follow the headers can be set with `add_data()` on the Ethernet,
IP, UDP and TCP classes, and with `icmp_add_data()` on `IcmpPacket`.

A DNS query lists its questions in `dns.queries` (`DnsQuery` objects);
answer, authority and additional records (`DnsRecord`) are written only when
`dns.flags.qr` is 1. The section counts follow the lengths of the lists.
`encode_dns_name()` and `format_record_data()` are available on their own.

DHCP options are `DhcpOption(type, data)` entries in `dhcp.options`;
`DhcpPacket.set_option(index, type, data)` replaces the option at an index or
appends one right after the last.

AR.Drone datagrams carry the AT commands listed in `ardrone.commands`
(`ArdroneCommand` values), each written from the matching fields
(`ardrone.pcmd`, `ardrone.ref`, `ardrone.configids`, `ardrone.config`,
`ardrone.ctrl`) and ended by a carriage return. ANIM, FTRIM, LED and COMWDG
commands are written as empty text.

## Decoding a frame

Pass the raw frame to a packet's constructor or call `cast()`. Frames of an
unsupported length, truncated headers and unsupported message kinds raise
`pktcraft.eth.PacketError`, a subclass of `ValueError`.

```python
from pktcraft.unknown import UnknownPacket
from pktcraft.dns import DnsPacket

frame = ...  # bytes from a capture
probe = UnknownPacket(frame)
if probe.is_udp and probe.port_is(53):
    print(DnsPacket(frame).summary())
```

`UnknownPacket.cast()` returns `False` when the frame's network or transport
protocol is not one it knows; `ipaddr_is()`, `macaddr_is()` and `port_is()`
test whether an address or port is the frame's source or destination.

## Describing packets

Every packet class has `summary()` for a one-line description, `info()` for
a field-by-field breakdown of all its layers, and `help()` listing the fields
you can set; all three return strings. `ArdronePacket.dsummary()` prefixes
the summary with the IP addresses, and `DnsPacket.debug()` gives a shorter
breakdown of the DNS part. `pktcraft.eth.hexdump()` returns a hex and ASCII
dump of any byte string, and `hex()` returns one of a packet.

Some descriptions are limited: `DhcpPacket.summary()` raises `PacketError`
when the first option is not a known message type, and
`ArdronePacket.summary()` raises it for ANIM, FTRIM, LED and COMWDG commands.

## What it does not do

pktcraft does not open network interfaces, send frames, capture traffic or
read and write capture files, and it has no command-line program. Hand the
bytes from `compile()` to whatever sending or capture tool you use.

## Running the tests

```
pip install .[test]
pytest
```
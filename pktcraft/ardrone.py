"""AR.Drone AT command datagrams carried over UDP."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum

from .eth import ETH_HDR_LEN, PacketError
from .ip import IP_HDR_LEN, _ipv4_text
from .udp import UDP_HDR_LEN, UdpPacket

COMMAND_SEPARATOR = b"\r"
MAX_COMMANDS = 10
MAX_COMMAND_LEN = 256
MAX_STRING_LEN = 255

_PAYLOAD_OFFSET = ETH_HDR_LEN + IP_HDR_LEN + UDP_HDR_LEN

_HELP = """\
ar_drone Packet Class-----------------------------------------------------------
pcmd.seq                : pcmd sequence number             : long value
pcmd.flag               : pcmd flags                       : long value
pcmd.roll               : pcmd roll                        : long value
pcmd.pitch              : pcmd pitch                       : long value
pcmd.gaz                : pcmd gaz                         : long value
pcmd.yaw_x              : pcmd yaw x                       : long value
pcmd.yaw_y              : pcmd yaw y                       : long value
pcmd.yaw_z              : pcmd yaw z                       : long value
ref.seq                 : ref  sequence number             : long value
ref.command             : ref  command                     : long value
configids.seq           : configids sequence number        : long value
configids.session       : configids current session id     : string
configids.user          : configids current user id        : string
configids.app           : configids current application id : string
config.seq              : config sequence number           : long value
config.name             : config option name               : string
config.parameter        : config option parameter          : string
ctrl.seq                : ctrl sequence number             : long value
ctrl.ctrlmode           : ctrl control mode                : long value
ctrl.fw_update_filesize : ctrl firmware update file size   : long value

commands                : command type list                : up to 10 ArdroneCommand
---------------------------------------------------------------------------------"""


class ArdroneCommand(IntEnum):
    """The AT command kinds a datagram can carry."""

    PCMD = 1
    REF = 2
    CONFIG_IDS = 3
    ANIM = 4
    FTRIM = 5
    CONFIG = 6
    LED = 7
    COMWDG = 8
    CTRL = 9


# Order matters: "AT*CONFIG_IDS" must be tried before "AT*CONFIG=".
_PREFIXES = (
    (b"AT*PCMD", ArdroneCommand.PCMD),
    (b"AT*REF", ArdroneCommand.REF),
    (b"AT*CONFIG_IDS", ArdroneCommand.CONFIG_IDS),
    (b"AT*ANIM", ArdroneCommand.ANIM),
    (b"AT*FTRIM", ArdroneCommand.FTRIM),
    (b"AT*CONFIG=", ArdroneCommand.CONFIG),
    (b"AT*LED", ArdroneCommand.LED),
    (b"AT*COMWDG", ArdroneCommand.COMWDG),
    (b"AT*CTRL", ArdroneCommand.CTRL),
)

_UNIMPLEMENTED = {
    ArdroneCommand.ANIM,
    ArdroneCommand.FTRIM,
    ArdroneCommand.LED,
    ArdroneCommand.COMWDG,
}

_INT = r"\s*([+-]?\d+)"
_STR = r'"([^"]*)"'
_PCMD_RE = re.compile(r"AT\*PCMD_MAG=" + ",".join([_INT] * 8))
_REF_RE = re.compile(r"AT\*REF=" + ",".join([_INT] * 2))
_CONFIG_IDS_RE = re.compile(r"AT\*CONFIG_IDS=" + ",".join([_INT, _STR, _STR, _STR]))
_CONFIG_RE = re.compile(r"AT\*CONFIG=" + ",".join([_INT, _STR, _STR]))
_CTRL_RE = re.compile(r"AT\*CTRL=" + ",".join([_INT] * 3))


@dataclass
class Pcmd:
    """Progressive movement command fields."""

    seq: int = 0
    flag: int = 0
    roll: int = 0
    pitch: int = 0
    gaz: int = 0
    yaw_x: int = 0
    yaw_y: int = 0
    yaw_z: int = 0


@dataclass
class Ref:
    """Take-off, landing and emergency command fields."""

    seq: int = 0
    command: int = 0


@dataclass
class ConfigIds:
    """Session, user and application identifiers for configuration."""

    seq: int = 0
    session: str = ""
    user: str = ""
    app: str = ""


@dataclass
class Config:
    """A configuration option and its value."""

    seq: int = 0
    name: str = ""
    parameter: str = ""


@dataclass
class Ctrl:
    """Control mode command fields."""

    seq: int = 0
    ctrlmode: int = 0
    fw_update_filesize: int = 0


@dataclass
class ArdroneFields:
    """All AT command fields and the ordered list of commands to send."""

    pcmd: Pcmd = field(default_factory=Pcmd)
    ref: Ref = field(default_factory=Ref)
    configids: ConfigIds = field(default_factory=ConfigIds)
    config: Config = field(default_factory=Config)
    ctrl: Ctrl = field(default_factory=Ctrl)
    commands: list = field(default_factory=list)


def _quoted(value, name: str) -> str:
    text = str(value)
    if '"' in text or "\r" in text:
        raise PacketError(f"AR Drone {name} may not contain quotes or carriage returns")
    if len(text) > MAX_STRING_LEN:
        raise PacketError(f"AR Drone {name} longer than {MAX_STRING_LEN} characters")
    return text


def _as_command(value) -> ArdroneCommand:
    try:
        return ArdroneCommand(value)
    except ValueError as exc:
        raise PacketError(f"AR Drone command type not found: {value!r}") from exc


class ArdronePacket(UdpPacket):
    """A UDP datagram holding AR.Drone AT commands separated by carriage returns."""

    def clear(self):
        super().clear()
        self.ardrone = ArdroneFields()

    def _command_text(self, command: ArdroneCommand) -> str:
        a = self.ardrone
        if command == ArdroneCommand.PCMD:
            p = a.pcmd
            values = (p.seq, p.flag, p.roll, p.pitch, p.gaz, p.yaw_x, p.yaw_y, p.yaw_z)
            return "AT*PCMD_MAG=" + ",".join(str(int(v)) for v in values)
        if command == ArdroneCommand.REF:
            return f"AT*REF={int(a.ref.seq)},{int(a.ref.command)}"
        if command == ArdroneCommand.CONFIG_IDS:
            c = a.configids
            return (
                f'AT*CONFIG_IDS={int(c.seq)},"{_quoted(c.session, "session")}",'
                f'"{_quoted(c.user, "user")}","{_quoted(c.app, "app")}"'
            )
        if command == ArdroneCommand.CONFIG:
            c = a.config
            return (
                f'AT*CONFIG={int(c.seq)},"{_quoted(c.name, "name")}",'
                f'"{_quoted(c.parameter, "parameter")}"'
            )
        if command == ArdroneCommand.CTRL:
            c = a.ctrl
            return f"AT*CTRL={int(c.seq)},{int(c.ctrlmode)},{int(c.fw_update_filesize)}"
        return ""

    def command_bytes(self) -> bytes:
        """Return the AT command text for the listed commands, each ended by CR."""
        commands = [_as_command(c) for c in self.ardrone.commands]
        if len(commands) > MAX_COMMANDS:
            raise PacketError(f"too many AR Drone commands ({len(commands)})")
        out = b"".join(
            self._command_text(c).encode("latin-1") + COMMAND_SEPARATOR for c in commands
        )
        if len(out) > MAX_COMMAND_LEN:
            raise PacketError(f"AR Drone command text longer than {MAX_COMMAND_LEN} bytes")
        return out

    def compile(self) -> bytes:
        commands = self.command_bytes()
        self.udp.length = UDP_HDR_LEN + len(commands)
        self.data = self._udp_frame() + commands
        return self.data

    def _parse(self, command: ArdroneCommand, text: str) -> None:
        a = self.ardrone
        if command in _UNIMPLEMENTED:
            return
        pattern = {
            ArdroneCommand.PCMD: _PCMD_RE,
            ArdroneCommand.REF: _REF_RE,
            ArdroneCommand.CONFIG_IDS: _CONFIG_IDS_RE,
            ArdroneCommand.CONFIG: _CONFIG_RE,
            ArdroneCommand.CTRL: _CTRL_RE,
        }[command]
        match = pattern.match(text)
        if match is None:
            raise PacketError(f"AR Drone {command.name} command malformed: {text!r}")
        g = match.groups()
        if command == ArdroneCommand.PCMD:
            a.pcmd = Pcmd(*(int(v) for v in g))
        elif command == ArdroneCommand.REF:
            a.ref = Ref(int(g[0]), int(g[1]))
        elif command == ArdroneCommand.CONFIG_IDS:
            a.configids = ConfigIds(int(g[0]), g[1], g[2], g[3])
        elif command == ArdroneCommand.CONFIG:
            a.config = Config(int(g[0]), g[1], g[2])
        else:
            a.ctrl = Ctrl(int(g[0]), int(g[1]), int(g[2]))

    def cast(self, packet):
        """Fill the fields from raw bytes, reading each AT command in turn."""
        packet = bytes(packet)
        self._check_length(packet)
        super().cast(packet)
        self.ardrone = ArdroneFields()
        body = packet[_PAYLOAD_OFFSET:]
        pos = 0
        while pos < len(body):
            command = next(
                (cmd for prefix, cmd in _PREFIXES if body.startswith(prefix, pos)), None
            )
            if command is None:
                raise PacketError("AR Drone command type not found")
            if len(self.ardrone.commands) >= MAX_COMMANDS:
                raise PacketError(f"too many AR Drone commands (more than {MAX_COMMANDS})")
            end = body.find(COMMAND_SEPARATOR, pos)
            if end < 0:
                end = len(body)
            self._parse(command, body[pos:end].decode("latin-1"))
            self.ardrone.commands.append(command)
            pos = end + 1
        self.payload = b""

    def summary(self) -> str:
        self.compile()
        a = self.ardrone
        parts = []
        for command in (_as_command(c) for c in a.commands):
            if command in _UNIMPLEMENTED:
                raise PacketError(f"AR Drone {command.name} summary is not supported")
            if command == ArdroneCommand.PCMD:
                p = a.pcmd
                parts.append(
                    f"PCMD(seq={p.seq} flag={p.flag} roll={p.roll} pitch={p.pitch} "
                    f"gaz={p.gaz} yaw={p.yaw_x},{p.yaw_y},{p.yaw_z}) "
                )
            elif command == ArdroneCommand.REF:
                parts.append(f"REF(seq={a.ref.seq} cmd={a.ref.command}) ")
            elif command == ArdroneCommand.CONFIG_IDS:
                c = a.configids
                parts.append(
                    f"CONFIG_IDS(seq={c.seq} session={c.session} user={c.user} app={c.app}) "
                )
            elif command == ArdroneCommand.CONFIG:
                c = a.config
                parts.append(f"CONFIG(seq={c.seq} name={c.name} parameter={c.parameter}) ")
            else:
                c = a.ctrl
                parts.append(
                    f"CTRL(seq={c.seq} mode={c.ctrlmode} fwupfilezie={c.fw_update_filesize}) "
                )
        return "AR Drone { " + "".join(parts) + "}"

    def dsummary(self) -> str:
        """Return the summary preceded by the source and destination addresses."""
        self.compile()
        return f"{_ipv4_text(self.ip.src)} -> {_ipv4_text(self.ip.dst)} {self.summary()}"

    def info(self) -> str:
        self.compile()
        a = self.ardrone
        lines = [super().info(), " * AR Drone packet"]
        for command in (_as_command(c) for c in a.commands):
            if command == ArdroneCommand.PCMD:
                p = a.pcmd
                lines += [
                    "    - PCMD MAG",
                    f"         Sequence Num : {p.seq} ",
                    f"         Flag         : {p.flag} ",
                    f"         Roll         : {p.roll} ",
                    f"         Pitch        : {p.pitch} ",
                    f"         Gaz          : {p.gaz} ",
                    f"         Yaw(x,y,z)   : ({p.yaw_x},{p.yaw_y},{p.yaw_z})  ",
                ]
            elif command == ArdroneCommand.REF:
                lines += [
                    "    - REF",
                    f"         Sequence Num : {a.ref.seq} ",
                    f"         Command      : {a.ref.command} ",
                ]
            elif command == ArdroneCommand.CONFIG_IDS:
                c = a.configids
                lines += [
                    "    - CONFIG_IDS ",
                    f"         Sequence Num : {c.seq} ",
                    f"         Session      : {c.session} ",
                    f"         User         : {c.user} ",
                    f"         App          : {c.app} ",
                ]
            elif command == ArdroneCommand.CONFIG:
                c = a.config
                lines += [
                    "    - CONFIG ",
                    f"         Sequence Num : {c.seq} ",
                    f"         Name         : {c.name} ",
                    f"         Parameter    : {c.parameter} ",
                ]
            elif command == ArdroneCommand.CTRL:
                c = a.ctrl
                lines += [
                    "    - CTRL ",
                    f"         Sequence Num : {c.seq} ",
                    f"         Control Mode : {c.ctrlmode} ",
                    f"         FW Update    : {c.fw_update_filesize} ",
                ]
            else:
                lines += [f"    - {command.name} ", "         Not implement yet "]
        return "\n".join(lines)

    def help(self) -> str:
        return _HELP
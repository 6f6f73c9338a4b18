"""Minecraft server kinds, responses, request settings and wire helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..core import ErrorKind, ExtraRequestSettings, GameQueryError

_MSB = 0x80
_MASK = 0x7F
_MAX_VARINT_BYTES = 5


class Edition(Enum):
    """The family of Minecraft server software."""

    JAVA = "java"
    LEGACY = "legacy"
    BEDROCK = "bedrock"


class LegacyGroup(Enum):
    """Groups of legacy Java versions that share a status protocol."""

    V1_6 = "1.6"
    V1_4 = "1.4"
    VB1_8 = "b1.8"


@dataclass(frozen=True)
class Server:
    """The kind of Minecraft server; legacy servers carry their version group."""

    edition: Edition
    group: LegacyGroup | None = None

    def __post_init__(self) -> None:
        if (self.edition is Edition.LEGACY) != (self.group is not None):
            raise GameQueryError(
                ErrorKind.INVALID_INPUT,
                "a legacy group is required for legacy servers and only for them",
            )

    @classmethod
    def java(cls) -> Server:
        return cls(Edition.JAVA)

    @classmethod
    def bedrock(cls) -> Server:
        return cls(Edition.BEDROCK)

    @classmethod
    def legacy(cls, group: LegacyGroup) -> Server:
        return cls(Edition.LEGACY, group)


@dataclass(frozen=True)
class Player:
    """A player listed in a Java status response."""

    name: str
    id: str


class GameMode(Enum):
    """A Bedrock server's game mode."""

    SURVIVAL = "Survival"
    CREATIVE = "Creative"
    HARDCORE = "Hardcore"
    SPECTATOR = "Spectator"
    ADVENTURE = "Adventure"

    @classmethod
    def from_bedrock(cls, value: str) -> GameMode:
        """Parse the game mode name a Bedrock server reports."""
        try:
            return cls(value)
        except ValueError as exc:
            raise GameQueryError(ErrorKind.UNKNOWN_ENUM_CAST, f"Unknown gamemode {value!r}") from exc


@dataclass
class BedrockResponse:
    """A Bedrock Edition status response."""

    edition: str
    name: str
    version_name: str
    protocol_version: str
    players_maximum: int
    players_online: int
    id: str | None = None
    map: str | None = None
    game_mode: GameMode | None = None
    server_type: Server = field(default_factory=Server.bedrock)


@dataclass
class JavaResponse:
    """A Java (or legacy Java) status response."""

    game_version: str
    protocol_version: int
    players_maximum: int
    players_online: int
    description: str
    server_type: Server
    players: list[Player] | None = None
    favicon: str | None = None
    previews_chat: bool | None = None
    enforces_secure_chat: bool | None = None

    @classmethod
    def from_bedrock_response(cls, response: BedrockResponse) -> JavaResponse:
        """Present a Bedrock response in the Java response shape."""
        return cls(
            game_version=response.version_name,
            protocol_version=0,
            players_maximum=response.players_maximum,
            players_online=response.players_online,
            description=response.name,
            server_type=Server.bedrock(),
        )


@dataclass(frozen=True)
class RequestSettings:
    """Handshake settings for Java queries; a protocol version of -1 means any."""

    hostname: str = "gamequery"
    protocol_version: int = -1

    @classmethod
    def just_hostname(cls, hostname: str) -> RequestSettings:
        return cls(hostname=hostname)

    @classmethod
    def from_extra(cls, settings: ExtraRequestSettings) -> RequestSettings:
        """Take the hostname and protocol version from generic settings, defaulting the rest."""
        default = cls()
        return cls(
            hostname=default.hostname if settings.hostname is None else settings.hostname,
            protocol_version=(
                default.protocol_version if settings.protocol_version is None else settings.protocol_version
            ),
        )


def get_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a VarInt at ``offset``; return the signed 32-bit value and the next offset."""
    result = 0
    position = offset
    for index in range(_MAX_VARINT_BYTES):
        if position >= len(data):
            raise GameQueryError(ErrorKind.PACKET_UNDERFLOW, "VarInt runs past the end of the data")
        byte = data[position]
        position += 1
        result |= (byte & _MASK) << (7 * index)
        if index == _MAX_VARINT_BYTES - 1 and byte & 0xF0:
            raise GameQueryError(ErrorKind.PACKET_BAD, "Bad 5th byte")
        if not byte & _MSB:
            break
    result &= 0xFFFFFFFF
    if result >= 1 << 31:
        result -= 1 << 32
    return result, position


def as_varint(value: int) -> bytes:
    """Encode a 32-bit integer as a VarInt."""
    remaining = value & 0xFFFFFFFF
    encoded = bytearray()
    for _ in range(_MAX_VARINT_BYTES):
        low = remaining & _MASK
        remaining >>= 7
        if remaining == 0:
            encoded.append(low)
            break
        encoded.append(low | _MSB)
    return bytes(encoded)


def get_string(data: bytes, offset: int = 0) -> tuple[str, int]:
    """Decode a VarInt-prefixed UTF-8 string; return it and the next offset."""
    length, position = get_varint(data, offset)
    end = position + length
    if length < 0 or end > len(data):
        raise GameQueryError(ErrorKind.PACKET_UNDERFLOW, f"string of {length} bytes runs past the data")
    try:
        text = bytes(data[position:end]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise GameQueryError(ErrorKind.PACKET_BAD, exc) from exc
    return text, end


def as_string(value: str) -> bytes:
    """Encode text as a VarInt-prefixed UTF-8 string."""
    encoded = value.encode("utf-8")
    if len(encoded) > (1 << 31) - 1:
        raise GameQueryError(ErrorKind.INVALID_INPUT, "string too long")
    return as_varint(len(encoded)) + encoded
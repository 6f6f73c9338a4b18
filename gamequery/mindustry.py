"""Mindustry server ping (protocol version 146)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .core import (
    ByteReader,
    ErrorKind,
    GameQueryError,
    TimeoutSettings,
    UdpClient,
    retry_on_timeout,
)

DEFAULT_PORT = 6567
MAX_BUFFER_SIZE = 500

_U32_MAX = 0xFFFFFFFF


class GameMode(Enum):
    """A Mindustry game mode, valued by its wire number."""

    SURVIVAL = 0
    SANDBOX = 1
    ATTACK = 2
    PVP = 3
    EDITOR = 4

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass
class ServerData:
    """What a Mindustry server reports in reply to a ping."""

    host: str
    map: str
    players: int
    wave: int
    version: int
    version_type: str
    gamemode: GameMode
    player_limit: int
    description: str
    mode_name: str | None = None

    def players_online(self) -> int:
        """Players online, or 0 when the server reports a negative count."""
        return self.players if 0 <= self.players <= _U32_MAX else 0

    def players_maximum(self) -> int:
        """Player limit, or 0 when the server reports a negative limit."""
        return self.player_limit if 0 <= self.player_limit <= _U32_MAX else 0

    def game_mode(self) -> str:
        return self.gamemode.label


def build_ping() -> bytes:
    """The discovery ping packet."""
    return bytes([0xFE, 0x01])


def _game_mode(value: int) -> GameMode:
    try:
        return GameMode(value)
    except ValueError as exc:
        raise GameQueryError(ErrorKind.TYPE_PARSE, f"unknown game mode {value}") from exc


def parse_server_data(data: bytes) -> ServerData:
    """Parse a ping reply; the trailing mode name is optional."""
    reader = ByteReader(data, "big")
    host = reader.read_prefixed_string()
    map_name = reader.read_prefixed_string()
    players = reader.read_i32()
    wave = reader.read_i32()
    version = reader.read_i32()
    version_type = reader.read_prefixed_string()
    gamemode = _game_mode(reader.read_u8())
    player_limit = reader.read_i32()
    description = reader.read_prefixed_string()
    try:
        mode_name: str | None = reader.read_prefixed_string()
    except GameQueryError:
        mode_name = None
    return ServerData(
        host=host,
        map=map_name,
        players=players,
        wave=wave,
        version=version,
        version_type=version_type,
        gamemode=gamemode,
        player_limit=player_limit,
        description=description,
        mode_name=mode_name,
    )


def _query_once(address: str, port: int, timeouts: TimeoutSettings) -> ServerData:
    with UdpClient(address, port, timeouts) as client:
        client.send(build_ping())
        return parse_server_data(client.receive(MAX_BUFFER_SIZE))


def query(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
) -> ServerData:
    """Ping a Mindustry server, retrying on send and receive failures."""
    timeouts = TimeoutSettings.or_default(timeout_settings)
    target = DEFAULT_PORT if port is None else port
    return retry_on_timeout(timeouts.retries, lambda: _query_once(address, target, timeouts))
"""Savage 2 server queries."""

from __future__ import annotations

from dataclasses import dataclass

from .core import ByteReader, TimeoutSettings, UdpClient

DEFAULT_PORT = 11235
REQUEST = b"\x01"
_HEADER_LENGTH = 12


@dataclass
class Response:
    """What a Savage 2 server reports."""

    name: str
    players_online: int
    players_maximum: int
    players_minimum: int
    time: str
    map: str
    next_map: str
    location: str
    game_mode: str
    protocol_version: str
    level_minimum: int


def parse_response(data: bytes) -> Response:
    """Parse a Savage 2 status reply."""
    reader = ByteReader(data, "little")
    reader.skip(_HEADER_LENGTH)
    name = reader.read_cstring()
    players_online = reader.read_u8()
    players_maximum = reader.read_u8()
    time = reader.read_cstring()
    map_name = reader.read_cstring()
    next_map = reader.read_cstring()
    location = reader.read_cstring()
    players_minimum = reader.read_u8()
    game_mode = reader.read_cstring()
    protocol_version = reader.read_cstring()
    level_minimum = reader.read_u8()
    return Response(
        name=name,
        players_online=players_online,
        players_maximum=players_maximum,
        players_minimum=players_minimum,
        time=time,
        map=map_name,
        next_map=next_map,
        location=location,
        game_mode=game_mode,
        protocol_version=protocol_version,
        level_minimum=level_minimum,
    )


def query(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
) -> Response:
    """Query a Savage 2 server (default port 11235)."""
    target = DEFAULT_PORT if port is None else port
    with UdpClient(address, target, timeout_settings) as client:
        client.send(REQUEST)
        return parse_response(client.receive())
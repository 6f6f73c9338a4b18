"""Status queries for Bedrock Edition servers (unconnected ping)."""

from __future__ import annotations

import re

from ..core import (
    ByteReader,
    ErrorKind,
    GameQueryError,
    TimeoutSettings,
    UdpClient,
    check_expected_size,
    retry_on_timeout,
)
from .types import BedrockResponse, GameMode, Server

DEFAULT_PORT = 19132

STATUS_REQUEST = bytes([
    0x01,  # ID_UNCONNECTED_PING
    0x11, 0x22, 0x33, 0x44, 0x55, 0x66, 0x77, 0x88,  # nonce
    0x00, 0xFF, 0xFF, 0x00, 0xFE, 0xFE, 0xFE, 0xFE,  # magic
    0xFD, 0xFD, 0xFD, 0xFD, 0x12, 0x34, 0x56, 0x78,
    0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,  # client GUID
])

_PONG_ID = 0x1C
_NONCE = 9_833_440_827_789_222_417
_MAGIC_HIGH = 18_374_403_896_610_127_616
_MAGIC_LOW = 8_671_175_388_723_805_693
_UNSIGNED = re.compile(r"\+?[0-9]+")


def _parse_u32(text: str) -> int:
    if not _UNSIGNED.fullmatch(text) or int(text) > 0xFFFFFFFF:
        raise GameQueryError(ErrorKind.TYPE_PARSE, f"invalid number {text!r}")
    return int(text)


def parse_bedrock_status(data: bytes) -> BedrockResponse:
    """Parse an unconnected pong packet."""
    reader = ByteReader(data, "little")
    if reader.read_u8() != _PONG_ID:
        raise GameQueryError(ErrorKind.PACKET_BAD, "Expected 0x1c")
    if reader.read_u64() != _NONCE:
        raise GameQueryError(ErrorKind.PACKET_BAD, "Invalid nonce")
    # The server id, repeated in decimal inside the status text.
    reader.skip(8)
    if reader.read_u64() != _MAGIC_HIGH or reader.read_u64() != _MAGIC_LOW:
        raise GameQueryError(ErrorKind.PACKET_BAD, "Invalid magic")

    remaining_length = int.from_bytes(reader.remaining()[:2], "big")
    reader.skip(2)
    check_expected_size(remaining_length, len(reader.remaining()))

    status = reader.read_cstring().split(";")
    if len(status) < 6:
        raise GameQueryError(ErrorKind.PACKET_BAD, "Not enough values")

    def optional(index: int) -> str | None:
        return status[index] if index < len(status) else None

    game_mode = optional(8)
    return BedrockResponse(
        edition=status[0],
        name=status[1],
        version_name=status[3],
        protocol_version=status[2],
        players_maximum=_parse_u32(status[5]),
        players_online=_parse_u32(status[4]),
        id=optional(6),
        map=optional(7),
        game_mode=None if game_mode is None else GameMode.from_bedrock(game_mode),
        server_type=Server.bedrock(),
    )


def query_bedrock(
    address: str,
    port: int = DEFAULT_PORT,
    timeout_settings: TimeoutSettings | None = None,
) -> BedrockResponse:
    """Query a Bedrock server, retrying on send and receive failures."""
    timeouts = TimeoutSettings.or_default(timeout_settings)
    with UdpClient(address, port, timeouts) as client:

        def exchange() -> BedrockResponse:
            client.send(STATUS_REQUEST)
            return parse_bedrock_status(client.receive())

        return retry_on_timeout(timeouts.retries, exchange)
"""Status queries for legacy Java servers (1.6, 1.4 - 1.5 and Beta 1.8 - 1.3)."""

from __future__ import annotations

import re
from typing import Callable

from ..core import (
    ByteReader,
    ErrorKind,
    GameQueryError,
    TcpClient,
    TimeoutSettings,
    check_expected_size,
    retry_on_timeout,
)
from .types import JavaResponse, LegacyGroup, Server

DEFAULT_PORT = 25565

_PLUGIN_CHANNEL = "gamequery"
V1_6_REQUEST = (
    bytes([0xFE, 0x01, 0xFA])
    + len(_PLUGIN_CHANNEL).to_bytes(2, "big")
    + _PLUGIN_CHANNEL.encode("utf-16-be")
)
V1_4_REQUEST = bytes([0xFE, 0x01])
VB1_8_REQUEST = bytes([0xFE])

_V1_6_MARKER = bytes([0x00, 0xA7, 0x00, 0x31, 0x00, 0x00])
_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")


def _parse_int(text: str, *, signed: bool) -> int:
    pattern = _SIGNED if signed else _UNSIGNED
    low, high = (-(1 << 31), (1 << 31) - 1) if signed else (0, 0xFFFFFFFF)
    if not pattern.fullmatch(text) or not low <= int(text) <= high:
        raise GameQueryError(ErrorKind.PACKET_BAD, f"invalid number {text!r}")
    return int(text)


def _open(data: bytes) -> ByteReader:
    reader = ByteReader(data, "big")
    if reader.read_u8() != 0xFF:
        raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, "Expected 0xFF")
    length = reader.read_u16() * 2
    check_expected_size(length + 3, len(data))
    return reader


def _take_v1_6_marker(reader: ByteReader) -> bool:
    if reader.remaining().startswith(_V1_6_MARKER):
        reader.skip(len(_V1_6_MARKER))
        return True
    return False


def _v1_6_response(reader: ByteReader) -> JavaResponse:
    # The fields arrive in this fixed order.
    protocol_version = _parse_int(reader.read_utf16_string(), signed=True)
    game_version = reader.read_utf16_string()
    description = reader.read_utf16_string()
    players_online = _parse_int(reader.read_utf16_string(), signed=False)
    players_maximum = _parse_int(reader.read_utf16_string(), signed=False)
    return JavaResponse(
        game_version=game_version,
        protocol_version=protocol_version,
        players_maximum=players_maximum,
        players_online=players_online,
        description=description,
        server_type=Server.legacy(LegacyGroup.V1_6),
    )


def _sectioned_response(reader: ByteReader, game_version: str, group: LegacyGroup) -> JavaResponse:
    sections = reader.read_utf16_string().split("§")
    check_expected_size(3, len(sections))
    description, online, maximum = sections
    return JavaResponse(
        game_version=game_version,
        protocol_version=-1,
        players_maximum=_parse_int(maximum, signed=False),
        players_online=_parse_int(online, signed=False),
        description=description,
        server_type=Server.legacy(group),
    )


def parse_v1_6(data: bytes) -> JavaResponse:
    """Parse a 1.6 kick packet carrying server status."""
    reader = _open(data)
    if not _take_v1_6_marker(reader):
        raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, "Not legacy 1.6 protocol")
    return _v1_6_response(reader)


def parse_v1_4(data: bytes) -> JavaResponse:
    """Parse a 1.4 - 1.5 status reply; newer servers answering in the 1.6 form are accepted."""
    reader = _open(data)
    if _take_v1_6_marker(reader):
        return _v1_6_response(reader)
    return _sectioned_response(reader, "1.4+", LegacyGroup.V1_4)


def parse_vb1_8(data: bytes) -> JavaResponse:
    """Parse a Beta 1.8 - 1.3 status reply."""
    return _sectioned_response(_open(data), "Beta 1.8+", LegacyGroup.VB1_8)


_VARIANTS: dict[LegacyGroup, tuple[bytes, Callable[[bytes], JavaResponse]]] = {
    LegacyGroup.V1_6: (V1_6_REQUEST, parse_v1_6),
    LegacyGroup.V1_4: (V1_4_REQUEST, parse_v1_4),
    LegacyGroup.VB1_8: (VB1_8_REQUEST, parse_vb1_8),
}


def query_legacy_specific(
    group: LegacyGroup,
    address: str,
    port: int = DEFAULT_PORT,
    timeout_settings: TimeoutSettings | None = None,
) -> JavaResponse:
    """Query a legacy server with the protocol of one version group."""
    request, parse = _VARIANTS[group]
    timeouts = TimeoutSettings.or_default(timeout_settings)
    with TcpClient(address, port, timeouts) as client:

        def exchange() -> JavaResponse:
            client.send(request)
            return parse(client.receive())

        return retry_on_timeout(timeouts.retries, exchange)


def query_legacy(
    address: str,
    port: int = DEFAULT_PORT,
    timeout_settings: TimeoutSettings | None = None,
) -> JavaResponse:
    """Try the 1.6, then 1.4, then Beta 1.8 protocols; raise AUTO_QUERY if all fail."""
    for group in (LegacyGroup.V1_6, LegacyGroup.V1_4, LegacyGroup.VB1_8):
        try:
            return query_legacy_specific(group, address, port, timeout_settings)
        except GameQueryError:
            continue
    raise GameQueryError(ErrorKind.AUTO_QUERY)
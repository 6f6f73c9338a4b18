"""Status queries for modern Java Edition servers (the server list ping)."""

from __future__ import annotations

import json
from typing import Any

from ..core import ErrorKind, GameQueryError, TcpClient, TimeoutSettings, retry_on_timeout
from .types import (
    JavaResponse,
    Player,
    RequestSettings,
    Server,
    as_string,
    as_varint,
    get_string,
    get_varint,
)

DEFAULT_PORT = 25565

_HANDSHAKE_ID = 0x00
_NEXT_STATE_STATUS = 0x01
_STATUS_REQUEST = b"\x00"
_PING_REQUEST = b"\x01"
_MAX_VARINT_BYTES = 5


def _frame(payload: bytes) -> bytes:
    return as_varint(len(payload)) + payload


def build_handshake(protocol_version: int, hostname: str, port: int) -> bytes:
    """Build the (unframed) handshake payload that switches the connection to status state."""
    if not 0 <= port <= 0xFFFF:
        raise GameQueryError(ErrorKind.INVALID_INPUT, f"invalid port {port}")
    return (
        bytes([_HANDSHAKE_ID])
        + as_varint(protocol_version)
        + as_string(hostname)
        + port.to_bytes(2, "little")
        + bytes([_NEXT_STATE_STATUS])
    )


def _field(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise GameQueryError(ErrorKind.PACKET_BAD, "expected a string")
    return value


def _require_int(value: Any, *, unsigned: bool) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GameQueryError(ErrorKind.PACKET_BAD, "expected an integer")
    if unsigned and value < 0:
        raise GameQueryError(ErrorKind.PACKET_BAD, "expected a non-negative integer")
    return value


def _wrap_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _parse_players(sample: Any) -> list[Player] | None:
    if sample is None:
        return None
    if not isinstance(sample, list):
        raise GameQueryError(ErrorKind.PACKET_BAD, "players sample is not a list")
    return [
        Player(name=_require_str(_field(entry, "name")), id=_require_str(_field(entry, "id")))
        for entry in sample
    ]


def parse_java_status(data: bytes) -> JavaResponse:
    """Parse a framed status response packet."""
    # The declared packet length is not trusted.
    _, offset = get_varint(data)
    packet_id, offset = get_varint(data, offset)
    if packet_id != 0:
        raise GameQueryError(ErrorKind.PACKET_BAD, "Expected 0")

    text, _ = get_string(data, offset)
    try:
        document = json.loads(text)
    except ValueError as exc:
        raise GameQueryError(ErrorKind.JSON_PARSE, exc) from exc

    version = _field(document, "version")
    players = _field(document, "players")
    favicon = _field(document, "favicon")
    previews_chat = _field(document, "previewsChat")
    enforces_secure_chat = _field(document, "enforcesSecureChat")

    return JavaResponse(
        game_version=_require_str(_field(version, "name")),
        protocol_version=_wrap_i32(_require_int(_field(version, "protocol"), unsigned=False)),
        players_maximum=_require_int(_field(players, "max"), unsigned=True) & 0xFFFFFFFF,
        players_online=_require_int(_field(players, "online"), unsigned=True) & 0xFFFFFFFF,
        players=_parse_players(_field(players, "sample")),
        description=json.dumps(
            _field(document, "description"),
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
        ),
        favicon=favicon if isinstance(favicon, str) else None,
        previews_chat=previews_chat if isinstance(previews_chat, bool) else None,
        enforces_secure_chat=enforces_secure_chat if isinstance(enforces_secure_chat, bool) else None,
        server_type=Server.java(),
    )


def _receive_packet(client: TcpClient) -> bytes:
    prefix = bytearray()
    while True:
        byte = client.receive(1)
        if not byte:
            raise GameQueryError(ErrorKind.PACKET_RECEIVE, "connection closed before a packet arrived")
        prefix += byte
        if not byte[0] & 0x80 or len(prefix) == _MAX_VARINT_BYTES:
            break
    length, _ = get_varint(bytes(prefix))
    if length < 0:
        raise GameQueryError(ErrorKind.PACKET_BAD, "negative packet length")
    body = client.receive(length) if length else b""
    return bytes(prefix) + body


def query_java(
    address: str,
    port: int = DEFAULT_PORT,
    timeout_settings: TimeoutSettings | None = None,
    request_settings: RequestSettings | None = None,
) -> JavaResponse:
    """Query a Java Edition server, retrying on send and receive failures."""
    settings = request_settings or RequestSettings()
    timeouts = TimeoutSettings.or_default(timeout_settings)
    with TcpClient(address, port, timeouts) as client:

        def exchange() -> JavaResponse:
            client.send(_frame(build_handshake(settings.protocol_version, settings.hostname, port)))
            client.send(_frame(_STATUS_REQUEST))
            client.send(_frame(_PING_REQUEST))
            return parse_java_status(_receive_packet(client))

        return retry_on_timeout(timeouts.retries, exchange)
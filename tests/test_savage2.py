import socket
import threading
from contextlib import contextmanager

import pytest

from gamequery.core import ErrorKind, GameQueryError, TimeoutSettings
from gamequery.savage2 import REQUEST, Response, parse_response, query


def _cstr(text: str) -> bytes:
    return text.encode("utf-8") + b"\x00"


def _packet() -> bytes:
    return (
        bytes(range(12))
        + _cstr("Newerth")
        + bytes([6, 32])
        + _cstr("00:12:00")
        + _cstr("crossroads")
        + _cstr("eden")
        + _cstr("Europe")
        + bytes([2])
        + _cstr("normal")
        + _cstr("2.1.0")
        + bytes([5])
    )


EXPECTED = Response(
    name="Newerth",
    players_online=6,
    players_maximum=32,
    players_minimum=2,
    time="00:12:00",
    map="crossroads",
    next_map="eden",
    location="Europe",
    game_mode="normal",
    protocol_version="2.1.0",
    level_minimum=5,
)


@contextmanager
def udp_server(reply: bytes):
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind(("127.0.0.1", 0))
    server.settimeout(5)
    received: list[bytes] = []

    def serve() -> None:
        try:
            data, peer = server.recvfrom(2048)
        except OSError:
            return
        received.append(data)
        server.sendto(reply, peer)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        yield server.getsockname()[1], received
    finally:
        thread.join(timeout=5)
        server.close()


def test_parse_response():
    assert parse_response(_packet()) == EXPECTED


def test_header_bytes_are_ignored():
    altered = b"\xff" * 12 + _packet()[12:]
    assert parse_response(altered) == EXPECTED


def test_short_header_raises():
    with pytest.raises(GameQueryError) as info:
        parse_response(b"\x00" * 5)
    assert info.value.kind is ErrorKind.PACKET_UNDERFLOW


def test_truncated_after_name_raises():
    with pytest.raises(GameQueryError) as info:
        parse_response(b"\x00" * 12 + _cstr("Newerth"))
    assert info.value.kind is ErrorKind.PACKET_UNDERFLOW


def test_query_local_server():
    with udp_server(_packet()) as (port, received):
        result = query("127.0.0.1", port, TimeoutSettings(read=2, write=2, connect=2))
    assert received == [REQUEST]
    assert received[0] == b"\x01"
    assert result == EXPECTED
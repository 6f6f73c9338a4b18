import socket
import struct

import pytest

from gamequery.core import (
    ByteReader,
    ErrorKind,
    GameQueryError,
    TcpClient,
    TimeoutSettings,
    UdpClient,
    check_expected_size,
    retry_on_timeout,
)


@pytest.mark.parametrize("order,prefix", [("little", "<"), ("big", ">")])
def test_read_integers(order, prefix):
    data = struct.pack(prefix + "BHIiQ", 7, 513, 70000, -5, 2**40)
    reader = ByteReader(data, order)
    assert reader.read_u8() == 7
    assert reader.read_u16() == 513
    assert reader.read_u32() == 70000
    assert reader.read_i32() == -5
    assert reader.read_u64() == 2**40
    assert reader.remaining() == b""


def test_underflow_raises():
    with pytest.raises(GameQueryError) as info:
        ByteReader(b"\x01").read_u16()
    assert info.value.kind is ErrorKind.PACKET_UNDERFLOW


def test_failed_read_keeps_position():
    reader = ByteReader(b"\x01")
    with pytest.raises(GameQueryError):
        reader.read_u32()
    assert reader.read_u8() == 1


def test_cstrings():
    reader = ByteReader(b"abc\x00def")
    assert reader.read_cstring() == "abc"
    assert reader.read_cstring() == "def"
    assert reader.remaining() == b""


def test_prefixed_string():
    reader = ByteReader(bytes([3]) + b"map" + b"x")
    assert reader.read_prefixed_string() == "map"
    assert reader.remaining() == b"x"


def test_utf16_strings_big_endian():
    data = "hi".encode("utf-16-be") + b"\x00\x00" + "yo\u00a7".encode("utf-16-be")
    reader = ByteReader(data, "big")
    assert reader.read_utf16_string() == "hi"
    assert reader.read_utf16_string() == "yo\u00a7"
    assert reader.remaining() == b""


def test_invalid_utf8_is_bad_packet():
    with pytest.raises(GameQueryError) as info:
        ByteReader(b"\xff\xfe\x00").read_cstring()
    assert info.value.kind is ErrorKind.PACKET_BAD


def test_skip():
    reader = ByteReader(b"abcdef")
    reader.skip(4)
    assert reader.remaining() == b"ef"
    with pytest.raises(GameQueryError) as info:
        reader.skip(3)
    assert info.value.kind is ErrorKind.PACKET_UNDERFLOW


def test_unknown_byte_order():
    with pytest.raises(GameQueryError) as info:
        ByteReader(b"", "middle")
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_retry_succeeds_after_timeouts():
    calls = []

    def action():
        calls.append(1)
        if len(calls) < 3:
            raise GameQueryError(ErrorKind.PACKET_RECEIVE)
        return "ok"

    assert retry_on_timeout(2, action) == "ok"
    assert len(calls) == 3


def test_retry_gives_up():
    calls = []

    def action():
        calls.append(1)
        raise GameQueryError(ErrorKind.PACKET_SEND, "nope")

    with pytest.raises(GameQueryError) as info:
        retry_on_timeout(1, action)
    assert info.value.kind is ErrorKind.PACKET_SEND
    assert len(calls) == 2


def test_retry_does_not_retry_other_errors():
    calls = []

    def action():
        calls.append(1)
        raise GameQueryError(ErrorKind.PACKET_BAD)

    with pytest.raises(GameQueryError) as info:
        retry_on_timeout(5, action)
    assert info.value.kind is ErrorKind.PACKET_BAD
    assert len(calls) == 1


@pytest.mark.parametrize(
    "expected,actual,kind",
    [(3, 5, ErrorKind.PACKET_OVERFLOW), (5, 3, ErrorKind.PACKET_UNDERFLOW)],
)
def test_check_expected_size_mismatch(expected, actual, kind):
    with pytest.raises(GameQueryError) as info:
        check_expected_size(expected, actual)
    assert info.value.kind is kind


def test_check_expected_size_equal():
    assert check_expected_size(4, 4) is None


def test_timeout_settings_defaults():
    custom = TimeoutSettings(read=1.0)
    assert TimeoutSettings.or_default(custom) is custom
    assert TimeoutSettings.or_default(None) == TimeoutSettings()


def test_timeout_settings_reject_zero():
    with pytest.raises(GameQueryError) as info:
        TimeoutSettings(read=0)
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_error_message_includes_context():
    error = GameQueryError(ErrorKind.PACKET_BAD, "Expected 0")
    assert str(error) == "PACKET_BAD: Expected 0"
    assert error.context == "Expected 0"


def test_udp_round_trip():
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind(("127.0.0.1", 0))
    server.settimeout(2)
    try:
        with UdpClient("127.0.0.1", server.getsockname()[1], TimeoutSettings(read=2)) as client:
            client.send(b"ping")
            data, peer = server.recvfrom(100)
            server.sendto(b"pong", peer)
            assert data == b"ping"
            assert client.receive() == b"pong"
    finally:
        server.close()


def test_udp_receive_timeout():
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind(("127.0.0.1", 0))
    try:
        with UdpClient("127.0.0.1", server.getsockname()[1], TimeoutSettings(read=0.2)) as client:
            with pytest.raises(GameQueryError) as info:
                client.receive()
            assert info.value.kind is ErrorKind.PACKET_RECEIVE
    finally:
        server.close()


def test_tcp_round_trip():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(2)
    port = listener.getsockname()[1]
    try:
        with TcpClient("127.0.0.1", port, TimeoutSettings(read=2)) as client:
            assert client.port == port
            connection, _ = listener.accept()
            client.send(b"hello")
            assert connection.recv(100) == b"hello"
            connection.sendall(b"world")
            connection.close()
            assert client.receive() == b"world"
    finally:
        listener.close()


def test_tcp_connect_refused():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(GameQueryError) as info:
        TcpClient("127.0.0.1", port, TimeoutSettings(connect=1))
    assert info.value.kind is ErrorKind.SOCKET_CONNECT
"""Shared building blocks: errors, settings, byte reading, sockets and retries."""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, TypeVar

T = TypeVar("T")

DEFAULT_PACKET_SIZE = 4096


class ErrorKind(Enum):
    """The category of a failure while querying a server."""

    PACKET_SEND = auto()
    PACKET_RECEIVE = auto()
    PACKET_BAD = auto()
    PACKET_UNDERFLOW = auto()
    PACKET_OVERFLOW = auto()
    SOCKET_CONNECT = auto()
    SOCKET_BIND = auto()
    INVALID_INPUT = auto()
    HOST_LOOKUP = auto()
    PROTOCOL_FORMAT = auto()
    TYPE_PARSE = auto()
    JSON_PARSE = auto()
    UNKNOWN_ENUM_CAST = auto()
    AUTO_QUERY = auto()


class GameQueryError(Exception):
    """Raised when a query fails; ``kind`` tells what went wrong."""

    def __init__(self, kind: ErrorKind, context: object = None) -> None:
        self.kind = kind
        self.context = None if context is None else str(context)
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.context is None:
            return self.kind.name
        return f"{self.kind.name}: {self.context}"


@dataclass(frozen=True)
class TimeoutSettings:
    """Socket timeouts in seconds (None blocks forever) and a retry count."""

    read: float | None = 4.0
    write: float | None = 4.0
    connect: float | None = 4.0
    retries: int = 0

    def __post_init__(self) -> None:
        for name in ("read", "write", "connect"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise GameQueryError(ErrorKind.INVALID_INPUT, f"{name} timeout must be positive")
        if self.retries < 0:
            raise GameQueryError(ErrorKind.INVALID_INPUT, "retries must not be negative")

    @classmethod
    def or_default(cls, settings: TimeoutSettings | None) -> TimeoutSettings:
        """Return ``settings``, or the default settings when it is None."""
        return cls() if settings is None else settings


@dataclass(frozen=True)
class ExtraRequestSettings:
    """Optional per-request settings understood by some protocols."""

    hostname: str | None = None
    protocol_version: int | None = None
    gather_players: bool | None = None
    gather_rules: bool | None = None
    check_app_id: bool | None = None


class ByteReader:
    """Cursor over a received packet; ``byteorder`` is "little" or "big"."""

    def __init__(self, data: bytes, byteorder: str = "little") -> None:
        if byteorder not in ("little", "big"):
            raise GameQueryError(ErrorKind.INVALID_INPUT, f"unknown byte order {byteorder!r}")
        self._data = bytes(data)
        self.position = 0
        self.byteorder = byteorder

    def _take(self, count: int) -> bytes:
        if count < 0:
            raise GameQueryError(ErrorKind.INVALID_INPUT, "negative length")
        end = self.position + count
        if end > len(self._data):
            raise GameQueryError(
                ErrorKind.PACKET_UNDERFLOW,
                f"wanted {count} bytes, {len(self._data) - self.position} left",
            )
        chunk = self._data[self.position:end]
        self.position = end
        return chunk

    def _unpack(self, code: str) -> int:
        fmt = ("<" if self.byteorder == "little" else ">") + code
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return self._unpack("H")

    def read_u32(self) -> int:
        return self._unpack("I")

    def read_i32(self) -> int:
        return self._unpack("i")

    def read_u64(self) -> int:
        return self._unpack("Q")

    def read_cstring(self) -> str:
        """Read UTF-8 text up to a NUL byte (or the end of the data)."""
        end = self._data.find(b"\x00", self.position)
        if end == -1:
            raw = self._data[self.position:]
            self.position = len(self._data)
        else:
            raw = self._data[self.position:end]
            self.position = end + 1
        return _decode(raw, "utf-8")

    def read_prefixed_string(self) -> str:
        """Read UTF-8 text preceded by a one byte length."""
        length = self.read_u8()
        return _decode(self._take(length), "utf-8")

    def read_utf16_string(self) -> str:
        """Read UTF-16 text up to a NUL code unit (or the end of the data)."""
        start = self.position
        cursor = start
        terminated = False
        while cursor + 2 <= len(self._data):
            if self._data[cursor:cursor + 2] == b"\x00\x00":
                terminated = True
                break
            cursor += 2
        raw = self._data[start:cursor]
        self.position = cursor + 2 if terminated else cursor
        encoding = "utf-16-le" if self.byteorder == "little" else "utf-16-be"
        return _decode(raw, encoding)

    def skip(self, count: int) -> None:
        self._take(count)

    def remaining(self) -> bytes:
        return self._data[self.position:]


def _decode(raw: bytes, encoding: str) -> str:
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise GameQueryError(ErrorKind.PACKET_BAD, exc) from exc


def _resolve(address: str, port: int, kind: int) -> tuple:
    try:
        infos = socket.getaddrinfo(address, port, type=kind)
    except OSError as exc:
        raise GameQueryError(ErrorKind.HOST_LOOKUP, exc) from exc
    if not infos:
        raise GameQueryError(ErrorKind.HOST_LOOKUP, "no addresses found")
    family, socktype, proto, _, sockaddr = infos[0]
    return family, socktype, proto, sockaddr


class UdpClient:
    """A UDP socket connected to one server."""

    def __init__(self, address: str, port: int, timeout_settings: TimeoutSettings | None = None) -> None:
        self.timeouts = TimeoutSettings.or_default(timeout_settings)
        self.address = address
        self.port = port
        family, socktype, proto, sockaddr = _resolve(address, port, socket.SOCK_DGRAM)
        try:
            self._socket = socket.socket(family, socktype, proto)
        except OSError as exc:
            raise GameQueryError(ErrorKind.SOCKET_BIND, exc) from exc
        try:
            self._socket.connect(sockaddr)
        except OSError as exc:
            self._socket.close()
            raise GameQueryError(ErrorKind.SOCKET_CONNECT, exc) from exc

    def send(self, data: bytes) -> None:
        self._socket.settimeout(self.timeouts.write)
        try:
            self._socket.send(data)
        except OSError as exc:
            raise GameQueryError(ErrorKind.PACKET_SEND, exc) from exc

    def receive(self, size: int | None = None) -> bytes:
        self._socket.settimeout(self.timeouts.read)
        try:
            return self._socket.recv(size or DEFAULT_PACKET_SIZE)
        except OSError as exc:
            raise GameQueryError(ErrorKind.PACKET_RECEIVE, exc) from exc

    def close(self) -> None:
        self._socket.close()

    def __enter__(self) -> UdpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class TcpClient:
    """A TCP connection to one server."""

    def __init__(self, address: str, port: int, timeout_settings: TimeoutSettings | None = None) -> None:
        self.timeouts = TimeoutSettings.or_default(timeout_settings)
        self.address = address
        self.port = port
        try:
            self._socket = socket.create_connection((address, port), timeout=self.timeouts.connect)
        except OSError as exc:
            raise GameQueryError(ErrorKind.SOCKET_CONNECT, exc) from exc

    def send(self, data: bytes) -> None:
        self._socket.settimeout(self.timeouts.write)
        try:
            self._socket.sendall(data)
        except OSError as exc:
            raise GameQueryError(ErrorKind.PACKET_SEND, exc) from exc

    def receive(self, size: int | None = None) -> bytes:
        """Read until the peer closes, ``size`` bytes arrive, or a read times out after data."""
        self._socket.settimeout(self.timeouts.read)
        received = bytearray()
        while size is None or len(received) < size:
            want = DEFAULT_PACKET_SIZE if size is None else min(DEFAULT_PACKET_SIZE, size - len(received))
            try:
                chunk = self._socket.recv(want)
            except socket.timeout as exc:
                if received:
                    break
                raise GameQueryError(ErrorKind.PACKET_RECEIVE, exc) from exc
            except OSError as exc:
                raise GameQueryError(ErrorKind.PACKET_RECEIVE, exc) from exc
            if not chunk:
                break
            received.extend(chunk)
        return bytes(received)

    def close(self) -> None:
        self._socket.close()

    def __enter__(self) -> TcpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def retry_on_timeout(retries: int, action: Callable[[], T]) -> T:
    """Call ``action``, trying again up to ``retries`` times on send/receive failures."""
    last_error = GameQueryError(ErrorKind.PACKET_RECEIVE, "Retry count was 0")
    for _ in range(retries + 1):
        try:
            return action()
        except GameQueryError as exc:
            if exc.kind not in (ErrorKind.PACKET_RECEIVE, ErrorKind.PACKET_SEND):
                raise
            last_error = exc
    raise last_error


def check_expected_size(expected: int, actual: int) -> None:
    """Raise when ``actual`` differs from ``expected``."""
    if actual > expected:
        raise GameQueryError(ErrorKind.PACKET_OVERFLOW, f"expected {expected}, got {actual}")
    if actual < expected:
        raise GameQueryError(ErrorKind.PACKET_UNDERFLOW, f"expected {expected}, got {actual}")
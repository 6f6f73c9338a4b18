"""A small HTTP client bound to one server address."""

from __future__ import annotations

import http.client
import ipaddress
import json
import socket
import ssl
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Sequence
from urllib.parse import urlencode, urlsplit

from .core import ErrorKind, GameQueryError, TimeoutSettings

MAX_RESPONSE_LENGTH = 1024 * 1024 * 1024
USER_AGENT = "gamequery"

Headers = Sequence[tuple[str, str]]


class HttpProtocol(Enum):
    """HTTP or HTTPS; the value is the URL scheme with its colon."""

    HTTP = "http:"
    HTTPS = "https:"

    @property
    def scheme(self) -> str:
        return self.value[:-1]

    @property
    def default_port(self) -> int:
        return 443 if self is HttpProtocol.HTTPS else 80


@dataclass(frozen=True)
class HttpSettings:
    """Protocol, Host-header override and headers for an HttpClient."""

    protocol: HttpProtocol = HttpProtocol.HTTP
    hostname: str | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)

    def with_protocol(self, protocol: HttpProtocol) -> HttpSettings:
        return replace(self, protocol=protocol)

    def with_hostname(self, hostname: str) -> HttpSettings:
        return replace(self, hostname=hostname)

    def with_headers(self, headers: Iterable[tuple[str, str]]) -> HttpSettings:
        return replace(self, headers=list(headers))

    def with_header(self, name: str, value: str) -> HttpSettings:
        return replace(self, headers=[*self.headers, (name, value)])


class _TlsConnection(http.client.HTTPSConnection):
    """HTTPS connection to a fixed IP that negotiates TLS for another name."""

    def __init__(self, ip: str, port: int, timeout: float | None, server_hostname: str) -> None:
        self._tls_context = ssl.create_default_context()
        super().__init__(ip, port, timeout=timeout, context=self._tls_context)
        self._server_hostname = server_hostname

    def connect(self) -> None:
        raw = socket.create_connection((self.host, self.port), self.timeout)
        self.sock = self._tls_context.wrap_socket(raw, server_hostname=self._server_hostname)


class HttpClient:
    """Sends requests to one IP and port, with a chosen Host name."""

    def __init__(
        self,
        address: str,
        port: int,
        timeout_settings: TimeoutSettings | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        settings = http_settings or HttpSettings()
        if not 0 <= port <= 65535:
            raise GameQueryError(ErrorKind.INVALID_INPUT, f"invalid port {port}")
        host = settings.hostname if settings.hostname is not None else str(address)
        if not host or any(ch in host for ch in "/?#@ "):
            raise GameQueryError(ErrorKind.INVALID_INPUT, f"invalid host {host!r}")

        self._timeouts = TimeoutSettings.or_default(timeout_settings)
        self._ip = str(address)
        self._port = port
        self._protocol = settings.protocol
        self._tls_hostname = host

        host_part = f"[{host}]" if ":" in host and not host.startswith("[") else host
        port_part = "" if port == settings.protocol.default_port else f":{port}"
        self._authority = host_part + port_part
        self.path = "/"
        self.headers = [(str(name), str(value)) for name, value in settings.headers]

    @property
    def url(self) -> str:
        return f"{self._protocol.scheme}://{self._authority}{self.path}"

    @classmethod
    def from_url(
        cls,
        url: str,
        timeout_settings: TimeoutSettings | None = None,
        headers: Headers | None = None,
    ) -> HttpClient:
        """Build a client from a URL, looking the host up when it is a name."""
        try:
            parts = urlsplit(url)
            host = parts.hostname
            explicit_port = parts.port
        except ValueError as exc:
            raise GameQueryError(ErrorKind.INVALID_INPUT, exc) from exc
        if not host:
            raise GameQueryError(ErrorKind.INVALID_INPUT, "URL used to create a HttpClient must have a host")
        scheme = parts.scheme.lower()
        port = explicit_port if explicit_port is not None else {"http": 80, "https": 443}.get(scheme)
        if port is None:
            raise GameQueryError(ErrorKind.INVALID_INPUT, "URL used to create HttpClient must have a port")

        try:
            ip = str(ipaddress.ip_address(host))
        except ValueError:
            try:
                infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
            except OSError as exc:
                raise GameQueryError(ErrorKind.HOST_LOOKUP, exc) from exc
            if not infos:
                raise GameQueryError(ErrorKind.HOST_LOOKUP, "No socket addresses found for host")
            ip = infos[0][4][0]

        protocol = HttpProtocol.HTTPS if scheme == "https" else HttpProtocol.HTTP
        settings = HttpSettings(protocol=protocol, hostname=host, headers=list(headers or []))
        return cls(ip, port, timeout_settings, settings)

    def get(self, path: str, headers: Headers | None = None) -> bytes:
        """Send a GET request and return the body."""
        return self._request("GET", path, headers)

    def get_json(self, path: str, headers: Headers | None = None) -> Any:
        """Send a GET request and parse the JSON body."""
        return _parse_json(self._request("GET", path, headers))

    def post_json(self, path: str, headers: Headers | None, data: Any) -> Any:
        """POST ``data`` as JSON and parse the JSON body."""
        body = json.dumps(data).encode("utf-8")
        return _parse_json(self._request("POST", path, headers, body, "application/json"))

    def post_json_with_form(self, path: str, headers: Headers | None, data: Sequence[tuple[str, str]]) -> Any:
        """POST ``data`` as a form and parse the JSON body."""
        body = urlencode(list(data)).encode("ascii")
        return _parse_json(self._request("POST", path, headers, body, "application/x-www-form-urlencoded"))

    def _connection(self) -> http.client.HTTPConnection:
        if self._protocol is HttpProtocol.HTTPS:
            return _TlsConnection(self._ip, self._port, self._timeouts.connect, self._tls_hostname)
        return http.client.HTTPConnection(self._ip, self._port, timeout=self._timeouts.connect)

    def _build_headers(self, extra: Headers | None, content_type: str | None) -> dict[str, str]:
        merged: dict[str, tuple[str, str]] = {}
        defaults = [("Host", self._authority), ("User-Agent", USER_AGENT), ("Accept-Encoding", "identity")]
        if content_type is not None:
            defaults.append(("Content-Type", content_type))
        for name, value in [*defaults, *self.headers, *(extra or [])]:
            merged[name.lower()] = (name, value)
        return dict(merged.values())

    def _request(
        self,
        method: str,
        path: str,
        headers: Headers | None,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> bytes:
        self.path = path if path.startswith("/") else "/" + path
        request_headers = self._build_headers(headers, content_type)
        connection = self._connection()
        try:
            try:
                connection.connect()
                connection.sock.settimeout(self._timeouts.write)
                connection.request(method, self.path, body=body, headers=request_headers)
                connection.sock.settimeout(self._timeouts.read)
                response = connection.getresponse()
            except (OSError, http.client.HTTPException) as exc:
                raise GameQueryError(ErrorKind.PACKET_SEND, exc) from exc

            if response.status >= 400:
                raise GameQueryError(ErrorKind.PACKET_SEND, f"HTTP status {response.status} {response.reason}")

            length = response.getheader("Content-Length")
            if length is not None:
                try:
                    int(length)
                except ValueError as exc:
                    raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, exc) from exc

            try:
                return response.read(MAX_RESPONSE_LENGTH)
            except (OSError, http.client.HTTPException) as exc:
                raise GameQueryError(ErrorKind.PACKET_RECEIVE, exc) from exc
        finally:
            connection.close()


def _parse_json(body: bytes) -> Any:
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, exc) from exc
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl

import pytest

from gamequery.core import ErrorKind, GameQueryError, TimeoutSettings
from gamequery.http import HttpClient, HttpProtocol, HttpSettings


class _Handler(BaseHTTPRequestHandler):
    def _reply(self, body, status=200, content_type="application/json"):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path == "/text":
            self._reply(b"hello", content_type="text/plain")
        elif self.path == "/missing":
            self._reply(b"{}", status=404)
        else:
            payload = {"method": "GET", "path": self.path, "headers": dict(self.headers)}
            self._reply(json.dumps(payload).encode())

    def do_POST(self):
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length).decode()
        payload = {
            "method": "POST",
            "path": self.path,
            "body": body,
            "content_type": self.headers.get("Content-Type"),
        }
        self._reply(json.dumps(payload).encode())

    def log_message(self, *args):
        pass


@pytest.fixture
def server_port():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_address[1]
    server.shutdown()
    server.server_close()


def _client(port, settings=None):
    return HttpClient("127.0.0.1", port, TimeoutSettings(read=5, write=5, connect=5), settings)


def test_http_settings_builder():
    settings = (
        HttpSettings()
        .with_hostname("example.org")
        .with_protocol(HttpProtocol.HTTPS)
        .with_header("Gamedig", "Is Awesome")
        .with_headers([("Foo", "bar")])
        .with_header("Baz", "Buzz")
    )
    assert settings.hostname == "example.org"
    assert settings.protocol is HttpProtocol.HTTPS
    assert settings.headers == [("Foo", "bar"), ("Baz", "Buzz")]


def test_http_client_new():
    settings = HttpSettings(
        protocol=HttpProtocol.HTTP,
        hostname="github.com",
        headers=[("Authorization", "Bearer token")],
    )
    client = HttpClient("127.0.0.1", 8000, None, settings)
    assert client.url == "http://github.com:8000/"
    assert client.headers == [("Authorization", "Bearer token")]


def test_client_uses_ip_without_hostname():
    client = HttpClient("127.0.0.1", 8000)
    assert client.url == "http://127.0.0.1:8000/"


def test_from_url_with_ip_literal_ignores_path():
    client = HttpClient.from_url("http://127.0.0.1:8080/path-is-ignored")
    assert client.url == "http://127.0.0.1:8080/"


def test_from_url_default_port_omitted():
    client = HttpClient.from_url("http://127.0.0.1/x")
    assert client.url == "http://127.0.0.1/"


def test_from_url_without_host():
    with pytest.raises(GameQueryError) as info:
        HttpClient.from_url("file:///tmp/data")
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_from_url_unknown_scheme_needs_port():
    with pytest.raises(GameQueryError) as info:
        HttpClient.from_url("gopher://127.0.0.1/")
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_invalid_port_rejected():
    with pytest.raises(GameQueryError) as info:
        HttpClient("127.0.0.1", 70000)
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_get_returns_body(server_port):
    assert _client(server_port).get("/text") == b"hello"


def test_get_json_sets_path_and_headers(server_port):
    settings = HttpSettings().with_hostname("example.org").with_header("X-Test", "one")
    client = _client(server_port, settings)
    response = client.get_json("get", [("X-Extra", "two")])
    assert response["path"] == "/get"
    assert response["headers"]["Host"] == f"example.org:{server_port}"
    assert response["headers"]["X-Test"] == "one"
    assert response["headers"]["X-Extra"] == "two"
    assert client.url == f"http://example.org:{server_port}/get"


def test_request_headers_override_client_headers(server_port):
    settings = HttpSettings().with_header("User-Agent", "Curl/8.6.0")
    response = _client(server_port, settings).get_json("/get")
    assert response["headers"]["User-Agent"] == "Curl/8.6.0"


def test_post_json(server_port):
    response = _client(server_port).post_json("/post", None, {"a": 1})
    assert response["method"] == "POST"
    assert json.loads(response["body"]) == {"a": 1}
    assert response["content_type"] == "application/json"


def test_post_form(server_port):
    response = _client(server_port).post_json_with_form("/form", None, [("x", "1"), ("y", "a b")])
    assert parse_qsl(response["body"]) == [("x", "1"), ("y", "a b")]
    assert response["content_type"] == "application/x-www-form-urlencoded"


def test_error_status_is_send_error(server_port):
    with pytest.raises(GameQueryError) as info:
        _client(server_port).get("/missing")
    assert info.value.kind is ErrorKind.PACKET_SEND


def test_non_json_body_is_format_error(server_port):
    with pytest.raises(GameQueryError) as info:
        _client(server_port).get_json("/text")
    assert info.value.kind is ErrorKind.PROTOCOL_FORMAT
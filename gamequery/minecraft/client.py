"""Minecraft queries that fill in default ports and try every edition in turn."""

from __future__ import annotations

from typing import Callable

from ..core import ErrorKind, GameQueryError, TimeoutSettings
from . import bedrock as _bedrock
from . import java as _java
from . import legacy as _legacy
from .types import BedrockResponse, JavaResponse, LegacyGroup, RequestSettings

JAVA_PORT = 25565
BEDROCK_PORT = 19132


def _java_port(port: int | None) -> int:
    return JAVA_PORT if port is None else port


def _bedrock_port(port: int | None) -> int:
    return BEDROCK_PORT if port is None else port


def query_java(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
    request_settings: RequestSettings | None = None,
) -> JavaResponse:
    """Query a Java Edition server (default port 25565)."""
    return _java.query_java(address, _java_port(port), timeout_settings, request_settings)


def query_bedrock(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
) -> BedrockResponse:
    """Query a Bedrock Edition server (default port 19132)."""
    return _bedrock.query_bedrock(address, _bedrock_port(port), timeout_settings)


def query_legacy(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
) -> JavaResponse:
    """Query a legacy Java server, trying 1.6, then 1.4, then Beta 1.8."""
    return _legacy.query_legacy(address, _java_port(port), timeout_settings)


def query_legacy_specific(
    group: LegacyGroup,
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
) -> JavaResponse:
    """Query a legacy Java server with the protocol of one version group."""
    return _legacy.query_legacy_specific(group, address, _java_port(port), timeout_settings)


def query(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
    request_settings: RequestSettings | None = None,
) -> JavaResponse:
    """Try Java, then Bedrock, then the legacy protocols; raise AUTO_QUERY if none answers."""
    attempts: tuple[Callable[[], JavaResponse], ...] = (
        lambda: query_java(address, port, timeout_settings, request_settings),
        lambda: JavaResponse.from_bedrock_response(query_bedrock(address, port, timeout_settings)),
        lambda: query_legacy(address, port, timeout_settings),
    )
    for attempt in attempts:
        try:
            return attempt()
        except GameQueryError:
            continue
    raise GameQueryError(ErrorKind.AUTO_QUERY)
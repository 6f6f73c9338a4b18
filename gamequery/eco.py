"""Eco server queries over the server's HTTP front page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .core import ErrorKind, ExtraRequestSettings, GameQueryError, TimeoutSettings
from .http import HttpClient, HttpProtocol, HttpSettings

DEFAULT_PORT = 3001
FRONTPAGE_PATH = "/frontpage"

_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class Player:
    """A player listed as online."""

    name: str


@dataclass
class Response:
    """What an Eco server reports on its front page."""

    external: bool
    port: int
    query_port: int
    is_lan: bool
    description: str
    description_detailed: str
    description_economy: str
    category: str
    players_online: int
    players_maximum: int
    players: list[Player]
    admin_online: bool
    time_since_start: float
    time_left: float
    animals: int
    plants: int
    laws: int
    world_size: str
    game_version: str
    skill_specialization_setting: str
    language: str
    has_password: bool
    has_meteor: bool
    distribution_station_items: str
    playtimes: str
    discord_address: str
    is_paused: bool
    active_and_online_players: int
    peak_active_players: int
    max_active_players: int
    shelf_life_multiplier: float
    exhaustion_after_hours: float
    is_limiting_hours: bool
    server_achievements_dict: dict[str, str] = field(default_factory=dict)
    relay_address: str = ""
    access: str = ""
    connect: str = ""

    @classmethod
    def from_frontpage(cls, root: Any) -> Response:
        """Build a response from the parsed front page document."""
        if not isinstance(root, dict) or "Info" not in root:
            raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, "missing field 'Info'")
        info = root["Info"]
        if not isinstance(info, dict):
            raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, "'Info' is not an object")

        values: dict[str, Any] = {}
        for attribute, key, convert in _FIELDS:
            if key not in info:
                raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, f"missing field {key!r}")
            try:
                values[attribute] = convert(info[key])
            except (TypeError, ValueError) as exc:
                raise GameQueryError(ErrorKind.PROTOCOL_FORMAT, f"field {key!r}: {exc}") from exc
        return cls(**values)


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError("expected a boolean")
    return value


def _u32(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("expected an integer")
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{value} is out of range")
    return value


def _f64(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError("expected a number")
    return float(value)


def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("expected a string")
    return value


def _players(value: Any) -> list[Player]:
    if not isinstance(value, list):
        raise TypeError("expected a list")
    return [Player(name=_str(name)) for name in value]


def _str_map(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        raise TypeError("expected an object")
    return {_str(key): _str(item) for key, item in value.items()}


_FIELDS: tuple[tuple[str, str, Callable[[Any], Any]], ...] = (
    ("external", "External", _bool),
    ("port", "GamePort", _u32),
    ("query_port", "WebPort", _u32),
    ("is_lan", "IsLAN", _bool),
    ("description", "Description", _str),
    ("description_detailed", "DetailedDescription", _str),
    ("description_economy", "EconomyDesc", _str),
    ("category", "Category", _str),
    ("players_online", "OnlinePlayers", _u32),
    ("players_maximum", "TotalPlayers", _u32),
    ("players", "OnlinePlayersNames", _players),
    ("admin_online", "AdminOnline", _bool),
    ("time_since_start", "TimeSinceStart", _f64),
    ("time_left", "TimeLeft", _f64),
    ("animals", "Animals", _u32),
    ("plants", "Plants", _u32),
    ("laws", "Laws", _u32),
    ("world_size", "WorldSize", _str),
    ("game_version", "Version", _str),
    ("skill_specialization_setting", "SkillSpecializationSetting", _str),
    ("language", "Language", _str),
    ("has_password", "HasPassword", _bool),
    ("has_meteor", "HasMeteor", _bool),
    ("distribution_station_items", "DistributionStationItems", _str),
    ("playtimes", "Playtimes", _str),
    ("discord_address", "DiscordAddress", _str),
    ("is_paused", "IsPaused", _bool),
    ("active_and_online_players", "ActiveAndOnlinePlayers", _u32),
    ("peak_active_players", "PeakActivePlayers", _u32),
    ("max_active_players", "MaxActivePlayers", _u32),
    ("shelf_life_multiplier", "ShelfLifeMultiplier", _f64),
    ("exhaustion_after_hours", "ExhaustionAfterHours", _f64),
    ("is_limiting_hours", "IsLimitingHours", _bool),
    ("server_achievements_dict", "ServerAchievementsDict", _str_map),
    ("relay_address", "RelayAddress", _str),
    ("access", "Access", _str),
    ("connect", "JoinUrl", _str),
)


@dataclass(frozen=True)
class EcoRequestSettings:
    """Extra settings for Eco queries: an optional Host name override."""

    hostname: str | None = None

    @classmethod
    def from_extra(cls, settings: ExtraRequestSettings) -> EcoRequestSettings:
        return cls(hostname=settings.hostname)

    def to_http_settings(self) -> HttpSettings:
        return HttpSettings(protocol=HttpProtocol.HTTP, hostname=self.hostname, headers=[])


def query(
    address: str,
    port: int | None = None,
    timeout_settings: TimeoutSettings | None = None,
    extra_settings: EcoRequestSettings | ExtraRequestSettings | None = None,
) -> Response:
    """Query an Eco server's front page (default port 3001)."""
    if isinstance(extra_settings, ExtraRequestSettings):
        extra_settings = EcoRequestSettings.from_extra(extra_settings)
    settings = extra_settings or EcoRequestSettings()
    target = DEFAULT_PORT if port is None else port
    client = HttpClient(address, target, timeout_settings, settings.to_http_settings())
    return Response.from_frontpage(client.get_json(FRONTPAGE_PATH))
"""Definitions of the supported games and the protocols used to query them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .core import ExtraRequestSettings
from .minecraft.types import LegacyGroup, Server

_MINDUSTRY_PORT = 6567


class ProtocolFamily(Enum):
    """The family of query protocol a game speaks."""

    VALVE = "valve"
    EPIC = "epic"
    GAMESPY = "gamespy"
    QUAKE = "quake"
    UNREAL2 = "unreal2"
    PROPRIETARY = "proprietary"


@dataclass(frozen=True)
class GameProtocol:
    """A protocol family with the details that pick the exact variant."""

    family: ProtocolFamily
    version: int | None = None
    app_id: int | None = None
    dedicated_app_id: int | None = None
    gold_src: bool = False
    gold_src_obsolete: bool = False
    proprietary: str | None = None
    minecraft_server: Server | None = None


@dataclass(frozen=True)
class GatheringSettings:
    """Whether to require (True), skip (False) or try (None) extra Valve queries."""

    players: bool | None = None
    rules: bool | None = None
    check_app_id: bool | None = None


@dataclass(frozen=True)
class Game:
    """A supported game: its name, default port, protocol and request settings."""

    name: str
    default_port: int
    protocol: GameProtocol
    request_settings: ExtraRequestSettings = field(default_factory=ExtraRequestSettings)


def _valve(app_id: int, dedicated_app_id: int | None = None) -> GameProtocol:
    return GameProtocol(ProtocolFamily.VALVE, app_id=app_id, dedicated_app_id=dedicated_app_id)


def _gold_src(obsolete: bool = False) -> GameProtocol:
    return GameProtocol(ProtocolFamily.VALVE, gold_src=True, gold_src_obsolete=obsolete)


def _gamespy(version: int) -> GameProtocol:
    return GameProtocol(ProtocolFamily.GAMESPY, version=version)


def _quake(version: int) -> GameProtocol:
    return GameProtocol(ProtocolFamily.QUAKE, version=version)


_UNREAL2 = GameProtocol(ProtocolFamily.UNREAL2)


def _proprietary(name: str, minecraft_server: Server | None = None) -> GameProtocol:
    return GameProtocol(ProtocolFamily.PROPRIETARY, proprietary=name, minecraft_server=minecraft_server)


def _extra(gathering: GatheringSettings) -> ExtraRequestSettings:
    return ExtraRequestSettings(
        gather_players=gathering.players,
        gather_rules=gathering.rules,
        check_app_id=gathering.check_app_id,
    )


_PLAYERS_ONLY = _extra(GatheringSettings(players=True, rules=False, check_app_id=True))

GAMES: Mapping[str, Game] = MappingProxyType({
    "minecraft": Game("Minecraft", 25565, _proprietary("minecraft")),
    "minecraftbedrock": Game("Minecraft (bedrock)", 19132, _proprietary("minecraft", Server.bedrock())),
    "minecraftpocket": Game("Minecraft (pocket)", 19132, _proprietary("minecraft", Server.bedrock())),
    "minecraftjava": Game("Minecraft (java)", 25565, _proprietary("minecraft", Server.java())),
    "minecraftlegacy16": Game(
        "Minecraft (legacy 1.6)", 25565, _proprietary("minecraft", Server.legacy(LegacyGroup.V1_6))
    ),
    "minecraftlegacy14": Game(
        "Minecraft (legacy 1.4)", 25565, _proprietary("minecraft", Server.legacy(LegacyGroup.V1_4))
    ),
    "minecraftlegacyb18": Game(
        "Minecraft (legacy b1.8)", 25565, _proprietary("minecraft", Server.legacy(LegacyGroup.VB1_8))
    ),
    "aapg": Game("America's Army: Proving Grounds", 27020, _valve(203_290), _PLAYERS_ONLY),
    "abioticfactor": Game("Abiotic Factor", 27015, _valve(427_410)),
    "alienswarm": Game("Alien Swarm", 27015, _valve(630)),
    "aoc": Game("Age of Chivalry", 27015, _valve(17510)),
    "a2oa": Game("ARMA 2: Operation Arrowhead", 2304, _valve(33930)),
    "ase": Game("ARK: Survival Evolved", 27015, _valve(346_110)),
    "asrd": Game("Alien Swarm: Reactive Drop", 2304, _valve(563_560)),
    "armareforger": Game(
        "Arma Reforger",
        17777,
        _valve(1_874_880),
        _extra(GatheringSettings(players=True, rules=True, check_app_id=False)),
    ),
    "atlas": Game("ATLAS", 57561, _valve(834_910)),
    "avorion": Game("Avorion", 27020, _valve(445_220)),
    "avp2010": Game("Aliens vs. Predator 2010", 27015, _valve(10_680)),
    "barotrauma": Game("Barotrauma", 27016, _valve(602_960)),
    "basedefense": Game("Base Defense", 27015, _valve(632_730), _PLAYERS_ONLY),
    "battalion1944": Game("Battalion 1944", 7780, _valve(489_940)),
    "brainbread2": Game("BrainBread 2", 27015, _valve(346_330)),
    "battlefield1942": Game("Battlefield 1942", 23000, _gamespy(1)),
    "blackmesa": Game("Black Mesa", 27015, _valve(362_890)),
    "ballisticoverkill": Game("Ballistic Overkill", 27016, _valve(296_300)),
    "codbo3": Game("Call Of Duty: Black Ops 3", 27017, _valve(311_210)),
    "codenamecure": Game("Codename CURE", 27015, _valve(355_180)),
    "colonysurvival": Game("Colony Survival", 27004, _valve(366_090)),
    "conanexiles": Game(
        "Conan Exiles",
        27015,
        _valve(440_900),
        _extra(GatheringSettings(players=False, rules=True, check_app_id=True)),
    ),
    "counterstrike": Game("Counter-Strike", 27015, _gold_src()),
    "counterstrike2": Game("Counter-Strike 2", 27015, _valve(730)),
    "cscz": Game("Counter Strike: Condition Zero", 27015, _gold_src()),
    "csgo": Game("Counter-Strike: Global Offensive", 27015, _valve(730)),
    "css": Game("Counter-Strike: Source", 27015, _valve(240)),
    "creativerse": Game("Creativerse", 26901, _valve(280_790)),
    "crysiswars": Game("Crysis Wars", 64100, _gamespy(3)),
    "dab": Game("Double Action: Boogaloo", 27015, _valve(317_360)),
    "dod": Game("Day of Defeat", 27015, _gold_src()),
    "dods": Game("Day of Defeat: Source", 27015, _valve(300)),
    "doi": Game("Day of Infamy", 27015, _valve(447_820)),
    "dst": Game("Don't Starve Together", 27016, _valve(322_320)),
    "enshrouded": Game("Enshrouded", 15637, _valve(1_203_620)),
    "ffow": Game("Frontlines: Fuel of War", 5478, _proprietary("ffow")),
    "garrysmod": Game("Garry's Mod", 27016, _valve(4000)),
    "hl2d": Game("Half-Life 2 Deathmatch", 27015, _valve(320)),
    "hce": Game("Halo: Combat Evolved", 2302, _gamespy(2)),
    "hlds": Game("Half-Life Deathmatch: Source", 27015, _valve(360)),
    "hll": Game("Hell Let Loose", 26420, _valve(686_810)),
    "insurgency": Game("Insurgency", 27015, _valve(222_880)),
    "imic": Game("Insurgency: Modern Infantry Combat", 27015, _valve(17700)),
    "insurgencysandstorm": Game("Insurgency: Sandstorm", 27131, _valve(581_320)),
    "l4d": Game("Left 4 Dead", 27015, _valve(500)),
    "l4d2": Game("Left 4 Dead 2", 27015, _valve(550)),
    "ohd": Game("Operation: Harsh Doorstop", 27005, _valve(736_590, 950_900)),
    "onset": Game("Onset", 7776, _valve(1_105_810)),
    "pixark": Game("PixARK", 27015, _valve(593_600)),
    "postscriptum": Game("Post Scriptum", 10037, _valve(736_220)),
    "projectzomboid": Game("Project Zomboid", 16261, _valve(108_600)),
    "pvak2": Game("Pirates, Vikings, and Knights II", 27015, _valve(17_570)),
    "quake1": Game("Quake 1", 27500, _quake(1)),
    "quake2": Game("Quake 2", 27910, _quake(2)),
    "q3a": Game("Quake 3 Arena", 27960, _quake(3)),
    "risingworld": Game("Rising World", 4254, _valve(324_080), _PLAYERS_ONLY),
    "ror2": Game("Risk of Rain 2", 27016, _valve(632_360)),
    "rust": Game("Rust", 27015, _valve(252_490)),
    "savage2": Game("Savage 2", 11235, _proprietary("savage2")),
    "sco": Game("Sven Co-op", 27015, _gold_src()),
    "sdtd": Game("7 Days to Die", 26900, _valve(251_570)),
    "sof2": Game("Soldier of Fortune 2", 20100, _quake(3)),
    "soulmask": Game("Soulmask", 27015, _valve(2_646_460)),
    "serioussam": Game("Serious Sam", 25601, _gamespy(1)),
    "squad": Game("Squad", 27165, _valve(393_380)),
    "theforest": Game("The Forest", 27016, _valve(556_450)),
    "thefront": Game("The Front", 27015, _valve(2_285_150)),
    "teamfortress2": Game("Team Fortress 2", 27015, _valve(440)),
    "tfc": Game("Team Fortress Classic", 27015, _gold_src()),
    "theship": Game("The Ship", 27015, _proprietary("theship")),
    "unturned": Game("Unturned", 27015, _valve(304_930)),
    "unrealtournament": Game("Unreal Tournament", 7778, _gamespy(1)),
    "valheim": Game("Valheim", 2457, _valve(892_970), _PLAYERS_ONLY),
    "vrising": Game("V Rising", 27016, _valve(1_604_030)),
    "jc2m": Game("Just Cause 2: Multiplayer", 7777, _proprietary("jc2m")),
    "warsow": Game("Warsow", 44400, _quake(3)),
    "dhe4445": Game("Darkest Hour: Europe '44-'45 (2008)", 7758, _UNREAL2),
    "devastation": Game("Devastation (2003)", 7778, _UNREAL2),
    "killingfloor": Game("Killing Floor", 7708, _UNREAL2),
    "redorchestra": Game("Red Orchestra", 7759, _UNREAL2),
    "unrealtournament2003": Game("Unreal Tournament 2003", 7758, _UNREAL2),
    "unrealtournament2004": Game("Unreal Tournament 2004", 7778, _UNREAL2),
    "eco": Game("Eco", 3000, _proprietary("eco")),
    "zps": Game("Zombie Panic: Source", 27015, _valve(17_500)),
    "moe": Game("Myth Of Empires", 12888, _valve(1_371_580)),
    "mordhau": Game("Mordhau", 27015, _valve(629_760)),
    "mindustry": Game("Mindustry", _MINDUSTRY_PORT, _proprietary("mindustry")),
    "nla": Game("Nova-Life: Amboise", 27015, _valve(885_570)),
})


def get_game(key: str) -> Game | None:
    """Return the game registered under ``key``, or None if there is none."""
    return GAMES.get(key)
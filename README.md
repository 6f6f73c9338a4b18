# gamequery

A small library for asking game servers about their current state: name,
map, player counts, version and so on. It uses only the Python standard
library.

Servers it can query:

- Minecraft: Java Edition, Bedrock Edition and the legacy Java protocols
  (1.6, 1.4 - 1.5, Beta 1.8 - 1.3)
- Mindustry
- Savage 2
- Eco (through the server's HTTP front page)

It also carries a table of known games with their default ports and the
protocol family each one speaks.

## Installation

```
pip install gamequery
```

## Minecraft

```python
from gamequery.minecraft.client import query, query_bedrock, query_legacy_specific
from gamequery.minecraft.types import LegacyGroup

# Tries Java, then Bedrock, then the legacy protocols in turn.
response = query("127.0.0.1")
print(response.game_version, response.players_online, response.players_maximum)

bedrock = query_bedrock("127.0.0.1")          # default port 19132
print(bedrock.name, bedrock.version_name, bedrock.game_mode)

old = query_legacy_specific(LegacyGroup.V1_4, "127.0.0.1")  # default port 25565
print(old.description)
```

`query` returns a `JavaResponse` whatever edition answered; a Bedrock answer
is reshaped with `JavaResponse.from_bedrock_response`, and `server_type`
(a `Server`) tells which edition and, for legacy servers, which
`LegacyGroup` replied. For modern Java servers `description` holds the
server's description as compact JSON text.

Some Java servers expect a particular hostname in the handshake. Pass one
through `RequestSettings` (the default hostname is `gamequery`, the default
protocol version `-1`, meaning any):

```python
from gamequery.minecraft.client import query_java
from gamequery.minecraft.types import RequestSettings

response = query_java("127.0.0.1", 25565, None, RequestSettings.just_hostname("mc.example.com"))
```

The packet parsers can be used on their own, for example on captured data:
`gamequery.minecraft.java.parse_java_status`,
`gamequery.minecraft.bedrock.parse_bedrock_status` and
`gamequery.minecraft.legacy.parse_v1_6`, `parse_v1_4`, `parse_vb1_8`.
`gamequery.minecraft.types` has the VarInt helpers `get_varint`,
`as_varint`, `get_string` and `as_string`.

## Mindustry, Savage 2 and Eco

```python
from gamequery import eco, mindustry, savage2

server = mindustry.query("127.0.0.1")          # default port 6567
print(server.host, server.game_mode(), server.players_online(), server.players_maximum())

s2 = savage2.query("127.0.0.1")                # default port 11235
print(s2.name, s2.map, s2.players_online)

front = eco.query("127.0.0.1")                 # default port 3001
print(front.description, front.players_online, [p.name for p in front.players])
```

`eco.query` accepts an `EcoRequestSettings` (or an `ExtraRequestSettings`)
whose `hostname` is sent as the HTTP Host name. `mindustry.parse_server_data`
and `savage2.parse_response` parse raw replies.

## Timeouts, retries and errors

Every query takes an optional `TimeoutSettings` from `gamequery.core`:
`read`, `write` and `connect` timeouts in seconds (4 by default; `None`
waits forever) and `retries` (0 by default). The Minecraft and Mindustry
queries try again up to `retries` times when sending or receiving fails;
the Savage 2 and Eco queries make a single attempt.

A failed query raises `GameQueryError`. Its `kind` attribute is an
`ErrorKind` (for example `PACKET_RECEIVE`, `PACKET_BAD`, `HOST_LOOKUP`,
`AUTO_QUERY` when every Minecraft protocol failed) and `context` carries a
message when there is one.

## HTTP client

`gamequery.http.HttpClient` sends requests to a fixed IP and port while
presenting a chosen Host name, configured with `HttpSettings`
(`with_protocol`, `with_hostname`, `with_header`, `with_headers`).
`HttpClient.from_url` builds one from a URL, looking the host up when it is a
name. It offers `get`, `get_json`, `post_json` and `post_json_with_form`.

## Game definitions

```python
from gamequery.games import GAMES, get_game

game = get_game("teamfortress2")
print(game.name, game.default_port, game.protocol.family, game.protocol.app_id)
print(len(GAMES), "games known")
```

`get_game` returns `None` for an unknown key.

## What it does not do

- The game table names games that speak the Valve, GameSpy, Quake,
  Unreal 2 and several other protocols, but only the Minecraft, Mindustry,
  Savage 2 and Eco queries are implemented here. There is no function that
  queries a server from its `Game` definition.
- There is no command-line tool; the package is a library only.

## Running the tests

```
pip install -e .[test]
pytest
```
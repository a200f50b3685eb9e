from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from quiz.game_def import Channel, ChannelId, DefinitionLoadError, Game, GameId, load_game

logger = logging.getLogger(__name__)

CHANNELS_FILE = "channels.json"
GAME_FILE_PREFIX = "game-"

_channel_list = TypeAdapter(list[Channel])


class FileDefinitionsRepository:
    """Game and channel definitions read from a data directory at startup.

    Layout:
        <data_dir>/channels.json   list of channels
        <data_dir>/game-*.json     one game per file

    Definitions are immutable once loaded; lookups need no locking.
    """

    def __init__(self, *, games: dict[GameId, Game], channels: dict[ChannelId, Channel]) -> None:
        self._games = dict(games)
        self._channels = dict(channels)

    async def get_game_by_id(self, game_id: GameId) -> Game | None:
        return self._games.get(game_id)

    async def get_channel_by_id(self, channel_id: ChannelId) -> Channel | None:
        return self._channels.get(channel_id)

    @staticmethod
    def load(data_dir: Path) -> "FileDefinitionsRepository":
        if not data_dir.is_dir():
            raise DefinitionLoadError(f"Definitions directory not found: {data_dir}")

        channels = load_channels(data_dir)
        games = load_games(data_dir)
        logger.info("Loaded %d channels and %d games from %s", len(channels), len(games), data_dir)

        for channel in channels.values():
            if channel.game_id is not None and channel.game_id not in games:
                logger.warning("Channel %s refers to unknown game %s", channel.channel_id, channel.game_id)

        return FileDefinitionsRepository(games=games, channels=channels)


def load_channels(data_dir: Path) -> dict[ChannelId, Channel]:
    path = data_dir / CHANNELS_FILE
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DefinitionLoadError(f"Channels file not found: {path}") from e

    try:
        rows = _channel_list.validate_json(raw)
    except ValidationError as e:
        raise DefinitionLoadError(f"Invalid channels file {path}: {e}") from e

    out: dict[ChannelId, Channel] = {}
    for channel in rows:
        if channel.channel_id in out:
            raise DefinitionLoadError(f"Duplicate channel id: {channel.channel_id}")
        out[channel.channel_id] = channel
    return out


def load_games(data_dir: Path) -> dict[GameId, Game]:
    out: dict[GameId, Game] = {}
    for path in sorted(data_dir.glob(f"{GAME_FILE_PREFIX}*.json")):
        game = load_game(path)
        if game.id in out:
            raise DefinitionLoadError(f"Duplicate game id {game.id} in {path}")
        out[game.id] = game
    return out

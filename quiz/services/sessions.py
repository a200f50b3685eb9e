from __future__ import annotations

import redis

from quiz.game_def import GameId
from quiz.session import GameSession, PlayerId, session_key

SESSION_KEY_PREFIX = "quiz:session:"  # + {game_id}:{channel_id}:{player_id}


class InMemorySessionRepository:
    """Process-local session store; sessions are lost on restart."""

    def __init__(self) -> None:
        self._by_game: dict[GameId, dict[PlayerId, GameSession]] = {}

    async def get_by_id(self, game_id: GameId, player_id: PlayerId) -> GameSession | None:
        session = self._by_game.get(game_id, {}).get(player_id)
        # Callers get their own copy so an unsaved mutation never leaks into the store.
        return session.model_copy(deep=True) if session is not None else None

    async def store(self, session: GameSession) -> None:
        self._by_game.setdefault(session.game_id, {})[session.player_id] = session.model_copy(deep=True)


def _session_key(game_id: GameId, player_id: PlayerId) -> str:
    return f"{SESSION_KEY_PREFIX}{session_key(game_id, player_id)}"


class RedisSessionRepository:
    def __init__(self, *, r: redis.Redis) -> None:
        self._r = r

    async def get_by_id(self, game_id: GameId, player_id: PlayerId) -> GameSession | None:
        raw = self._r.get(_session_key(game_id, player_id))
        if not raw:
            return None
        return GameSession.model_validate_json(raw)

    async def store(self, session: GameSession) -> None:
        self._r.set(_session_key(session.game_id, session.player_id), session.model_dump_json())

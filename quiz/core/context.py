from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Protocol

from quiz.game_def import Channel, ChannelId, Game, GameId
from quiz.responses import ResponseMessage
from quiz.session import GameSession, PlayerId


class ResponseTextFormatter(Protocol):
    def format(self, message: ResponseMessage) -> str:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class PlayerMessage:
    player_id: PlayerId
    text: str


@dataclass(frozen=True, slots=True)
class Response:
    to: PlayerId
    channel: Channel
    message: ResponseMessage
    formatter: ResponseTextFormatter

    def render(self) -> str:
        return self.formatter.format(self.message)


class ResponseSender(Protocol):
    async def respond(self, response: Response) -> None:  # pragma: no cover
        ...


class SessionRepository(Protocol):
    async def get_by_id(self, game_id: GameId, player_id: PlayerId) -> GameSession | None:  # pragma: no cover
        ...

    async def store(self, session: GameSession) -> None:  # pragma: no cover
        ...


class DefinitionsRepository(Protocol):
    async def get_game_by_id(self, game_id: GameId) -> Game | None:  # pragma: no cover
        ...

    async def get_channel_by_id(self, channel_id: ChannelId) -> Channel | None:  # pragma: no cover
        ...


class SessionLocks(Protocol):
    def hold(self, key: str) -> AbstractAsyncContextManager[None]:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class AppContext:
    """Everything a request handler needs, built once at startup and shared."""

    responder: ResponseSender
    sessions: SessionRepository
    definitions: DefinitionsRepository
    locks: SessionLocks

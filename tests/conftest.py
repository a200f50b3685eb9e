from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from quiz.core.context import AppContext, Response
from quiz.game_def import Game, load_game
from quiz.lock import ShardedLocks
from quiz.responses import ResponseMessage
from quiz.services.definitions import FileDefinitionsRepository
from quiz.services.sessions import InMemorySessionRepository
from quiz.session import PlayerId

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(scope="session", autouse=True)
def _point_settings_at_test_data() -> None:
    """Keep app startup hermetic: definitions from `tests/data`, no Redis."""

    os.environ["DATA_DIR"] = str(DATA_DIR)
    os.environ.pop("REDIS_URL", None)


class RecordingResponder:
    def __init__(self) -> None:
        self.responses: list[Response] = []

    async def respond(self, response: Response) -> None:
        self.responses.append(response)

    def messages(self) -> list[ResponseMessage]:
        """Drain what has been sent so far."""

        out = [r.message for r in self.responses]
        self.responses.clear()
        return out


@pytest.fixture()
def test_game() -> Game:
    return load_game(DATA_DIR / "game-1.json")


@pytest.fixture()
def player_id() -> PlayerId:
    return PlayerId(channel_id="1", id="1")


@pytest.fixture()
def responder() -> RecordingResponder:
    return RecordingResponder()


@pytest.fixture()
def ctx(responder: RecordingResponder) -> AppContext:
    return AppContext(
        responder=responder,
        sessions=InMemorySessionRepository(),
        definitions=FileDefinitionsRepository.load(DATA_DIR),
        locks=ShardedLocks(),
    )


@pytest.fixture()
def client(ctx: AppContext) -> Generator:
    """FastAPI TestClient wired to the in-memory test context, sync delivery."""

    from fastapi.testclient import TestClient

    from quiz.api.deps import get_context, get_settings
    from quiz.config import Settings
    from quiz.main import app

    settings = Settings(verify_token="TOKEN", data_dir=DATA_DIR, delivery_mode="sync")

    app.dependency_overrides[get_context] = lambda: ctx
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

from __future__ import annotations

from pathlib import Path

import pytest

from quiz.console import CONSOLE_CHANNEL_ID, make_console_context
from quiz.core.context import PlayerMessage
from quiz.engine import process_message
from quiz.game_def import DefinitionLoadError
from quiz.session import PlayerId

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.mark.asyncio
async def test_console_plays_a_game_file(capsys: pytest.CaptureFixture[str]) -> None:
    ctx = make_console_context(DATA_DIR / "game-1.json")
    player_id = PlayerId(channel_id=CONSOLE_CHANNEL_ID, id="1")

    for text in ["hi", "yes", "topic1", "ans11"]:
        await process_message(PlayerMessage(player_id=player_id, text=text), ctx=ctx)

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "Hello! Today we play #TEST_GAME. Want to join?",
        "Choose a topic from: topic1, topic2. Answer a question. Get your score when all topics are complete",
        "Next question: q11",
        "That is correct. Your score: 1",
        "Choose the next topic",
    ]


def test_console_rejects_missing_game_file(tmp_path: Path) -> None:
    with pytest.raises(DefinitionLoadError):
        make_console_context(tmp_path / "game-1.json")

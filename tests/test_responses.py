from __future__ import annotations

import pytest

from quiz.game_def import Game
from quiz.responses import (
    AlreadyAnswered,
    AnswerQuestion,
    ChooseNextTopic,
    Correct,
    GameComplete,
    Greeting,
    Incorrect,
    PleaseRetry,
    PleaseRetryLimits,
    Quit,
    Rephrase,
    ResponseMessage,
    ResponseTemplates,
    Rules,
    default_templates,
)


@pytest.mark.parametrize(
    ("message", "text"),
    [
        (Greeting("Capitals"), "Hello! Today we play Capitals. Want to join?"),
        (Rephrase(), "I don't understand"),
        (
            Rules(("europe", "asia")),
            "Choose a topic from: europe, asia. Answer a question. Get your score when all topics are complete",
        ),
        (AnswerQuestion("2+2?"), "Next question: 2+2?"),
        (PleaseRetry(), "That is incorrect. Try again"),
        (PleaseRetryLimits(2), "That is incorrect. Try again. 2 attempts left"),
        (Incorrect(), "That is incorrect"),
        (Correct(5), "That is correct. Your score: 5"),
        (GameComplete(7), "Game is complete. Your score: 7"),
        (ChooseNextTopic(), "Choose the next topic"),
        (AlreadyAnswered(), "You already answered this topic"),
        (Quit(), "Ok... Goodbye!"),
    ],
)
def test_default_templates(message: ResponseMessage, text: str) -> None:
    assert default_templates().format(message) == text


def test_custom_templates_from_definition(test_game: Game) -> None:
    templates = default_templates().model_copy(update={"correct": "Верно! Счёт: #SCORE (#SCORE)"})
    game = test_game.model_copy(update={"responses": templates})

    assert game.format(Correct(3)) == "Верно! Счёт: 3 (3)"


def test_unknown_template_keys_are_rejected() -> None:
    fields = default_templates().model_dump()
    fields["farewell"] = "bye"
    with pytest.raises(ValueError):
        ResponseTemplates.model_validate(fields)

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True, slots=True)
class Greeting:
    name: str


@dataclass(frozen=True, slots=True)
class Rephrase:
    pass


@dataclass(frozen=True, slots=True)
class Rules:
    topics: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AnswerQuestion:
    text: str


@dataclass(frozen=True, slots=True)
class PleaseRetry:
    pass


@dataclass(frozen=True, slots=True)
class PleaseRetryLimits:
    left: int


@dataclass(frozen=True, slots=True)
class Incorrect:
    pass


@dataclass(frozen=True, slots=True)
class Correct:
    score: int


@dataclass(frozen=True, slots=True)
class GameComplete:
    score: int


@dataclass(frozen=True, slots=True)
class ChooseNextTopic:
    pass


@dataclass(frozen=True, slots=True)
class AlreadyAnswered:
    pass


@dataclass(frozen=True, slots=True)
class Quit:
    pass


ResponseMessage = (
    Greeting
    | Rephrase
    | Rules
    | AnswerQuestion
    | PleaseRetry
    | PleaseRetryLimits
    | Incorrect
    | Correct
    | GameComplete
    | ChooseNextTopic
    | AlreadyAnswered
    | Quit
)


class ResponseTemplates(BaseModel):
    """One text template per response message.

    Placeholders: #NAME, #TOPICS, #QUESTION, #LEFT, #SCORE.
    Every template is required and unknown keys are rejected, so an incomplete
    set fails when the game definition is loaded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    greeting: str
    rephrase: str
    rules: str
    answer_question: str
    please_retry: str
    please_retry_limits: str
    incorrect: str
    correct: str
    game_complete: str
    choose_next_topic: str
    already_answered: str
    quit: str

    def format(self, message: ResponseMessage) -> str:
        if isinstance(message, Greeting):
            return self.greeting.replace("#NAME", message.name)
        if isinstance(message, Rephrase):
            return self.rephrase
        if isinstance(message, Rules):
            return self.rules.replace("#TOPICS", ", ".join(message.topics))
        if isinstance(message, AnswerQuestion):
            return self.answer_question.replace("#QUESTION", message.text)
        if isinstance(message, PleaseRetry):
            return self.please_retry
        if isinstance(message, PleaseRetryLimits):
            return self.please_retry_limits.replace("#LEFT", str(message.left))
        if isinstance(message, Incorrect):
            return self.incorrect
        if isinstance(message, Correct):
            return self.correct.replace("#SCORE", str(message.score))
        if isinstance(message, GameComplete):
            return self.game_complete.replace("#SCORE", str(message.score))
        if isinstance(message, ChooseNextTopic):
            return self.choose_next_topic
        if isinstance(message, AlreadyAnswered):
            return self.already_answered
        if isinstance(message, Quit):
            return self.quit
        raise ValueError(f"Unknown response message: {message!r}")


def default_templates() -> ResponseTemplates:
    return ResponseTemplates(
        greeting="Hello! Today we play #NAME. Want to join?",
        rephrase="I don't understand",
        rules="Choose a topic from: #TOPICS. Answer a question. Get your score when all topics are complete",
        answer_question="Next question: #QUESTION",
        please_retry="That is incorrect. Try again",
        please_retry_limits="That is incorrect. Try again. #LEFT attempts left",
        incorrect="That is incorrect",
        correct="That is correct. Your score: #SCORE",
        game_complete="Game is complete. Your score: #SCORE",
        choose_next_topic="Choose the next topic",
        already_answered="You already answered this topic",
        quit="Ok... Goodbye!",
    )

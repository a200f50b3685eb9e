from __future__ import annotations

import random
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from quiz.responses import ResponseMessage, ResponseTemplates, default_templates

GameId = int
ChannelId = str
TopicId = int


class DefinitionLoadError(RuntimeError):
    pass


class QuestionId(BaseModel):
    """Compact (topic index, question index) reference.

    Only meaningful against the `Game` it was produced from.
    """

    model_config = ConfigDict(frozen=True)

    topic: TopicId
    index: int


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    answers: frozenset[str]


class Topic(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    questions: tuple[Question, ...]
    bonus: int = Field(..., ge=0)

    @field_validator("questions")
    @classmethod
    def _at_least_one_question(cls, v: tuple[Question, ...]) -> tuple[Question, ...]:
        if not v:
            raise ValueError("topic must have at least one question")
        return v


class GenericAnswers(BaseModel):
    model_config = ConfigDict(frozen=True)

    yes: frozenset[str]
    no: frozenset[str]
    stop: frozenset[str]


def default_generic_answers() -> GenericAnswers:
    return GenericAnswers(
        yes=frozenset({"yes", "да"}),
        no=frozenset({"no", "нет"}),
        stop=frozenset({"stop", "стоп"}),
    )


class Channel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    channel_id: ChannelId
    token: str
    game_id: GameId | None = None


class Game(BaseModel):
    """Immutable quiz definition, loaded once and shared by every session.

    Vocabulary, topic keys and answers are compared verbatim against normalized
    input, so they must already be in canonical form (see `quiz.text_util`).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: GameId
    name: str
    topics: tuple[Topic, ...]
    max_attempt: int | None = Field(default=None, ge=1, alias="maxAttempt")
    generic_answers: GenericAnswers = Field(default_factory=default_generic_answers, alias="genericAnswers")
    responses: ResponseTemplates = Field(default_factory=default_templates)

    def is_yes(self, text: str) -> bool:
        return text in self.generic_answers.yes

    def is_no(self, text: str) -> bool:
        return text in self.generic_answers.no

    def is_stop(self, text: str) -> bool:
        return text in self.generic_answers.stop

    def find_topic(self, text: str) -> TopicId | None:
        # The configured key has to contain the input, not the other way around.
        for topic_id, topic in enumerate(self.topics):
            if text in topic.key:
                return topic_id
        return None

    def select_question(self, topic_id: TopicId, *, rng: random.Random | None = None) -> QuestionId:
        questions = self.topics[topic_id].questions
        index = (rng or random).randrange(len(questions))
        return QuestionId(topic=topic_id, index=index)

    def _question(self, question_id: QuestionId) -> Question:
        return self.topics[question_id.topic].questions[question_id.index]

    def question_text(self, question_id: QuestionId) -> str:
        return self._question(question_id).text

    def is_correct_answer(self, question_id: QuestionId, text: str) -> bool:
        return text in self._question(question_id).answers

    def bonus(self, topic_id: TopicId) -> int:
        return self.topics[topic_id].bonus

    def is_complete(self, resolved_count: int) -> bool:
        return resolved_count == len(self.topics)

    def topic_keys(self) -> list[str]:
        return [t.key for t in self.topics]

    def format(self, message: ResponseMessage) -> str:
        return self.responses.format(message)


def load_game(path: Path) -> Game:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DefinitionLoadError(f"Game definition not found: {path}") from e

    try:
        return Game.model_validate_json(raw)
    except ValidationError as e:
        raise DefinitionLoadError(f"Invalid game definition in {path}: {e}") from e

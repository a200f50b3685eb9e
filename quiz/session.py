from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from quiz.game_def import GameId, QuestionId, TopicId


class PlayerId(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_id: str
    id: str


class New(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["new"] = "new"


class Deciding(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["deciding"] = "deciding"


class ChoosingTopic(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["choosing_topic"] = "choosing_topic"


class Answering(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["answering"] = "answering"

    question_id: QuestionId
    attempt: int = Field(default=0, ge=0)


class Complete(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["complete"] = "complete"


class Terminated(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["terminated"] = "terminated"


SessionState = Annotated[
    New | Deciding | ChoosingTopic | Answering | Complete | Terminated,
    Field(discriminator="kind"),
]


class TopicResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    topic_id: TopicId
    score: int


class GameSession(BaseModel):
    """Conversation state of one player in one game.

    `score` is always the sum of `results`, and a topic appears in `results`
    at most once. Both only ever grow.
    """

    player_id: PlayerId
    game_id: GameId
    state: SessionState = Field(default_factory=New)
    results: list[TopicResult] = Field(default_factory=list)
    score: int = 0

    @staticmethod
    def new(*, player_id: PlayerId, game_id: GameId) -> "GameSession":
        return GameSession(player_id=player_id, game_id=game_id)

    def has_played(self, topic_id: TopicId) -> bool:
        return any(r.topic_id == topic_id for r in self.results)

    def record(self, topic_id: TopicId, score: int) -> None:
        if self.has_played(topic_id):
            raise ValueError(f"Topic {topic_id} already resolved")
        self.results.append(TopicResult(topic_id=topic_id, score=score))
        self.score += score


def session_key(game_id: GameId, player_id: PlayerId) -> str:
    return f"{game_id}:{player_id.channel_id}:{player_id.id}"

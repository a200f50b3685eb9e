from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from quiz.core.context import AppContext, PlayerMessage, Response
from quiz.fsm import SessionFSM
from quiz.game_def import Game, QuestionId
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
    Rules,
)
from quiz.session import (
    Answering,
    ChoosingTopic,
    Complete,
    Deciding,
    GameSession,
    New,
    SessionState,
    Terminated,
    session_key,
)
from quiz.text_util import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one processed utterance.

    - `session`: the session after the step (a copy, the input is never mutated).
    - `responses`: events to deliver, in order.
    - `persist`: False only when nothing could have changed (terminated session).
    """

    session: GameSession
    responses: list[ResponseMessage]
    persist: bool = True


class _Turn:
    def __init__(self, *, session: GameSession, game: Game, text: str, rng: random.Random | None) -> None:
        self.session = session
        self.game = game
        self.text = text
        self.rng = rng
        self.responses: list[ResponseMessage] = []
        self.fsm = SessionFSM(session)

    def respond(self, message: ResponseMessage) -> None:
        self.responses.append(message)

    def move(self, event: str, state: SessionState) -> None:
        self.fsm.send(event)
        self.session.state = state

    def run(self) -> None:
        if self.game.is_stop(self.text):
            self.move("quit", Terminated())
            self.respond(Quit())
            return

        state = self.session.state
        if isinstance(state, New):
            self.greet()
        elif isinstance(state, Deciding):
            self.decide()
        elif isinstance(state, ChoosingTopic):
            self.choose_topic()
        elif isinstance(state, Answering):
            self.answer_question(state)
            self.check_if_complete()
        elif isinstance(state, Complete):
            self.respond(GameComplete(self.session.score))
        else:
            raise ValueError(f"Unknown session state: {state!r}")

    def greet(self) -> None:
        self.respond(Greeting(self.game.name))
        self.move("greet", Deciding())

    def decide(self) -> None:
        if self.game.is_yes(self.text):
            self.respond(Rules(tuple(self.game.topic_keys())))
            self.move("accept", ChoosingTopic())
        elif self.game.is_no(self.text):
            self.respond(Quit())
            self.move("decline", Terminated())
        else:
            self.respond(Rephrase())

    def choose_topic(self) -> None:
        topic_id = self.game.find_topic(self.text)
        if topic_id is None:
            self.respond(Rephrase())
            return
        if self.session.has_played(topic_id):
            self.respond(AlreadyAnswered())
            return

        question_id = self.game.select_question(topic_id, rng=self.rng)
        self.move("pick_topic", Answering(question_id=question_id, attempt=0))
        self.respond(AnswerQuestion(self.game.question_text(question_id)))

    def answer_question(self, state: Answering) -> None:
        if self.game.is_correct_answer(state.question_id, self.text):
            self.answer_was_correct(state.question_id)
        elif self.game.max_attempt is None:
            self.respond(PleaseRetry())
        else:
            self.answer_was_incorrect(state, self.game.max_attempt)

    def answer_was_correct(self, question_id: QuestionId) -> None:
        topic_id = question_id.topic
        self.session.record(topic_id, self.game.bonus(topic_id))
        self.respond(Correct(self.session.score))
        self.move("resolve_topic", ChoosingTopic())

    def answer_was_incorrect(self, state: Answering, max_attempt: int) -> None:
        next_attempt = state.attempt + 1
        if next_attempt >= max_attempt:
            self.respond(Incorrect())
            self.session.record(state.question_id.topic, 0)
            self.move("resolve_topic", ChoosingTopic())
        else:
            self.respond(PleaseRetryLimits(max_attempt - next_attempt))
            self.move("retry", Answering(question_id=state.question_id, attempt=next_attempt))

    def check_if_complete(self) -> None:
        if self.game.is_complete(len(self.session.results)):
            self.respond(GameComplete(self.session.score))
            self.move("finish", Complete())
        elif isinstance(self.session.state, ChoosingTopic):
            self.respond(ChooseNextTopic())


def advance(session: GameSession, game: Game, text: str, *, rng: random.Random | None = None) -> StepResult:
    """Run one step of the dialog state machine.

    `text` must already be normalized. Terminated sessions are left alone; a stop
    word ends any other session before the state-specific step runs.
    """

    if isinstance(session.state, Terminated):
        return StepResult(session=session, responses=[], persist=False)

    turn = _Turn(session=session.model_copy(deep=True), game=game, text=text, rng=rng)
    turn.run()
    return StepResult(session=turn.session, responses=turn.responses)


async def process_message(
    message: PlayerMessage,
    *,
    ctx: AppContext,
    rng: random.Random | None = None,
) -> StepResult | None:
    """Entry point for the webhook and the console.

    Resolves channel -> game, then, holding the per-(game, player) lock:
    - loads the session (or starts a new one)
    - advances it by one step
    - persists it
    - hands the responses to the responder in order

    Returns None when the message cannot be routed to a game. Store and delivery
    errors are not handled here.
    """

    channel_id = message.player_id.channel_id
    channel = await ctx.definitions.get_channel_by_id(channel_id)
    if channel is None:
        logger.debug("Ignoring message from %s: no channel config", channel_id)
        return None
    if channel.game_id is None:
        logger.debug("Ignoring message from %s: no games configured for channel", channel_id)
        return None
    game = await ctx.definitions.get_game_by_id(channel.game_id)
    if game is None:
        logger.debug("Ignoring message from %s: game %s not found", channel_id, channel.game_id)
        return None

    text = normalize(message.text)
    player_id = message.player_id

    async with ctx.locks.hold(session_key(game.id, player_id)):
        session = await ctx.sessions.get_by_id(game.id, player_id)
        if session is None:
            session = GameSession.new(player_id=player_id, game_id=game.id)

        result = advance(session, game, text, rng=rng)
        logger.debug(
            "Player %s in game %s: %r -> %s (%d responses)",
            player_id.id,
            game.id,
            text,
            result.session.state.kind,
            len(result.responses),
        )

        if result.persist:
            await ctx.sessions.store(result.session)

        for response in result.responses:
            await ctx.responder.respond(Response(to=player_id, channel=channel, message=response, formatter=game))

    return result

from __future__ import annotations

from statemachine import State, StateMachine

from quiz.session import GameSession


class SessionFSM(StateMachine):
    """Transition guard for a player's session.

    States mirror `GameSession.state.kind`. The engine fires an event before it
    assigns the new state, so a move the diagram does not allow raises
    `statemachine.exceptions.TransitionNotAllowed` instead of corrupting the session.
    """

    new = State("New", value="new", initial=True)
    deciding = State("Deciding", value="deciding")
    choosing_topic = State("ChoosingTopic", value="choosing_topic")
    answering = State("Answering", value="answering")
    complete = State("Complete", value="complete")
    terminated = State("Terminated", value="terminated", final=True)

    greet = new.to(deciding)
    accept = deciding.to(choosing_topic)
    decline = deciding.to(terminated)
    pick_topic = choosing_topic.to(answering)
    retry = answering.to.itself()
    resolve_topic = answering.to(choosing_topic)
    finish = choosing_topic.to(complete)
    quit = (
        new.to(terminated)
        | deciding.to(terminated)
        | choosing_topic.to(terminated)
        | answering.to(terminated)
        | complete.to(terminated)
    )

    def __init__(self, session: GameSession):
        self.session = session
        super().__init__(start_value=session.state.kind)

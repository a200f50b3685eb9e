from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from quiz.api.webhook import TextMessage, extract_messages, process_messages
from quiz.core.context import AppContext, Response
from quiz.responses import Greeting, Rules
from quiz.session import PlayerId


def _event(*messaging: dict[str, Any], obj: str = "page") -> dict[str, Any]:
    return {"object": obj, "entry": [{"id": "1", "time": 1458692752478, "messaging": list(messaging)}]}


def _text(text: str, *, sender: str = "4339620206152955", recipient: str = "1", **extra: Any) -> dict[str, Any]:
    return {
        "sender": {"id": sender},
        "recipient": {"id": recipient},
        "timestamp": 1458692752478,
        "message": {"mid": "mid.1457764197618:41d102a3e1ae206a38", "text": text, **extra},
    }


def test_subscribe_returns_challenge(client: TestClient) -> None:
    res = client.get(
        "/api/webhook",
        params={"hub.mode": "subscribe", "hub.verify_token": "TOKEN", "hub.challenge": "CHALLENGE_ACCEPTED"},
    )
    assert res.status_code == 200
    assert res.text == "CHALLENGE_ACCEPTED"


@pytest.mark.parametrize(
    "params",
    [
        {"hub.mode": "subscribe", "hub.verify_token": "WRONG", "hub.challenge": "x"},
        {"hub.mode": "unsubscribe", "hub.verify_token": "TOKEN", "hub.challenge": "x"},
        {},
    ],
)
def test_subscribe_rejects_bad_requests(client: TestClient, params: dict[str, str]) -> None:
    res = client.get("/api/webhook", params=params)
    assert res.status_code == 403


def test_event_push_greets_new_player(client: TestClient, responder) -> None:
    res = client.post("/api/webhook", json=_event(_text("Hello")))

    assert res.status_code == 200
    assert len(responder.responses) == 1
    sent = responder.responses[0]
    assert sent.to == PlayerId(channel_id="1", id="4339620206152955")
    assert sent.channel.token == "token"
    assert sent.message == Greeting("#TEST_GAME")


def test_batch_is_processed_in_payload_order(client: TestClient, responder) -> None:
    res = client.post("/api/webhook", json=_event(_text("hi"), _text("yes")))

    assert res.status_code == 200
    assert responder.messages() == [Greeting("#TEST_GAME"), Rules(("topic1", "topic2"))]


def test_event_for_unknown_channel_is_acknowledged(client: TestClient, responder) -> None:
    res = client.post("/api/webhook", json=_event(_text("hi", recipient="unknown")))

    assert res.status_code == 200
    assert responder.responses == []


def test_non_message_payload_is_acknowledged(client: TestClient, responder) -> None:
    res = client.post("/api/webhook", json={"object": "user", "entry": []})

    assert res.status_code == 200
    assert responder.responses == []


def test_healthcheck_and_info(client: TestClient) -> None:
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "quiz-bot"


def test_extract_messages_skips_echoes_and_non_text() -> None:
    root = _event(
        _text("А где ?"),
        _text("echo", is_echo=True),
        {"sender": {"id": "1"}, "recipient": {"id": "1"}, "delivery": {"watermark": 1}},
        {"sender": {"id": "1"}, "recipient": {"id": "1"}, "message": {"attachments": []}},
    )

    assert extract_messages(root) == [TextMessage(text="А где ?", sender="4339620206152955", recipient="1")]


def test_extract_messages_accepts_instagram() -> None:
    assert len(extract_messages(_event(_text("hi"), obj="instagram"))) == 1


def test_extract_messages_ignores_other_objects() -> None:
    assert extract_messages(_event(_text("hi"), obj="whatsapp_business_account")) == []


def test_extract_messages_tolerates_missing_entries() -> None:
    assert extract_messages({"object": "page"}) == []


class _FlakyResponder:
    def __init__(self) -> None:
        self.responses: list[Response] = []

    async def respond(self, response: Response) -> None:
        if response.to.id == "bad":
            raise RuntimeError("send failed")
        self.responses.append(response)


@pytest.mark.asyncio
async def test_failing_player_does_not_block_the_batch(ctx: AppContext) -> None:
    flaky = _FlakyResponder()
    flaky_ctx = AppContext(responder=flaky, sessions=ctx.sessions, definitions=ctx.definitions, locks=ctx.locks)

    await process_messages(
        [
            TextMessage(text="hi", sender="bad", recipient="1"),
            TextMessage(text="hi", sender="good", recipient="1"),
        ],
        flaky_ctx,
    )

    assert [r.to.id for r in flaky.responses] == ["good"]

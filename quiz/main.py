from __future__ import annotations

import logging

from fastapi import FastAPI

from quiz.api.webhook import router
from quiz.config import Settings, load_settings
from quiz.core.context import AppContext
from quiz.infra.redis_client import create_redis
from quiz.lock import RedisLocks, ShardedLocks
from quiz.services.definitions import FileDefinitionsRepository
from quiz.services.response import FbResponseService
from quiz.services.sessions import InMemorySessionRepository, RedisSessionRepository

app = FastAPI(title="quiz-bot", version="0.1.0")
app.include_router(router)
logger = logging.getLogger(__name__)


def build_context(settings: Settings) -> AppContext:
    """Wire the collaborators for the webhook server.

    Raises on broken definitions so the server never starts half-configured.
    """

    definitions = FileDefinitionsRepository.load(settings.data_dir)
    responder = FbResponseService(graph_api_url=settings.graph_api_url)

    r = create_redis(settings)
    if r is None:
        logger.info("Using in-memory sessions")
        return AppContext(
            responder=responder,
            sessions=InMemorySessionRepository(),
            definitions=definitions,
            locks=ShardedLocks(),
        )

    logger.info("Using Redis sessions at %s", settings.redis_url)
    return AppContext(
        responder=responder,
        sessions=RedisSessionRepository(r=r),
        definitions=definitions,
        locks=RedisLocks(r=r),
    )


@app.on_event("startup")
async def _startup() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    app.state.settings = settings
    app.state.context = build_context(settings)
    logger.info("Delivery mode: %s", settings.delivery_mode)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "quiz-bot", "version": "0.1.0"}


def run() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run("quiz.main:app", host="0.0.0.0", port=settings.port)

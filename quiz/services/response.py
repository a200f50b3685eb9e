from __future__ import annotations

import logging
from typing import Any

import httpx

from quiz.core.context import Response

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_API_URL = "https://graph.facebook.com/v12.0"


class DeliveryError(RuntimeError):
    pass


def create_text_response(recipient_id: str, text: str) -> dict[str, Any]:
    return {
        "messaging_type": "RESPONSE",
        "recipient": {"id": recipient_id},
        "message": {"text": text},
    }


class FbResponseService:
    """Delivers rendered responses through the Messenger Send API.

    The page access token comes from the channel the player wrote to.
    Retrying failed sends is left to the caller.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        graph_api_url: str = DEFAULT_GRAPH_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._url = graph_api_url.rstrip("/") + "/me/messages"

    async def respond(self, response: Response) -> None:
        payload = create_text_response(response.to.id, response.render())
        try:
            resp = await self._client.post(
                self._url,
                params={"access_token": response.channel.token},
                json=payload,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise DeliveryError(f"Failed to respond to {response.to.id}: {e}") from e
        logger.debug("Delivered %s to %s", type(response.message).__name__, response.to.id)

    async def aclose(self) -> None:
        await self._client.aclose()

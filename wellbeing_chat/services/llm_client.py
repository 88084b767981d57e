"""
Client for an OpenAI-compatible chat completions endpoint.
One httpx.AsyncClient per process, created in the app lifespan and closed on shutdown.
Every call is single-shot: no retries.
"""
import logging
from typing import Any

import httpx

from wellbeing_chat.config import Settings
from wellbeing_chat.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def extract_reply(data: Any) -> str | None:
    """Text of the first choice, or None if the body does not have the expected shape."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content.strip():
        return None
    return content


class LLMClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self._url = settings.llm_api_url
        self._api_key = settings.llm_api_key
        self._model = settings.llm_model
        self._http = http_client or httpx.AsyncClient(timeout=settings.llm_timeout_seconds)

    async def chat_completion(self, messages: list[dict], **options: Any) -> Any:
        """
        POST messages ([{"role", "content"}, ...]) and return the decoded JSON body.
        Raises UpstreamFailure on transport errors and non-2xx responses. A 2xx body
        that is not JSON is returned as None so callers can fall back to a default.
        """
        payload = {"model": self._model, "messages": messages, **options}
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            res = await self._http.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("LLM request failed: %s", e)
            raise UpstreamFailure() from e

        if res.status_code < 200 or res.status_code >= 300:
            # provider error body is logged, never returned to the caller
            logger.warning("LLM returned %s: %s", res.status_code, res.text[:500])
            raise UpstreamFailure()

        try:
            return res.json()
        except ValueError:
            logger.warning("LLM returned a non-JSON body")
            return None

    async def aclose(self) -> None:
        await self._http.aclose()

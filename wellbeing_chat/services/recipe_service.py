"""Recipe suggestions from a list of ingredients. Stateless: nothing is persisted."""
import json
import logging

from wellbeing_chat.errors import InvalidRequest
from wellbeing_chat.services.llm_client import LLMClient, extract_reply

logger = logging.getLogger(__name__)

RECIPE_SYSTEM_PROMPT = """You are a helpful cooking assistant.
The user gives you a list of ingredients. Suggest one recipe that uses them.

Respond with a single JSON object and nothing else, with exactly these keys:
- "preparationMethod": step-by-step preparation as one string.
- "nutritionalInformation": a short nutritional summary as one string."""


def parse_recipe(reply: str | None) -> dict:
    """Recipe dict from the model reply. Non-JSON text becomes the preparation method."""
    if not reply:
        return {"preparationMethod": "", "nutritionalInformation": ""}
    text = reply.strip()
    # models sometimes wrap JSON in a ```json fence
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.strip()
    try:
        data = json.loads(text)
    except ValueError:
        return {"preparationMethod": reply.strip(), "nutritionalInformation": ""}
    if not isinstance(data, dict):
        return {"preparationMethod": reply.strip(), "nutritionalInformation": ""}
    return {
        "preparationMethod": str(data.get("preparationMethod") or ""),
        "nutritionalInformation": str(data.get("nutritionalInformation") or ""),
    }


async def generate_recipe(llm_client: LLMClient, prompt: str | None) -> dict:
    if not prompt or not prompt.strip():
        raise InvalidRequest("Prompt is required")
    data = await llm_client.chat_completion(
        [
            {"role": "system", "content": RECIPE_SYSTEM_PROMPT},
            {"role": "user", "content": prompt.strip()},
        ],
    )
    reply = extract_reply(data)
    if reply is None:
        logger.warning("Unexpected LLM response shape for recipe")
    return parse_recipe(reply)

"""OpenAI gateway with API key rotation on quota / rate-limit errors"""

import json
import logging
import re
from typing import Callable, List, Optional, Sequence, Type, Union

import openai
from pydantic import BaseModel

from config.settings import API_KEYS, LLM_MODEL, TEMPERATURE
from models.errors import GatewayError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_RETRYABLE_MARKERS = ("quota", "rate limit", "rate_limit")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

Prompt = Union[str, Sequence[str]]


def is_retryable(error: Exception) -> bool:
    """True when the error means 'this key is out of capacity, try another one'"""
    if isinstance(error, openai.RateLimitError):
        return True
    if getattr(error, "status_code", None) == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


def parse_json(text: str):
    """Parse a JSON response, tolerating surrounding whitespace and a markdown code fence"""
    text = (text or "").strip()
    match = _CODE_FENCE.match(text)
    if match:
        text = match.group(1)
    return json.loads(text)


def response_format_for(model: Type[BaseModel]) -> dict:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": model.__name__,
            "schema": model.model_json_schema(),
            "strict": False,
        },
    }


class AIGateway:
    """Sends a prompt to the LLM, trying each API key in order.

    Only quota / rate-limit errors move on to the next key; any other error,
    or running out of keys, raises ``GatewayError``.
    """

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        model: str = LLM_MODEL,
        temperature: float = TEMPERATURE,
        client_factory: Callable[..., object] = None,
    ):
        self.api_keys = list(API_KEYS if api_keys is None else api_keys)
        if not self.api_keys:
            raise ValueError(
                "No API keys found. Please set OPENAI_API_KEY in your environment."
            )
        self.model = model
        self.temperature = temperature
        self.client_factory = client_factory or (lambda key: openai.OpenAI(api_key=key))
        self._clients = {}

    def _client(self, key: str):
        if key not in self._clients:
            self._clients[key] = self.client_factory(key)
        return self._clients[key]

    def build_messages(self, prompt: Prompt, system: Optional[str] = None) -> List[dict]:
        """Build chat messages; a sequence prompt becomes one text part per item"""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        if isinstance(prompt, str):
            content = prompt
        else:
            content = [{"type": "text", "text": part} for part in prompt]
        messages.append({"role": "user", "content": content})
        return messages

    def generate(
        self,
        prompt: Prompt,
        response_model: Type[BaseModel],
        system: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Return the raw response text, expected to be JSON matching ``response_model``"""
        messages = self.build_messages(prompt, system)
        last_error = None

        for position, key in enumerate(self.api_keys, 1):
            try:
                response = self._client(key).chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature if temperature is None else temperature,
                    response_format=response_format_for(response_model),
                )
                return response.choices[0].message.content or ""
            except Exception as e:
                last_error = e
                if is_retryable(e):
                    logger.warning(
                        f"API key {position}/{len(self.api_keys)} quota likely exceeded, trying next key..."
                    )
                    continue
                logger.error(f"Error calling LLM: {e}")
                raise GatewayError(f"AI request failed: {e}") from e

        logger.error(f"All {len(self.api_keys)} API keys exhausted")
        raise GatewayError("All AI providers failed or were unavailable.") from last_error

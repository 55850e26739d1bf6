"""OpenRouter chat-completions backend (GPT, Claude, Gemini ... behind one API)."""

from __future__ import annotations

import json
import logging
import time

import requests

from gameloc.backends.base import TranslationBackend

logger = logging.getLogger(__name__)

API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"

# Requests are sent in fixed-size groups with a pause in between
DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 1.0  # seconds
REQUEST_TIMEOUT = 60  # seconds
TEMPERATURE = 0.3
MAX_TOKENS = 1000


def build_prompt(
    text: str,
    target_lang: str,
    source_lang: str | None = None,
    context: str | None = None,
) -> str:
    source = source_lang or "the source language"
    prompt = f'Translate this {source} game text to {target_lang}:\n\n"{text}"\n\n'
    if context:
        prompt += f"Context: {context}\n"
    prompt += (
        "\nKeep placeholders such as Gx0 unchanged."
        "\nProvide ONLY the translation, no explanations."
    )
    return prompt


def parse_reply(reply: str) -> str:
    """Pull the translation out of a model reply.

    Accepts ``{"translation": "..."}`` JSON or plain text; strips one pair
    of wrapping quotes the model may echo back from the prompt.
    """
    reply = reply.strip()
    try:
        parsed = json.loads(reply)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict) and parsed.get("translation"):
        return str(parsed["translation"]).strip()
    if len(reply) >= 2 and reply[0] == reply[-1] == '"':
        return reply[1:-1]
    return reply


class OpenRouterBackend(TranslationBackend):
    """Translation through an LLM hosted on OpenRouter, one request per text."""

    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("OpenRouter backend requires an API key (OPENROUTER_API_KEY)")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.model = model or DEFAULT_MODEL
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": "gameloc",
        })

    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
        contexts: list[str | None] | None = None,
    ) -> list[str]:
        """Translate *texts* in groups of ``batch_size``, pausing between groups."""
        if not texts:
            return []
        if contexts is None:
            contexts = [None] * len(texts)

        results: list[str] = []
        for i in range(0, len(texts), self.batch_size):
            if i > 0 and self.batch_delay > 0:
                time.sleep(self.batch_delay)
            group = zip(texts[i : i + self.batch_size], contexts[i : i + self.batch_size])
            results.extend(
                self._request(text, target_lang, source_lang, context) for text, context in group
            )
        return results

    def _request(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None,
        context: str | None,
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": build_prompt(text, target_lang, source_lang, context)},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        try:
            response = self._session.post(API_URL, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            reply = data["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            raise RuntimeError(f"OpenRouter translation failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RuntimeError(f"OpenRouter returned an unexpected response: {e}") from e

        logger.debug("OpenRouter %s translated %d chars", self.model, len(text))
        return parse_reply(reply)

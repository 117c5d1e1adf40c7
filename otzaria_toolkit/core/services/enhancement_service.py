from __future__ import annotations

"""Optional heading-title enhancement through the Gemini API.

The service sends the first ``excerpt_chars`` characters of a body together
with a fixed instruction and returns the model's rewrite of that excerpt,
spliced in front of the untouched remainder. It never mutates documents:
callers decide whether to store the returned text.

Environment:
  GEMINI_API_KEY   API key (name configurable via ``enhancement.api_key_env``)
"""

import functools
import logging
import os
from typing import Any, Optional, Protocol

from google import genai
from google.genai import types as genai_types

__all__ = ["EnhancementError", "EnhancementService"]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

SYSTEM_INSTRUCTION = (
    "You are an expert in Hebrew literature and bibliographic organization. "
    "Your task is to enhance text titles while maintaining the exact structure "
    "of the provided content."
)

PROMPT_TEMPLATE = """Analyze the following Hebrew text which contains HTML-like tags (<h1>, <h2>, etc.).
Suggest improvements for the titles to be more descriptive and suitable for a library project (Otzaria).
Return ONLY the improved text, preserving all tags and non-tag content.

Text:
{excerpt}
"""


class EnhancementError(RuntimeError):
    """The external enhancement call failed; the document is unchanged."""


class _GenerateResponse(Protocol):
    text: Optional[str]


class _ModelsAPI(Protocol):
    def generate_content(self, *, model: str, contents: str, config: Any = None) -> _GenerateResponse:
        ...


class _Client(Protocol):
    models: _ModelsAPI


@functools.lru_cache(maxsize=4)
def _get_client(api_key: str) -> "genai.Client":
    """Return (and cache) a Gemini client for the given API key."""
    return genai.Client(api_key=api_key)


class EnhancementService:
    """Thin wrapper around ``client.models.generate_content``.

    Parameters
    ----------
    client
        Object exposing ``models.generate_content``; built lazily from the API
        key in the environment when omitted.
    model
        Gemini model name.
    excerpt_chars
        How much of the body is sent.
    api_key_env
        Environment variable holding the API key.
    """

    def __init__(
        self,
        client: Optional[_Client] = None,
        model: str = DEFAULT_MODEL,
        excerpt_chars: int = 5000,
        api_key_env: str = "GEMINI_API_KEY",
    ) -> None:
        self._client = client
        self._model = model
        self._excerpt_chars = max(1, int(excerpt_chars))
        self._api_key_env = api_key_env

    def _resolve_client(self) -> _Client:
        if self._client is not None:
            return self._client
        api_key = os.environ.get(self._api_key_env, "").strip()
        if not api_key:
            raise EnhancementError(f"Missing API key: set {self._api_key_env}.")
        return _get_client(api_key)

    def enhance(self, body: str) -> str:
        """Return *body* with its leading excerpt rewritten by the model.

        An empty model response returns *body* unchanged. Any failure of the
        remote call is raised as :class:`EnhancementError`.
        """
        excerpt = body[: self._excerpt_chars]
        remainder = body[self._excerpt_chars:]
        client = self._resolve_client()
        try:
            response = client.models.generate_content(
                model=self._model,
                contents=PROMPT_TEMPLATE.format(excerpt=excerpt),
                config=genai_types.GenerateContentConfig(system_instruction=SYSTEM_INSTRUCTION),
            )
        except Exception as exc:
            logger.error("Enhancement FAIL: model=%s", self._model, exc_info=True)
            raise EnhancementError(f"Enhancement request failed: {exc}") from exc

        improved = getattr(response, "text", None)
        if not improved:
            logger.info("Enhancement noop: empty response model=%s", self._model)
            return body
        return improved + remainder

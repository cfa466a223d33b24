"""Gemini text generation adapter.

Every AI-derived plant field goes through GeminiClient.generate(). The adapter
gives all callers the same contract:

- returns the generated text
- returns None when the call succeeded but produced no usable text
- raises GenerationBlocked when the safety filter rejected the prompt
- raises GenerationFailed on any other upstream/transport error, or when no
  GEMINI_API_KEY is configured

One adapter is created by the application lifespan and passed to whoever needs
it. The google-genai client behind it is created on first use and reused.
"""

from logging import getLogger
from typing import Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

from floragen.config import GEMINI_MODEL, check_api_key
from floragen.errors import GenerationBlocked, GenerationFailed

logger = getLogger(__name__)

SAFETY_SETTINGS = [
    types.SafetySetting(
        category=category,
        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    )
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GenerationParams(BaseModel):
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2048, gt=0)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = GEMINI_MODEL,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GenerationFailed("Gemini API key is not configured.")
            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client created.")
        return self._client

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        params: Optional[GenerationParams] = None,
    ) -> Optional[str]:
        model = model or self.model
        params = params or GenerationParams()
        logger.debug(
            f"Calling Gemini model={model} temperature={params.temperature} "
            f"max_output_tokens={params.max_output_tokens} prompt={prompt[:100]!r}"
        )

        try:
            response = self.client.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=params.temperature,
                    max_output_tokens=params.max_output_tokens,
                    safety_settings=SAFETY_SETTINGS,
                ),
            )
        except GenerationFailed:
            raise
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise GenerationFailed(f"Failed to generate text with Gemini: {e}") from e

        text = extract_text(response)
        if text:
            return text

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            reason = getattr(block_reason, "name", None) or str(block_reason)
            message = getattr(feedback, "block_reason_message", None) or reason
            logger.error(f"Gemini blocked the prompt. reason={reason} message={message}")
            if getattr(feedback, "safety_ratings", None):
                logger.error(f"Safety ratings: {feedback.safety_ratings}")
            raise GenerationBlocked(reason, message)

        logger.warning("Gemini returned no usable text and no block reason.")
        return None


def extract_text(response) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(part.text for part in parts if getattr(part, "text", None))


def create_gemini_client(api_key: Optional[str], model: str = GEMINI_MODEL) -> GeminiClient:
    check_api_key(api_key)
    return GeminiClient(api_key, model=model)

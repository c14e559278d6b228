import logging
from dataclasses import dataclass
from typing import Optional
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

# HTTP codes / API statuses that mean "try again later"
TRANSIENT_HTTP_CODES = {429, 500, 503, 504}
TRANSIENT_STATUSES = {"RESOURCE_EXHAUSTED", "UNAVAILABLE", "DEADLINE_EXCEEDED"}


class ModelCallError(Exception):
    """Raised by a model client; `transient` tells the retry policy whether another attempt may help."""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


@dataclass(frozen=True)
class GenerationProfile:
    temperature: float
    max_output_tokens: int
    top_k: int = 40
    top_p: float = 0.95


GENERATION_PROFILES = {
    "analyze": GenerationProfile(temperature=0.7, max_output_tokens=2048),
    "chat": GenerationProfile(temperature=0.8, max_output_tokens=512),
    "quiz": GenerationProfile(temperature=0.8, max_output_tokens=2048),
}


@dataclass(frozen=True)
class ModelImage:
    data: bytes
    mime_type: str


def _is_transient_api_error(error: genai_errors.APIError) -> bool:
    return error.code in TRANSIENT_HTTP_CODES or (error.status or "") in TRANSIENT_STATUSES


class GeminiModelClient:
    """
    Thin wrapper around the Gemini API exposing a single `generate` operation.
    Every failure is re-raised as a ModelCallError tagged transient or fatal.
    """

    def __init__(self, api_key: Optional[str], model: str = DEFAULT_MODEL, timeout_ms: Optional[int] = None):
        self.model = model
        self._client = None
        if api_key:
            http_options = types.HttpOptions(timeout=timeout_ms) if timeout_ms else None
            self._client = genai.Client(api_key=api_key, http_options=http_options)
        else:
            logger.warning("GEMINI_API_KEY is not configured; every model call will use fallback content.")

    @property
    def configured(self) -> bool:
        return self._client is not None

    def generate(self, prompt: str, image: Optional[ModelImage] = None, use_case: str = "analyze") -> str:
        """
        Send a prompt (and optionally one image) to Gemini and return the raw text.
        Returns "" when the model answers with no text.
        """
        if self._client is None:
            raise ModelCallError("Gemini client is not configured", transient=False)

        profile = GENERATION_PROFILES.get(use_case, GENERATION_PROFILES["analyze"])
        contents = [prompt]
        if image is not None:
            contents.append(types.Part.from_bytes(data=image.data, mime_type=image.mime_type))

        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    temperature=profile.temperature,
                    top_k=profile.top_k,
                    top_p=profile.top_p,
                    max_output_tokens=profile.max_output_tokens,
                ))
        except genai_errors.APIError as e:
            transient = _is_transient_api_error(e)
            logger.warning(f"Gemini API error (code={e.code}, status={e.status}, transient={transient}): {e}")
            raise ModelCallError(str(e), transient=transient) from e

        text = response.text or ""
        if not text:
            logger.error("Empty response from Gemini")
        return text

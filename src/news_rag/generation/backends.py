"""
Generative model backends.

Each backend wraps one model identifier behind ``generate(prompt)`` and
reports the text together with the stop reason and safety-block flag.
Client errors are translated into ``GenerationFailure`` with a reason the
response generator can explain to the user.
"""

import logging
from typing import Callable, Optional, Protocol

from typing_extensions import runtime_checkable

from news_rag.exceptions import FailureReason, GenerationFailure
from news_rag.models import GenerationResult

logger = logging.getLogger(__name__)

# Gemini finish reasons that mean content was withheld
SAFETY_STOP_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"}


@runtime_checkable
class GenerativeBackend(Protocol):
    """Protocol for a single generative model."""

    @property
    def model_name(self) -> str:
        ...

    async def generate(self, prompt: str) -> GenerationResult:
        """
        Generate a completion for one prompt.

        Raises:
            GenerationFailure: If the call fails
        """
        ...


BackendFactory = Callable[[str], GenerativeBackend]


def classify_failure(error: Exception) -> FailureReason:
    """Work out which user-facing explanation fits a backend error."""
    code = getattr(error, "code", None) or getattr(error, "status_code", None)
    message = str(error).lower()

    if "safety" in message:
        return "safety"
    if code == 429 or any(
        marker in message for marker in ("quota", "rate limit", "resource_exhausted", "too many requests")
    ):
        return "quota"
    return "service"


class GeminiBackend:
    """
    Google Gemini backend using the ``google-genai`` SDK.

    Example:
        >>> backend = GeminiBackend("gemini-2.5-flash", api_key="...")
        >>> result = await backend.generate("Hello")
        >>> result.stop_reason
        'STOP'
    """

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        client=None,
    ):
        """
        Args:
            model_name: Gemini model id (e.g. "gemini-2.5-flash")
            api_key: Google AI Studio key (None = GEMINI_API_KEY / GOOGLE_API_KEY env var)
            timeout: Request timeout in seconds
            client: Pre-built ``genai.Client`` shared between backends
        """
        if client is None:
            from google import genai
            from google.genai import types

            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout * 1000)),
            )

        self._client = client
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> GenerationResult:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name, contents=prompt
            )
        except Exception as e:
            reason = classify_failure(e)
            logger.error(f"Gemini call failed ({self._model_name}, reason={reason}): {e}")
            raise GenerationFailure(str(e), reason=reason) from e

        stop_reason = None
        candidates = response.candidates or []
        if candidates and candidates[0].finish_reason is not None:
            finish_reason = candidates[0].finish_reason
            stop_reason = str(getattr(finish_reason, "value", finish_reason))

        prompt_blocked = bool(
            response.prompt_feedback is not None and response.prompt_feedback.block_reason
        )
        safety_blocked = prompt_blocked or stop_reason in SAFETY_STOP_REASONS

        logger.debug(
            f"Gemini response: candidates={len(candidates)}, "
            f"finish_reason={stop_reason}, blocked={safety_blocked}"
        )

        return GenerationResult(
            text="" if safety_blocked else (response.text or ""),
            stop_reason=stop_reason,
            safety_blocked=safety_blocked,
        )


class CasualLLMBackend:
    """
    Backend for OpenAI-compatible and Ollama models via ``casual-llm``.

    casual-llm does not surface finish reasons or safety flags, so a
    non-empty reply is reported as a normal stop.
    """

    def __init__(self, llm_provider, model_name: str, max_tokens: int = 1024, temperature: float = 0.3):
        """
        Args:
            llm_provider: casual-llm provider created for ``model_name``
            model_name: Model identifier (for logging and selection)
            max_tokens: Completion token cap
            temperature: Sampling temperature
        """
        self.llm_provider = llm_provider
        self._model_name = model_name
        self._max_tokens = max_tokens
        self._temperature = temperature

    @classmethod
    def create(
        cls,
        model_name: str,
        provider: str = "openai",
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> "CasualLLMBackend":
        from casual_llm import ModelConfig, Provider, create_provider

        llm_provider = create_provider(
            ModelConfig(
                name=model_name,
                provider=Provider.OLLAMA if provider == "ollama" else Provider.OPENAI,
                base_url=base_url,
                api_key=api_key,
            )
        )
        return cls(llm_provider, model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> GenerationResult:
        from casual_llm import UserMessage

        try:
            response = await self.llm_provider.chat(
                [UserMessage(content=prompt)],
                response_format="text",
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            reason = classify_failure(e)
            logger.error(f"LLM call failed ({self._model_name}, reason={reason}): {e}")
            raise GenerationFailure(str(e), reason=reason) from e

        text = response.content or ""
        return GenerationResult(text=text, stop_reason="STOP" if text else None)


def create_backend_factory(
    provider: str,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: float = 60.0,
) -> BackendFactory:
    """
    Build a factory that turns a model identifier into a backend.

    Gemini backends share one ``genai.Client``.
    """
    if provider == "gemini":
        from google import genai
        from google.genai import types

        client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )
        return lambda model_name: GeminiBackend(model_name, client=client)

    if provider in ("openai", "ollama"):
        return lambda model_name: CasualLLMBackend.create(
            model_name, provider=provider, base_url=base_url, api_key=api_key
        )

    raise ValueError(f"Unknown generation provider: {provider}")

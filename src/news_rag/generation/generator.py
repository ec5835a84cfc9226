"""
Grounded response generation with model selection and fallback.

The generator probes a ranked list of candidate models once, keeps the
first that answers the probe, and turns every per-call problem (safety
block, quota exhaustion, service error, empty or truncated output) into a
templated answer listing the retrieved articles. Callers never see a raw
generation error.
"""

import asyncio
import logging
from enum import Enum
from typing import List, Optional, Sequence

from news_rag.exceptions import GenerationFailure, NoModelAvailable
from news_rag.generation import prompts
from news_rag.generation.backends import BackendFactory, GenerativeBackend
from news_rag.models import ConversationTurn, GenerationRequest, RetrievalResult

logger = logging.getLogger(__name__)

# Stop reasons that mean the model did not finish a usable answer
INCOMPLETE_STOP_REASONS = {"OTHER", "RECITATION"}


class GeneratorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    PROBING = "probing"
    READY = "ready"
    UNAVAILABLE = "unavailable"


class ResponseGenerator:
    """
    Builds grounded prompts and calls the selected generative model.

    State machine: UNINITIALIZED -> PROBING -> READY, or
    UNINITIALIZED -> PROBING -> UNAVAILABLE when every candidate fails the
    probe. A failed call in READY does not change state; only an explicit
    ``initialize(force=True)`` re-runs model selection.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        candidate_models: Sequence[str],
        max_context_articles: int = 3,
        article_char_budget: int = 400,
        history_turns: int = 3,
        response_word_limit: int = 250,
        timeout: Optional[float] = 60.0,
    ):
        """
        Initialize the generator.

        Args:
            backend_factory: Creates a backend for a model identifier
            candidate_models: Model identifiers, most preferred first
            max_context_articles: Articles included in the prompt
            article_char_budget: Characters kept from each article's text
            history_turns: Most recent turns included in the prompt
            response_word_limit: Word cap stated in the instructions
            timeout: Per-call timeout in seconds (None = rely on the backend)
        """
        if not candidate_models:
            raise ValueError("At least one candidate model is required")

        self.backend_factory = backend_factory
        self.candidate_models = list(candidate_models)
        self.max_context_articles = max_context_articles
        self.article_char_budget = article_char_budget
        self.history_turns = history_turns
        self.response_word_limit = response_word_limit
        self.timeout = timeout

        self.state = GeneratorState.UNINITIALIZED
        self.backend: Optional[GenerativeBackend] = None
        self._init_lock = asyncio.Lock()

        logger.info(f"ResponseGenerator created with candidates: {self.candidate_models}")

    @property
    def model_name(self) -> Optional[str]:
        return self.backend.model_name if self.backend else None

    async def _call(self, backend: GenerativeBackend, prompt: str):
        if self.timeout is None:
            return await backend.generate(prompt)
        try:
            return await asyncio.wait_for(backend.generate(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise GenerationFailure(f"Timed out after {self.timeout}s", reason="service") from e

    async def initialize(self, force: bool = False) -> str:
        """
        Select the first candidate model that acknowledges a probe prompt.

        Args:
            force: Re-run selection even if already READY or UNAVAILABLE

        Returns:
            The selected model identifier

        Raises:
            NoModelAvailable: If no candidate passes the probe
        """
        async with self._init_lock:
            if self.state == GeneratorState.READY and not force:
                return self.backend.model_name
            if self.state == GeneratorState.UNAVAILABLE and not force:
                raise NoModelAvailable("No working generative model found")

            self.state = GeneratorState.PROBING
            self.backend = None

            for model_name in self.candidate_models:
                logger.info(f"Testing model: {model_name}")
                try:
                    backend = self.backend_factory(model_name)
                    result = await self._call(backend, prompts.PROBE_PROMPT)
                except Exception as e:
                    logger.warning(f"{model_name} failed probe: {e}")
                    continue

                if prompts.PROBE_TOKEN in (result.text or ""):
                    self.backend = backend
                    self.state = GeneratorState.READY
                    logger.info(f"Successfully initialized with model: {model_name}")
                    return model_name

                logger.warning(f"{model_name} returned an unexpected probe reply: {result.text!r}")

            self.state = GeneratorState.UNAVAILABLE
            logger.error("No working generative model found; responses will use the fallback template")
            raise NoModelAvailable(
                f"None of the candidate models responded: {', '.join(self.candidate_models)}"
            )

    def build_prompt(self, request: GenerationRequest) -> str:
        """Assemble the grounded prompt for one request."""
        articles = request.context[: self.max_context_articles]
        if articles:
            articles_text = "\n\n".join(
                prompts.ARTICLE_ENTRY.format(
                    index=index,
                    title=result.title,
                    content=self._truncate(result.text),
                )
                for index, result in enumerate(articles, start=1)
            )
        else:
            articles_text = prompts.NO_ARTICLES

        history = request.history[-self.history_turns :] if self.history_turns else []
        history_block = ""
        if history:
            history_text = "\n".join(
                f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}"
                for turn in history
            )
            history_block = prompts.HISTORY_BLOCK.format(history=history_text)

        return prompts.RAG_PROMPT.format(
            articles=articles_text,
            history_block=history_block,
            query=request.query,
            disclaimer=prompts.NO_INFORMATION_DISCLAIMER,
            word_limit=self.response_word_limit,
        )

    def _truncate(self, text: str) -> str:
        if len(text) <= self.article_char_budget:
            return text
        return text[: self.article_char_budget] + "..."

    async def generate_response(
        self,
        query: str,
        context: Sequence[RetrievalResult],
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        """
        Generate an answer grounded in the retrieved articles.

        Never raises for generation problems: every failure is turned into
        the fallback template with an explanatory note.

        Args:
            query: The user's question
            context: Retrieved articles, best match first
            history: Conversation so far, oldest first

        Returns:
            Non-empty response text
        """
        request = GenerationRequest(query=query, context=list(context), history=list(history))

        if self.state in (GeneratorState.UNINITIALIZED, GeneratorState.PROBING):
            try:
                await self.initialize()
            except NoModelAvailable:
                return self.fallback_response(request, prompts.UNAVAILABLE_NOTE)

        backend = self.backend
        if self.state != GeneratorState.READY or backend is None:
            return self.fallback_response(request, prompts.UNAVAILABLE_NOTE)

        prompt = self.build_prompt(request)
        logger.debug(f"Prompt length: {len(prompt)} characters")

        try:
            result = await self._call(backend, prompt)
        except GenerationFailure as e:
            logger.warning(f"Generation failed (reason={e.reason}): {e}")
            return self.fallback_response(request, self._failure_note(e))
        except Exception as e:
            logger.warning(f"Generation failed unexpectedly: {e}")
            return self.fallback_response(request, prompts.SERVICE_NOTE.format(detail=e))

        if result.safety_blocked:
            logger.warning("Response blocked by safety filters")
            return self.fallback_response(request, prompts.SAFETY_NOTE)

        if result.stop_reason in INCOMPLETE_STOP_REASONS:
            logger.warning(f"Response finished with reason: {result.stop_reason}")
            return self.fallback_response(
                request, prompts.INCOMPLETE_NOTE.format(reason=result.stop_reason)
            )

        text = (result.text or "").strip()
        if not text:
            logger.warning("Empty response received from the model")
            return self.fallback_response(request, prompts.EMPTY_NOTE)

        logger.info(f"Response generated with {backend.model_name} ({len(text)} characters)")
        return text

    @staticmethod
    def _failure_note(error: GenerationFailure) -> str:
        if error.reason == "safety":
            return prompts.SAFETY_NOTE
        if error.reason == "quota":
            return prompts.QUOTA_NOTE
        return prompts.SERVICE_NOTE.format(detail=error)

    @staticmethod
    def fallback_response(request: GenerationRequest, note: str) -> str:
        """Deterministic answer listing the retrieved article titles."""
        titles: List[str] = [
            f"{index}. {result.title or 'Untitled article'}"
            for index, result in enumerate(request.context, start=1)
        ]
        return prompts.FALLBACK_RESPONSE.format(
            count=len(request.context),
            query=request.query,
            titles="\n".join(titles) if titles else prompts.FALLBACK_NO_ARTICLES,
            note=note,
        )

    async def health_check(self) -> bool:
        """Send a trivial prompt to the selected model. Never raises."""
        backend = self.backend
        if self.state != GeneratorState.READY or backend is None:
            return False
        try:
            result = await self._call(backend, prompts.PROBE_PROMPT)
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False
        return prompts.PROBE_TOKEN in (result.text or "")

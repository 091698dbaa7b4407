import logging
from typing import Optional, Sequence

from config import Settings
from context import ContextAssembler
from data_loader import AirtableClient, TableStoreError
from errors import AnswerGenerationError, RateLimitedError, RequestValidationFailed, UpstreamDependencyError
from fallback import FallbackResponder
from generation import GenerationClient, GenerationError, GenerationRateLimited, build_messages
from models import AskResponse, HistoryTurn

logger = logging.getLogger(__name__)


class RestaurantAssistant:
    """
    Per-request pipeline: validate, load the tenant's tables, assemble the
    context, then answer with the model or the deterministic fallback.
    Holds no per-request state.
    """

    def __init__(
        self,
        settings: Settings,
        store: AirtableClient,
        generator: Optional[GenerationClient] = None,
    ):
        self.settings = settings
        self.store = store
        self.generator = generator
        self.assembler = ContextAssembler(settings.normalization)
        self.fallback = FallbackResponder(settings.normalization)

    async def answer(
        self,
        slug: Optional[str],
        message: Optional[str],
        history: Optional[Sequence[HistoryTurn]] = None,
    ) -> AskResponse:
        slug = (slug or "").strip()
        message = (message or "").strip()
        if not slug or not message:
            raise RequestValidationFailed("slug and message are required")

        logger.info(f"Question for '{slug}': {message[:80]}")
        try:
            venue, collections = await self.store.load_restaurant_bundle(slug)
        except TableStoreError as e:
            logger.error(f"Table store failure for '{slug}': {e}")
            raise UpstreamDependencyError(str(e)) from e

        context = self.assembler.assemble(venue, collections)

        if self.generator is None:
            logger.info("Generation backend not configured, using fallback answer.")
            return AskResponse(answer=self.fallback.build_fallback(message, context), source="fallback")

        messages = build_messages(slug, message, history, context, self.settings.history_limit)
        try:
            text = await self.generator.generate(messages)
        except GenerationError as e:
            logger.error(f"LLM Error: {e}")
            if self.settings.fallback_on_error:
                return AskResponse(answer=self.fallback.build_fallback(message, context), source="fallback")
            if isinstance(e, GenerationRateLimited):
                raise RateLimitedError(str(e)) from e
            raise AnswerGenerationError(str(e)) from e

        return AskResponse(answer=text, source="generated")

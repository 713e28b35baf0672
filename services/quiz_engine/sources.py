# services/quiz_engine/sources.py
# Ordered suggestion sources: each one either answers or defers to the next.

import logging
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .defaults import DEFAULT_FALLBACK_SUGGESTIONS
from .models import CareerSuggestion, QuizType
from .selector import SelectionPolicy, select_suggestions
from .store import PatternStore

logger = logging.getLogger(__name__)


class SuggestionSource(Protocol):
    name: str

    async def try_get_suggestions(
        self,
        answers: Mapping[str, str],
        quiz_type: QuizType,
        policy: SelectionPolicy,
    ) -> Optional[List[CareerSuggestion]]:
        """Returns suggestions, or None to let the next source answer."""
        ...


class StorePatternSource:
    """
    Matches answers against the patterns of one store.

    Any failure reading the store is logged and treated as "no match", so a
    broken store never aborts the request.
    """

    def __init__(self, store: PatternStore, name: str):
        self.store = store
        self.name = name

    async def try_get_suggestions(
        self,
        answers: Mapping[str, str],
        quiz_type: QuizType,
        policy: SelectionPolicy,
    ) -> Optional[List[CareerSuggestion]]:
        try:
            patterns = await self.store.get_patterns(quiz_type)
        except Exception as e:
            logger.warning(f"Pattern source '{self.name}' failed, falling back: {e}")
            return None

        if not patterns:
            logger.info(f"Pattern source '{self.name}' has no {quiz_type.value} patterns")
            return None

        suggestions = select_suggestions(answers, patterns, policy)
        if not suggestions:
            logger.info(f"No {self.name} matches found for {quiz_type.value} quiz")
            return None
        return suggestions


class StaticFallbackSource:
    """Last resort: the per-quiz-type default list. Always answers when it has entries."""

    name = "fallback"

    def __init__(self, fallback: Optional[Dict[QuizType, List[CareerSuggestion]]] = None):
        fallback = fallback or {}
        self._fallback = {
            quiz_type: list(fallback.get(quiz_type) or DEFAULT_FALLBACK_SUGGESTIONS[quiz_type])
            for quiz_type in QuizType
        }

    async def try_get_suggestions(
        self,
        answers: Mapping[str, str],
        quiz_type: QuizType,
        policy: SelectionPolicy,
    ) -> Optional[List[CareerSuggestion]]:
        logger.info(f"Using fallback suggestions for {quiz_type.value} quiz")
        return list(self._fallback[quiz_type])


class SuggestionChain:
    """Asks each source in order until one returns a non-empty list."""

    def __init__(self, sources: Sequence[SuggestionSource]):
        self.sources = list(sources)

    async def resolve(
        self,
        answers: Mapping[str, str],
        quiz_type: QuizType,
        policy: SelectionPolicy,
    ) -> Tuple[str, List[CareerSuggestion]]:
        for source in self.sources:
            suggestions = await source.try_get_suggestions(answers, quiz_type, policy)
            if suggestions:
                logger.debug(f"Suggestions for {quiz_type.value} quiz answered by '{source.name}'")
                return source.name, suggestions
        logger.error(f"No suggestion source produced results for {quiz_type.value} quiz")
        return "none", []

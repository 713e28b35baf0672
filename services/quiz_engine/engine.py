import logging
from typing import List, Mapping, Optional, Union

from .models import AnswerAnalysis, CareerSuggestion, PatternScore, QuizPattern, QuizType, SuggestionResult
from .selector import SelectionPolicy
from .similarity import score_patterns
from .sources import StaticFallbackSource, StorePatternSource, SuggestionChain
from .store import MappingsPatternStore, PatternStore

logger = logging.getLogger(__name__)


class QuizSuggestionEngine:
    """
    Maps quiz answers to career suggestions without calling an external AI service.

    Sources are consulted in order: the primary (database) store when configured,
    then the mappings file, then the static fallback list. Patterns from an earlier
    source take precedence entirely; sources are never merged with each other.
    """

    def __init__(
        self,
        mappings_store: MappingsPatternStore,
        primary_store: Optional[PatternStore] = None,
        policy: SelectionPolicy = SelectionPolicy.PARTIAL,
    ):
        """
        Args:
            mappings_store: File-backed store holding patterns and fallback lists.
            primary_store: Optional persistent store consulted before the file.
            policy: Default selection policy for get_suggestions().
        """
        self.mappings_store = mappings_store
        self.primary_store = primary_store
        self.policy = SelectionPolicy(policy)
        self._build_chain()

    def _build_chain(self) -> None:
        sources = []
        if self.primary_store is not None:
            sources.append(StorePatternSource(self.primary_store, name="database"))
        sources.append(StorePatternSource(self.mappings_store, name="mappings"))
        sources.append(StaticFallbackSource(self.mappings_store.fallback_by_type()))
        self.chain = SuggestionChain(sources)

    def reload(self) -> bool:
        """Re-reads the mappings file and rebuilds the source chain."""
        reloaded = self.mappings_store.reload()
        self._build_chain()
        return reloaded

    async def suggest(
        self,
        answers: Mapping[str, str],
        quiz_type: Union[QuizType, str] = QuizType.STANDARD,
        policy: Optional[SelectionPolicy] = None,
    ) -> SuggestionResult:
        """Resolves suggestions and reports which source produced them."""
        quiz_type = QuizType(quiz_type)
        policy = SelectionPolicy(policy) if policy is not None else self.policy
        source, suggestions = await self.chain.resolve(answers, quiz_type, policy)
        return SuggestionResult(source=source, suggestions=suggestions)

    async def get_suggestions(
        self,
        answers: Mapping[str, str],
        quiz_type: Union[QuizType, str] = QuizType.STANDARD,
        policy: Optional[SelectionPolicy] = None,
    ) -> List[CareerSuggestion]:
        result = await self.suggest(answers, quiz_type, policy)
        return result.suggestions

    async def get_best_match_suggestions(
        self,
        answers: Mapping[str, str],
        quiz_type: Union[QuizType, str] = QuizType.STANDARD,
    ) -> List[CareerSuggestion]:
        return await self.get_suggestions(answers, quiz_type, SelectionPolicy.BEST_MATCH)

    async def get_suggestions_with_partial_matching(
        self,
        answers: Mapping[str, str],
        quiz_type: Union[QuizType, str] = QuizType.STANDARD,
    ) -> List[CareerSuggestion]:
        return await self.get_suggestions(answers, quiz_type, SelectionPolicy.PARTIAL)

    def get_patterns(self, quiz_type: Union[QuizType, str]) -> List[QuizPattern]:
        """Patterns from the mappings file for a quiz type."""
        return self.mappings_store.list_patterns(QuizType(quiz_type))

    def add_pattern(self, quiz_type: Union[QuizType, str], pattern: QuizPattern) -> bool:
        return self.mappings_store.add_pattern(QuizType(quiz_type), pattern)

    def analyze_answers(
        self,
        answers: Mapping[str, str],
        quiz_type: Union[QuizType, str] = QuizType.STANDARD,
    ) -> AnswerAnalysis:
        """Scores the answers against every mappings pattern (for debugging/analytics)."""
        patterns = self.get_patterns(quiz_type)
        all_matches = sorted(
            (PatternScore(id=m.pattern.id, score=m.similarity) for m in score_patterns(answers, patterns)),
            key=lambda s: s.score,
            reverse=True,
        )
        return AnswerAnalysis(
            answers_count=len(answers),
            best_match=all_matches[0] if all_matches else None,
            all_matches=all_matches,
        )

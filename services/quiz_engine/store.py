import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from .loader import load_quiz_mappings_from_file, save_quiz_mappings_to_file
from .models import CareerSuggestion, MappingsValidationError, QuizMappings, QuizPattern, QuizType

logger = logging.getLogger(__name__)


class PatternStore(Protocol):
    """Read-only source of patterns at request time."""

    async def get_patterns(self, quiz_type: QuizType) -> List[QuizPattern]:
        ...


class MappingsPatternStore:
    """
    Pattern store backed by the static quiz mappings file.

    The file is read when the store is constructed and again on reload(). Requests
    only read the in-memory mappings, so concurrent use needs no locking.
    """

    def __init__(self, mappings_path: Union[str, Path]):
        """
        Args:
            mappings_path: Path to the quiz mappings JSON (or YAML) file.
        """
        self.mappings_path = Path(mappings_path)
        self._mappings: Optional[QuizMappings] = None
        self.reload()

    @property
    def mappings_loaded(self) -> bool:
        return self._mappings is not None

    def reload(self) -> bool:
        """
        Re-reads the mappings file. On failure the previously loaded mappings
        (if any) stay in place and False is returned.
        """
        try:
            mappings = load_quiz_mappings_from_file(self.mappings_path)
        except MappingsValidationError as e:
            logger.error(f"Failed to load quiz mappings from {self.mappings_path}: {e}")
            return False

        self._mappings = mappings
        logger.info(
            f"Quiz mappings loaded from {self.mappings_path}: "
            f"{len(mappings.standard.patterns)} standard, {len(mappings.long.patterns)} long patterns"
        )
        return True

    def list_patterns(self, quiz_type: QuizType) -> List[QuizPattern]:
        if self._mappings is None:
            logger.warning("Quiz mappings not loaded")
            return []
        return [p for p in self._mappings.section(quiz_type).patterns if p.is_active]

    async def get_patterns(self, quiz_type: QuizType) -> List[QuizPattern]:
        return self.list_patterns(quiz_type)

    def get_fallback(self, quiz_type: QuizType) -> List[CareerSuggestion]:
        if self._mappings is None:
            return []
        return list(self._mappings.section(quiz_type).fallback)

    def fallback_by_type(self) -> Dict[QuizType, List[CareerSuggestion]]:
        return {quiz_type: self.get_fallback(quiz_type) for quiz_type in QuizType}

    def add_pattern(self, quiz_type: QuizType, pattern: QuizPattern) -> bool:
        """
        Appends a pattern to the given section and persists the mappings file.
        Returns False (leaving memory unchanged) if mappings are unavailable,
        the id already exists, or the file cannot be written.
        """
        if self._mappings is None:
            return False

        quiz_type = QuizType(quiz_type)
        section = self._mappings.section(quiz_type)
        if any(existing.id == pattern.id for existing in section.patterns):
            logger.error(f"Pattern '{pattern.id}' already exists in section '{quiz_type.value}'")
            return False

        new_pattern = pattern.model_copy(update={"quiz_type": quiz_type})
        section.patterns.append(new_pattern)
        try:
            save_quiz_mappings_to_file(self._mappings, self.mappings_path)
        except OSError as e:
            section.patterns.remove(new_pattern)
            logger.error(f"Failed to save new pattern '{pattern.id}': {e}")
            return False

        logger.info(f"Added new pattern: {pattern.id}")
        return True


class InMemoryPatternStore:
    """Pattern store over a fixed list of patterns; handy for scripts and tests."""

    def __init__(self, patterns: List[QuizPattern]):
        self._patterns = list(patterns)

    async def get_patterns(self, quiz_type: QuizType) -> List[QuizPattern]:
        quiz_type = QuizType(quiz_type)
        return [p for p in self._patterns if p.is_active and (p.quiz_type or QuizType.STANDARD) == quiz_type]

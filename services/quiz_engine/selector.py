# services/quiz_engine/selector.py
# Picks suggestions for an answer set from a collection of scored patterns.

import logging
from enum import Enum
from typing import List, Mapping, Optional, Sequence

from .models import CareerSuggestion, PatternMatch, QuizPattern
from .similarity import score_patterns

logger = logging.getLogger(__name__)

# --- Constants ---

BEST_MATCH_THRESHOLD = 0.6     # Policy A: minimum similarity for the single best pattern
PARTIAL_MATCH_THRESHOLD = 0.4  # Policy B: minimum similarity for a pattern to qualify
NEAR_TIE_MARGIN = 0.1          # Patterns within this distance of the best score get merged
MAX_SUGGESTIONS = 3

# Absorbs float error so that e.g. 0.7 counts as within 0.1 of 0.8
_SCORE_TOLERANCE = 1e-9


class SelectionPolicy(str, Enum):
    BEST_MATCH = "best_match" # Strict: single best pattern above 60%
    PARTIAL = "partial"       # Lenient: merge near-tied patterns above 40%


def select_best_match(
    answers: Mapping[str, str],
    patterns: Sequence[QuizPattern],
    min_similarity: float = BEST_MATCH_THRESHOLD,
) -> Optional[PatternMatch]:
    """
    Returns the highest-scoring pattern if it reaches min_similarity, else None.
    On exact ties the earliest pattern in collection order wins.
    """
    best: Optional[PatternMatch] = None
    for match in score_patterns(answers, patterns):
        if best is None or match.similarity > best.similarity:
            best = match

    if best is not None and best.similarity > 0 and best.similarity >= min_similarity:
        logger.info(f"Found pattern match: {best.pattern.id} with {best.similarity * 100:.1f}% similarity")
        return best

    best_score = best.similarity if best is not None else 0.0
    logger.info(f"No good pattern match found. Best score: {best_score * 100:.1f}%")
    return None


def rank_matches(
    answers: Mapping[str, str],
    patterns: Sequence[QuizPattern],
    min_similarity: float = PARTIAL_MATCH_THRESHOLD,
) -> List[PatternMatch]:
    """Returns qualifying matches sorted by similarity, best first. The sort is stable."""
    qualifying = [
        match for match in score_patterns(answers, patterns)
        if match.similarity > 0 and match.similarity >= min_similarity
    ]
    return sorted(qualifying, key=lambda match: match.similarity, reverse=True)


def merge_suggestions(matches: Sequence[PatternMatch], limit: int = MAX_SUGGESTIONS) -> List[CareerSuggestion]:
    """
    Combines suggestions from several matches in the given order, keeping the first
    suggestion seen for each career name (exact, case-sensitive) and truncating to limit.
    """
    combined: List[CareerSuggestion] = []
    seen_careers = set()
    for match in matches:
        for suggestion in match.pattern.suggestions:
            if suggestion.career not in seen_careers:
                combined.append(suggestion)
                seen_careers.add(suggestion.career)
    return combined[:limit]


def select_partial_matches(
    answers: Mapping[str, str],
    patterns: Sequence[QuizPattern],
    min_similarity: float = PARTIAL_MATCH_THRESHOLD,
) -> Optional[List[CareerSuggestion]]:
    """
    Lenient selection. A single near-tied pattern has its suggestions returned verbatim;
    several near-tied patterns are merged. Returns None when nothing qualifies.
    """
    ranked = rank_matches(answers, patterns, min_similarity)
    if not ranked:
        logger.info("No patterns meet minimum similarity")
        return None

    best_score = ranked[0].similarity
    top_matches = [m for m in ranked if m.similarity >= best_score - NEAR_TIE_MARGIN - _SCORE_TOLERANCE]

    if len(top_matches) == 1:
        logger.info(f"Using single pattern: {top_matches[0].pattern.id} ({best_score * 100:.1f}%)")
        return list(top_matches[0].pattern.suggestions)

    logger.info(f"Combining suggestions from {len(top_matches)} similar patterns")
    return merge_suggestions(top_matches)


def select_suggestions(
    answers: Mapping[str, str],
    patterns: Sequence[QuizPattern],
    policy: SelectionPolicy = SelectionPolicy.PARTIAL,
) -> Optional[List[CareerSuggestion]]:
    """Applies the given selection policy. None means no pattern matched well enough."""
    if SelectionPolicy(policy) == SelectionPolicy.BEST_MATCH:
        best = select_best_match(answers, patterns)
        return list(best.pattern.suggestions) if best else None
    return select_partial_matches(answers, patterns)

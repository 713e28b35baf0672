from typing import List, Mapping, Sequence

from .models import PatternMatch, QuizPattern


def calculate_pattern_similarity(answers: Mapping[str, str], pattern: Mapping[str, str]) -> float:
    """
    Returns the fraction of the pattern's keys whose expected option the user picked.

    Only keys present in the pattern are scored, so extra answers neither help nor
    penalize. A missing (or empty) answer for a pattern key simply does not match.
    An empty pattern scores 0.0 and can never be selected.
    """
    pattern_keys = list(pattern.keys())
    if not pattern_keys:
        return 0.0

    match_count = 0
    for key in pattern_keys:
        answer = answers.get(key)
        if answer and answer == pattern[key]:
            match_count += 1

    return match_count / len(pattern_keys)


def score_patterns(answers: Mapping[str, str], patterns: Sequence[QuizPattern]) -> List[PatternMatch]:
    """Scores every pattern against the answers, preserving collection order."""
    return [
        PatternMatch(pattern=pattern, similarity=calculate_pattern_similarity(answers, pattern.pattern))
        for pattern in patterns
    ]

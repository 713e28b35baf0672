import json

import pytest

from services.quiz_engine.defaults import DEFAULT_FALLBACK_SUGGESTIONS
from services.quiz_engine.engine import QuizSuggestionEngine
from services.quiz_engine.models import PatternStoreError, QuizType
from services.quiz_engine.selector import SelectionPolicy
from services.quiz_engine.store import InMemoryPatternStore, MappingsPatternStore
from tests.factories import make_pattern

PUZZLES = "Solving complex puzzles or math problems."
ART = "Creating art, music, or stories."


class FailingStore:
    async def get_patterns(self, quiz_type):
        raise PatternStoreError("connection refused")


@pytest.fixture
def engine(mappings_file):
    return QuizSuggestionEngine(MappingsPatternStore(mappings_file))


@pytest.mark.asyncio
async def test_matching_answers_use_mappings(engine):
    result = await engine.suggest({"activity": PUZZLES}, QuizType.STANDARD)
    assert result.source == "mappings"
    assert [s.career for s in result.suggestions] == ["Data Scientist"]


@pytest.mark.asyncio
async def test_unmatched_answers_return_full_fallback(engine):
    result = await engine.suggest({"activity": "Nothing in particular"}, "standard")
    assert result.source == "fallback"
    assert [s.career for s in result.suggestions] == ["Generalist A", "Generalist B"]


@pytest.mark.asyncio
async def test_long_quiz_uses_long_section(engine):
    matched = await engine.get_suggestions(
        {"workWith": "Data and abstract concepts (numbers, code, theories)."}, QuizType.LONG
    )
    unmatched = await engine.get_suggestions({"activity": PUZZLES}, QuizType.LONG)
    assert [s.career for s in matched] == ["Machine Learning Engineer"]
    assert [s.career for s in unmatched] == ["Long Fallback"]


@pytest.mark.asyncio
async def test_missing_mappings_file_uses_builtin_fallback(tmp_path):
    engine = QuizSuggestionEngine(MappingsPatternStore(tmp_path / "missing.json"))
    result = await engine.suggest({"activity": PUZZLES}, QuizType.STANDARD)
    assert result.source == "fallback"
    assert result.suggestions == DEFAULT_FALLBACK_SUGGESTIONS[QuizType.STANDARD]


@pytest.mark.asyncio
async def test_primary_store_takes_precedence(mappings_file):
    primary = InMemoryPatternStore([make_pattern("db_only", {"activity": PUZZLES}, ["Database Career"])])
    engine = QuizSuggestionEngine(MappingsPatternStore(mappings_file), primary_store=primary)
    result = await engine.suggest({"activity": PUZZLES})
    assert result.source == "database"
    assert [s.career for s in result.suggestions] == ["Database Career"]


@pytest.mark.asyncio
async def test_failing_primary_store_falls_back_to_mappings(mappings_file):
    engine = QuizSuggestionEngine(MappingsPatternStore(mappings_file), primary_store=FailingStore())
    result = await engine.suggest({"activity": PUZZLES})
    assert result.source == "mappings"
    assert [s.career for s in result.suggestions] == ["Data Scientist"]


@pytest.mark.asyncio
async def test_policy_helpers(engine):
    # 'art' scores 0.5: below the best-match threshold, above the partial one.
    answers = {"activity": ART}
    best = await engine.get_best_match_suggestions(answers)
    partial = await engine.get_suggestions_with_partial_matching(answers)
    assert [s.career for s in best] == ["Generalist A", "Generalist B"]
    assert [s.career for s in partial] == ["Graphic Designer"]


@pytest.mark.asyncio
async def test_default_policy_is_configurable(mappings_file):
    engine = QuizSuggestionEngine(MappingsPatternStore(mappings_file), policy="best_match")
    assert engine.policy == SelectionPolicy.BEST_MATCH
    result = await engine.suggest({"activity": ART})
    assert result.source == "fallback"


def test_analyze_answers_sorted_by_score(engine):
    analysis = engine.analyze_answers({"activity": ART, "extra": "value"}, QuizType.STANDARD)
    assert analysis.answers_count == 2
    assert [(m.id, m.score) for m in analysis.all_matches] == [("art", 0.5), ("puzzles", 0.0)]
    assert analysis.best_match.id == "art"
    dumped = analysis.model_dump(by_alias=True)
    assert set(dumped) == {"answersCount", "bestMatch", "allMatches"}


def test_analyze_answers_without_patterns(tmp_path):
    engine = QuizSuggestionEngine(MappingsPatternStore(tmp_path / "missing.json"))
    analysis = engine.analyze_answers({"activity": PUZZLES})
    assert analysis.best_match is None
    assert analysis.all_matches == []


@pytest.mark.asyncio
async def test_add_pattern_is_used_for_matching(engine):
    new_pattern = make_pattern("biology", {"subject": "Biology or Chemistry"}, ["Doctor"])
    assert engine.add_pattern("standard", new_pattern) is True
    assert "biology" in [p.id for p in engine.get_patterns(QuizType.STANDARD)]
    result = await engine.suggest({"subject": "Biology or Chemistry"})
    assert [s.career for s in result.suggestions] == ["Doctor"]


@pytest.mark.asyncio
async def test_reload_rebuilds_fallback(engine, mappings_file, minimal_mappings_data):
    minimal_mappings_data["standard"]["fallback"] = minimal_mappings_data["standard"]["fallback"][:1]
    mappings_file.write_text(json.dumps(minimal_mappings_data), encoding="utf-8")

    assert engine.reload() is True
    result = await engine.suggest({"activity": "Nothing"})
    assert [s.career for s in result.suggestions] == ["Generalist A"]


@pytest.mark.asyncio
async def test_malformed_file_pattern_does_not_hide_valid_ones(mappings_file, minimal_mappings_data):
    minimal_mappings_data["standard"]["patterns"].append(
        {"id": "numeric", "pattern": {"activity": 3}, "suggestions": []}
    )
    mappings_file.write_text(json.dumps(minimal_mappings_data), encoding="utf-8")

    engine = QuizSuggestionEngine(MappingsPatternStore(mappings_file))
    matched = await engine.suggest({"activity": PUZZLES})
    unmatched = await engine.suggest({"activity": "Nothing"})

    assert (matched.source, [s.career for s in matched.suggestions]) == ("mappings", ["Data Scientist"])
    assert [s.career for s in unmatched.suggestions] == ["Generalist A", "Generalist B"]

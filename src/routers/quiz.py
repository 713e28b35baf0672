import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from services.quiz_engine.engine import QuizSuggestionEngine
from services.quiz_engine.models import AnswerAnalysis, InvalidAnswersError, QuizPattern, QuizType
from src.cache.results import QuizResultCache
from src.schemas.quiz import (
    AnalyzeRequest,
    QuizGenerateResponse,
    QuizResultLookup,
    QuizSubmission,
    ReloadResponse,
    SuggestionOut,
)
from src.services.answers import answers_for_matching, compute_answers_hash, roadmap_slug

router = APIRouter()
logger = logging.getLogger(__name__)


def get_quiz_engine(request: Request) -> QuizSuggestionEngine:
    return request.app.state.quiz_engine


def get_result_cache(request: Request) -> QuizResultCache:
    return request.app.state.result_cache


@router.post("/quiz/generate", response_model=QuizGenerateResponse)
async def generate_quiz_result(
    submission: QuizSubmission,
    engine: QuizSuggestionEngine = Depends(get_quiz_engine),
    cache: QuizResultCache = Depends(get_result_cache),
):
    """
    Matches quiz answers to career suggestions with the local pattern engine.
    Identical answer sets are served from the result cache.
    """
    try:
        if submission.answers is None:
            raise InvalidAnswersError("Answers are required")

        quiz_type = submission.quiz_type
        answers_hash = compute_answers_hash(submission.answers)

        cached_result = await cache.get(answers_hash, quiz_type.value)
        if cached_result is not None:
            logger.info(f"Serving cached {quiz_type.value} quiz result {answers_hash}")
            return QuizGenerateResponse(
                success=True,
                cached=True,
                result=[SuggestionOut.model_validate(s) for s in cached_result],
                hash=answers_hash,
                source="cache",
            )

        outcome = await engine.suggest(answers_for_matching(submission.answers), quiz_type)
        if not outcome.suggestions:
            raise RuntimeError(f"No suggestions produced for {quiz_type.value} quiz")

        enhanced = [
            SuggestionOut(
                **suggestion.model_dump(),
                roadmap_slug=roadmap_slug(suggestion.roadmap_path or suggestion.career),
            )
            for suggestion in outcome.suggestions
        ]
        await cache.set(answers_hash, quiz_type.value, [s.model_dump(by_alias=True) for s in enhanced])

        logger.info(
            f"Generated {quiz_type.value} quiz result {answers_hash} from '{outcome.source}' "
            f"for user {submission.user_id or 'anonymous'}"
        )
        return QuizGenerateResponse(
            success=True,
            cached=False,
            result=enhanced,
            hash=answers_hash,
            source=outcome.source,
        )

    except InvalidAnswersError as e:
        logger.error(f"Invalid quiz submission: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error generating quiz result: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/quiz/results/{answers_hash}", response_model=QuizResultLookup)
async def lookup_quiz_result(
    answers_hash: str,
    quiz_type: QuizType = Query(QuizType.STANDARD, alias="quizType"),
    cache: QuizResultCache = Depends(get_result_cache),
):
    cached_result = await cache.get(answers_hash, quiz_type.value)
    if cached_result is None:
        return QuizResultLookup(success=True, cached=False, result=None)
    return QuizResultLookup(
        success=True,
        cached=True,
        result=[SuggestionOut.model_validate(s) for s in cached_result],
    )


@router.get("/quiz/patterns/{quiz_type}", response_model=List[QuizPattern])
async def list_quiz_patterns(
    quiz_type: QuizType,
    engine: QuizSuggestionEngine = Depends(get_quiz_engine),
):
    return engine.get_patterns(quiz_type)


@router.post("/quiz/analyze", response_model=AnswerAnalysis)
async def analyze_quiz_answers(
    request: AnalyzeRequest,
    engine: QuizSuggestionEngine = Depends(get_quiz_engine),
):
    """Scores the answers against every pattern; for debugging pattern coverage."""
    return engine.analyze_answers(request.answers, request.quiz_type)


@router.post("/quiz/patterns/reload", response_model=ReloadResponse)
async def reload_quiz_patterns(
    engine: QuizSuggestionEngine = Depends(get_quiz_engine),
    cache: QuizResultCache = Depends(get_result_cache),
):
    """Re-reads the mappings file and drops cached results that may now be stale."""
    reloaded = engine.reload()
    cleared = await cache.clear() if reloaded else 0
    return ReloadResponse(reloaded=reloaded, cleared_results=cleared)

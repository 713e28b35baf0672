from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.quiz_engine.models import CareerSuggestion, QuizType


class QuizSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: Optional[Union[Dict[str, Any], List[Any]]] = None # question_key -> selected option, or ordered list
    quiz_type: QuizType = Field(QuizType.STANDARD, alias="quizType")
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("quiz_type", mode="before")
    @classmethod
    def _unknown_quiz_type_is_standard(cls, value):
        # Anything other than "long" is treated as the standard quiz
        return QuizType.LONG if value == QuizType.LONG.value else QuizType.STANDARD


class SuggestionOut(CareerSuggestion):
    roadmap_slug: Optional[str] = Field(None, alias="roadmapSlug")


class QuizGenerateResponse(BaseModel):
    success: bool
    cached: bool
    result: List[SuggestionOut]
    hash: str
    source: str


class QuizResultLookup(BaseModel):
    success: bool
    cached: bool
    result: Optional[List[SuggestionOut]] = None


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: Dict[str, str]
    quiz_type: QuizType = Field(QuizType.STANDARD, alias="quizType")


class ReloadResponse(BaseModel):
    reloaded: bool
    cleared_results: int

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuizType(str, Enum):
    STANDARD = "standard"
    LONG = "long"


class CareerSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    career: str
    description: str
    reasoning: str
    roadmap_path: str = Field(..., alias="roadmapPath")


class QuizPattern(BaseModel):
    """A partial constraint over quiz answers and the suggestions it yields."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    quiz_type: Optional[QuizType] = Field(None, alias="quizType") # Implied by the mappings section when absent
    pattern: Dict[str, str] # question_key -> expected option string
    suggestions: List[CareerSuggestion]
    is_active: bool = Field(True, alias="isActive")


class QuizSection(BaseModel):
    patterns: List[QuizPattern] = Field(default_factory=list)
    fallback: List[CareerSuggestion] = Field(default_factory=list)


class QuizMappings(BaseModel):
    standard: QuizSection = Field(default_factory=QuizSection)
    long: QuizSection = Field(default_factory=QuizSection)

    def section(self, quiz_type: QuizType) -> QuizSection:
        return self.standard if QuizType(quiz_type) == QuizType.STANDARD else self.long


class PatternMatch(BaseModel):
    pattern: QuizPattern
    similarity: float


class PatternScore(BaseModel):
    id: str
    score: float


class AnswerAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers_count: int = Field(..., alias="answersCount")
    best_match: Optional[PatternScore] = Field(None, alias="bestMatch")
    all_matches: List[PatternScore] = Field(default_factory=list, alias="allMatches")


class SuggestionResult(BaseModel):
    source: str # Name of the suggestion source that answered
    suggestions: List[CareerSuggestion]


# Custom Error Classes
class MappingsValidationError(ValueError):
    """Raised when a quiz mappings document cannot be loaded or fails validation."""
    pass

class InvalidAnswersError(ValueError):
    """Raised for quiz submissions that cannot be matched (e.g., missing answers)."""
    pass

class PatternStoreError(RuntimeError):
    """Raised by pattern stores when the backing storage cannot be read."""
    pass

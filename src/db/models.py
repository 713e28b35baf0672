from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
)
from sqlalchemy.orm import declarative_base

# Define naming conventions for constraints and indexes
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)
Base = declarative_base(metadata=metadata)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizPatternRecord(Base):
    __tablename__ = "quiz_patterns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pattern_id = Column(String(128), unique=True, nullable=False)
    quiz_type = Column(String(16), nullable=False, index=True)
    pattern = Column(JSON, nullable=False) # question_key -> expected option
    suggestions = Column(JSON, nullable=False) # list of CareerSuggestion dicts (camelCase keys)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<QuizPatternRecord(pattern_id='{self.pattern_id}', quiz_type='{self.quiz_type}', active={self.is_active})>"

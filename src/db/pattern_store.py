import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from services.quiz_engine.models import (
    CareerSuggestion,
    PatternStoreError,
    QuizMappings,
    QuizPattern,
    QuizType,
)
from src.db.models import QuizPatternRecord

logger = logging.getLogger(__name__)


def record_to_pattern(record: QuizPatternRecord) -> QuizPattern:
    return QuizPattern(
        id=record.pattern_id,
        quiz_type=QuizType(record.quiz_type),
        pattern=dict(record.pattern or {}),
        suggestions=[CareerSuggestion.model_validate(s) for s in record.suggestions or []],
        is_active=record.is_active,
    )


def _valid_patterns(records: Sequence[QuizPatternRecord]) -> List[QuizPattern]:
    """Converts records to patterns, skipping (and logging) any that fail validation."""
    patterns = []
    for record in records:
        try:
            patterns.append(record_to_pattern(record))
        except (TypeError, ValueError) as e: # pydantic ValidationError is a ValueError
            logger.warning(f"Skipping malformed quiz pattern '{record.pattern_id}': {e}")
    return patterns


def _dump_suggestions(suggestions: List[CareerSuggestion]) -> List[Dict[str, Any]]:
    return [s.model_dump(by_alias=True) for s in suggestions]


class SqlPatternStore:
    """
    Database-backed pattern store. Patterns are written only by administrative
    tooling (seeding, regeneration); quiz requests only read them.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_patterns(self, quiz_type: QuizType) -> List[QuizPattern]:
        """Active patterns for a quiz type, oldest first."""
        quiz_type = QuizType(quiz_type)
        stmt = (
            select(QuizPatternRecord)
            .where(QuizPatternRecord.quiz_type == quiz_type.value, QuizPatternRecord.is_active.is_(True))
            .order_by(QuizPatternRecord.created_at, QuizPatternRecord.id)
        )
        try:
            async with self._session_factory() as session:
                records = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise PatternStoreError(f"Could not read {quiz_type.value} patterns: {e}") from e
        return _valid_patterns(records)

    async def get_all(self) -> List[QuizPattern]:
        stmt = (
            select(QuizPatternRecord)
            .where(QuizPatternRecord.is_active.is_(True))
            .order_by(QuizPatternRecord.quiz_type, QuizPatternRecord.created_at, QuizPatternRecord.id)
        )
        async with self._session_factory() as session:
            records = (await session.execute(stmt)).scalars().all()
        return _valid_patterns(records)

    async def get_by_id(self, pattern_id: str) -> Optional[QuizPattern]:
        async with self._session_factory() as session:
            record = await self._find(session, pattern_id)
            return record_to_pattern(record) if record else None

    async def create(self, pattern: QuizPattern, quiz_type: Optional[QuizType] = None) -> QuizPattern:
        quiz_type = QuizType(quiz_type or pattern.quiz_type or QuizType.STANDARD)
        record = QuizPatternRecord(
            pattern_id=pattern.id,
            quiz_type=quiz_type.value,
            pattern=dict(pattern.pattern),
            suggestions=_dump_suggestions(pattern.suggestions),
            is_active=pattern.is_active,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)
            logger.info(f"Created quiz pattern '{pattern.id}' ({quiz_type.value})")
            return record_to_pattern(record)

    async def update(
        self,
        pattern_id: str,
        *,
        pattern: Optional[Dict[str, str]] = None,
        suggestions: Optional[List[CareerSuggestion]] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[QuizPattern]:
        async with self._session_factory() as session:
            record = await self._find(session, pattern_id)
            if record is None:
                return None
            if pattern is not None:
                record.pattern = dict(pattern)
            if suggestions is not None:
                record.suggestions = _dump_suggestions(suggestions)
            if is_active is not None:
                record.is_active = is_active
            await session.commit()
            await session.refresh(record)
            return record_to_pattern(record)

    async def delete(self, pattern_id: str) -> bool:
        """Soft-deletes a pattern. Returns True only if an active pattern was deactivated."""
        async with self._session_factory() as session:
            record = await self._find(session, pattern_id)
            if record is None or not record.is_active:
                return False
            record.is_active = False
            await session.commit()
            logger.info(f"Deactivated quiz pattern '{pattern_id}'")
            return True

    async def get_stats(self) -> Dict[str, int]:
        async with self._session_factory() as session:
            total = await session.scalar(select(func.count(QuizPatternRecord.id)))
            standard = await session.scalar(
                select(func.count(QuizPatternRecord.id)).where(QuizPatternRecord.quiz_type == QuizType.STANDARD.value)
            )
            long = await session.scalar(
                select(func.count(QuizPatternRecord.id)).where(QuizPatternRecord.quiz_type == QuizType.LONG.value)
            )
            active = await session.scalar(
                select(func.count(QuizPatternRecord.id)).where(QuizPatternRecord.is_active.is_(True))
            )
        return {
            "total_patterns": total or 0,
            "standard_patterns": standard or 0,
            "long_patterns": long or 0,
            "active_patterns": active or 0,
        }

    async def seed_from_mappings(self, mappings: QuizMappings) -> Dict[str, int]:
        """
        Upserts every mappings pattern, reactivating existing ones and
        overwriting stored definitions that no longer validate.
        Per-pattern failures are counted, not raised.
        """
        created = updated = errors = 0
        for quiz_type in QuizType:
            for pattern in mappings.section(quiz_type).patterns:
                try:
                    refreshed = await self.update(
                        pattern.id,
                        pattern=pattern.pattern,
                        suggestions=pattern.suggestions,
                        is_active=True,
                    )
                    if refreshed is not None:
                        updated += 1
                    else:
                        await self.create(pattern.model_copy(update={"is_active": True}), quiz_type)
                        created += 1
                except SQLAlchemyError as e:
                    logger.error(f"Error processing {quiz_type.value} pattern {pattern.id}: {e}")
                    errors += 1

        logger.info(f"Seeded quiz patterns: created={created}, updated={updated}, errors={errors}")
        return {"created": created, "updated": updated, "errors": errors}

    @staticmethod
    async def _find(session: AsyncSession, pattern_id: str) -> Optional[QuizPatternRecord]:
        result = await session.execute(select(QuizPatternRecord).where(QuizPatternRecord.pattern_id == pattern_id))
        return result.scalars().first()

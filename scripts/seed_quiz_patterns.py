"""
Creates the quiz pattern table if needed and upserts all patterns from the mappings file.

Usage: APP_DATABASE_URL=... python -m scripts.seed_quiz_patterns [--mappings data/quiz-mappings.json]
"""
import argparse
import asyncio
import logging

from services.quiz_engine.loader import load_quiz_mappings_from_file
from src.core.config import get_settings
from src.core.logging_config import setup_logging
from src.db.pattern_store import SqlPatternStore
from src.db.session import create_schema, get_async_engine, get_session_factory

logger = logging.getLogger(__name__)


async def seed(database_url: str, mappings_path: str) -> dict:
    mappings = load_quiz_mappings_from_file(mappings_path)
    engine = get_async_engine(database_url)
    try:
        await create_schema(engine)
        store = SqlPatternStore(get_session_factory(engine))
        report = await store.seed_from_mappings(mappings)
        logger.info(f"Pattern store stats: {await store.get_stats()}")
        return report
    finally:
        await engine.dispose()


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--mappings", default=settings.quiz_mappings_path)
    args = parser.parse_args()
    setup_logging(settings.log_level, json_logs=False)

    if not settings.database_url:
        logger.error("APP_DATABASE_URL is not set")
        return 1

    report = asyncio.run(seed(settings.database_url, args.mappings))
    return 1 if report["errors"] else 0


if __name__ == "__main__":
    raise SystemExit(main())

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from services.quiz_engine.engine import QuizSuggestionEngine
from services.quiz_engine.store import MappingsPatternStore
from src.cache.connection import close_redis, get_redis
from src.cache.results import QuizResultCache
from src.core.config import get_settings
from src.core.logging_config import setup_logging
from src.db.pattern_store import SqlPatternStore
from src.db.session import get_async_engine, get_session_factory
from src.routers import quiz as quiz_router

settings = get_settings()
setup_logging(settings.log_level, settings.json_logs)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_engine = None
    primary_store = None
    if settings.database_url:
        db_engine = get_async_engine(settings.database_url)
        primary_store = SqlPatternStore(get_session_factory(db_engine))
        logger.info("Database pattern store enabled")
    else:
        logger.info("No database configured; using file-based quiz patterns only")

    mappings_store = MappingsPatternStore(settings.quiz_mappings_path)
    app.state.quiz_engine = QuizSuggestionEngine(
        mappings_store,
        primary_store=primary_store,
        policy=settings.selection_policy,
    )
    app.state.result_cache = QuizResultCache(ttl=settings.result_cache_ttl)
    logger.info(f"Quiz engine ready (policy={settings.selection_policy.value})")

    yield

    await close_redis()
    if db_engine is not None:
        await db_engine.dispose()


app = FastAPI(title="Career Path Engine", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quiz_router.router, prefix="/api/v1", tags=["quiz"])


@app.get("/", tags=["Health Check"])
async def read_root(request: Request):
    """
    Root endpoint for basic health check.
    """
    engine: QuizSuggestionEngine = request.app.state.quiz_engine
    return {
        "status": "ok",
        "message": "Career Path Engine is running.",
        "mappings_loaded": engine.mappings_store.mappings_loaded,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health/cache", tags=["Health Check"])
async def health_check_cache():
    """
    Performs a cache connection health check with a PING.
    """
    redis_conn = await get_redis()
    if not redis_conn:
        raise HTTPException(status_code=503, detail="Cache error: Redis client unavailable")
    try:
        await redis_conn.ping()
    except RedisError as e:
        logger.error(f"Cache health check failed: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Cache connection error: {e}")
    return {"status": "ok", "cache_check": "ping_successful"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

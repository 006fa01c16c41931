import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from config import settings
from core.errors import (
    GridOSError,
    InvalidTransitionError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from models import async_session, create_schema, engine
from api.alarms import router as alarms_router
from api.grid_nodes import router as grid_nodes_router
from api.health import router as health_router
from core.websocket import router as ws_router, redis_to_ws_bridge
from services.alarm_lifecycle import AlarmLifecycleManager
from services.event_publisher import EventPublisher
from services.ingestion_loop import IngestionLoop
from services.monitoring import GridMonitoringService
from services.reading_source import SimulatedReadingSource
from services.repository import GridRepository
from services.seed import seed_default_nodes
from services.threshold_evaluator import ThresholdEvaluator

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("gridos.main")

# Grace period for a running ingestion cycle to finish its writes on shutdown
SHUTDOWN_GRACE = 5.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("GridOS API starting... DEBUG=%s", settings.DEBUG)

    # Schema: a failure here is logged and the API keeps serving
    if settings.CREATE_SCHEMA_ON_STARTUP:
        try:
            await create_schema()
            logger.info("Database schema ready")
        except Exception as exc:
            logger.error("Database schema setup failed: %s", exc, exc_info=True)

    # Redis
    redis = None
    publisher = None
    if settings.REDIS_ENABLED:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        try:
            await redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except (RedisError, OSError) as exc:
            logger.warning("Redis unreachable at %s (%s); live feed degraded", settings.REDIS_URL, exc)
        publisher = EventPublisher(redis)
    app.state.redis = redis

    # Core services
    repository = GridRepository(async_session)
    evaluator = ThresholdEvaluator(repository)
    app.state.repository = repository
    app.state.monitoring = GridMonitoringService(repository, evaluator, publisher)
    app.state.alarm_manager = AlarmLifecycleManager(
        repository,
        strict=settings.ALARM_STRICT_TRANSITIONS,
        publisher=publisher,
    )

    if settings.SEED_DEFAULT_NODES:
        try:
            await seed_default_nodes(repository)
        except GridOSError as exc:
            logger.error("Seeding default grid nodes failed: %s", exc)

    background: list[asyncio.Task] = []

    # Ingestion loop
    ingestion = None
    if settings.INGESTION_ENABLED:
        ingestion = IngestionLoop(
            repository,
            evaluator,
            SimulatedReadingSource(),
            interval=settings.INGESTION_INTERVAL,
            publisher=publisher,
        )
        background.append(asyncio.create_task(ingestion.start(), name="ingestion"))
    else:
        logger.info("Ingestion loop DISABLED (INGESTION_ENABLED=false)")
    app.state.ingestion = ingestion

    # Redis -> WebSocket bridge
    if redis is not None:
        background.append(asyncio.create_task(redis_to_ws_bridge(redis), name="ws-bridge"))

    yield

    # Shutdown
    logger.info("GridOS API shutting down...")
    try:
        if ingestion is not None:
            await ingestion.stop()
            await asyncio.wait(background[:1], timeout=SHUTDOWN_GRACE)

        for t in background:
            t.cancel()
        results = await asyncio.gather(*background, return_exceptions=True)
        for t, result in zip(background, results):
            if isinstance(result, Exception):
                logger.error("Background task %s failed: %r", t.get_name(), result)
    finally:
        if redis is not None:
            await redis.aclose()
        await engine.dispose()
        logger.info("Shutdown complete")


app = FastAPI(
    title="GridOS API",
    version="1.0.0",
    description="Grid monitoring and management system API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": str(exc)}, status_code=404)


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse({"detail": str(exc)}, status_code=400)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse({"detail": str(exc)}, status_code=409)


@app.exception_handler(StorageUnavailableError)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
    logger.error("%s %s: storage unavailable: %s", request.method, request.url.path, exc)
    return JSONResponse({"detail": "Storage unavailable"}, status_code=503)


app.include_router(grid_nodes_router)
app.include_router(alarms_router)
app.include_router(health_router)
app.include_router(ws_router)

"""Main web application - FastAPI server for the CCTV registry and event stream."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from ..config import config
from ..core.dispatcher import EventDispatcher
from ..registry import LocalRegistry, create_registry
from ..registry.base import CCTVRegistry
from ..shared.db.database import init_db, close_db
from ..shared.redis.client import close_redis, redis_available
from ..shared.redis.pubsub import get_event_publisher
from ..shared.schemas.event import CCTVEvent
from .api.cctv import router as cctv_router


async def _startup(app: FastAPI, use_redis: bool) -> None:
    # Validate configuration
    for warning in config.validate():
        print(f"[WARN] {warning}")

    if app.state.registry is None:
        if config.CCTV_BACKEND == "database":
            print("[SETUP] Initializing database connection...")
            await init_db(create_tables=not config.is_production())
        app.state.registry = create_registry(config)
    registry: CCTVRegistry = app.state.registry

    if app.state.dispatcher is None:
        app.state.dispatcher = EventDispatcher(registry)
    dispatcher: EventDispatcher = app.state.dispatcher

    # Check Redis
    app.state.redis_enabled = False
    publisher = None
    if use_redis:
        print("[SETUP] Checking Redis connection...")
        if await redis_available():
            app.state.redis_enabled = True
            publisher = await get_event_publisher()
            print("[SETUP] Redis connected")
        else:
            print("[WARN] Redis not available, SSE uses direct dispatcher mode")

    async def to_redis(event: CCTVEvent) -> None:
        """Forward dispatched events to other instances."""
        try:
            await publisher.publish_event(event)
        except Exception as e:
            print(f"[WARN] Redis publish failed for {event.id}: {e}")

    if publisher is not None and dispatcher.relay is None:
        dispatcher.relay = to_redis

    # Registry-generated events (recording_started, camera_offline) fan out too
    if isinstance(registry, LocalRegistry) and registry.event_sink is None:
        registry.event_sink = dispatcher.publish


async def _shutdown(app: FastAPI) -> None:
    print("\n[SHUTDOWN] Closing connections...")
    if app.state.dispatcher is not None:
        await app.state.dispatcher.close()
    if app.state.registry is not None:
        await app.state.registry.close()
    if config.CCTV_BACKEND == "database":
        await close_db()
    if app.state.redis_enabled:
        await close_redis()
    print("[SHUTDOWN] Complete")


def create_app(
    registry: Optional[CCTVRegistry] = None,
    dispatcher: Optional[EventDispatcher] = None,
    use_redis: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        registry: Registry to serve; built from configuration when omitted
        dispatcher: Event dispatcher; built over the registry when omitted
        use_redis: Try Redis for cross-instance event fan-out
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown events."""
        print("=" * 60)
        print("  GuardWatch CCTV - Web Service")
        print("=" * 60)

        await _startup(app, use_redis)

        print(f"\n[SERVER] Backend: {config.CCTV_BACKEND}")
        print(f"[SERVER] Production mode: {config.is_production()}")
        print("=" * 60)

        yield  # Application runs here

        await _shutdown(app)

    app = FastAPI(
        title="GuardWatch CCTV API",
        description="Camera registry, geofence zones, events and recordings",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if not config.is_production() else None,
        redoc_url="/redoc" if not config.is_production() else None,
    )
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.redis_enabled = False

    # CORS middleware (for development)
    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        """Report request validation failures as 400."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    app.include_router(cctv_router)

    @app.get("/health")
    async def health_check():
        """Liveness check."""
        return {
            "status": "healthy",
            "service": "cctv",
            "backend": config.CCTV_BACKEND,
            "version": "1.0.0",
        }

    return app


app = create_app()


def main():
    """Main entry point."""
    import uvicorn

    uvicorn.run(
        "guardwatch.web.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=not config.is_production(),
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()

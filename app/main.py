"""Account Defense Simulator - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.core.errors import GameError, StoreError
from app.db.session import MemorySessionStore, SessionStore
from app.routers import api
from app.services.game import GameContext

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)


def create_app(
    settings: Settings | None = None,
    store: SessionStore | None = None,
    context: GameContext | None = None,
) -> FastAPI:
    """Build the app; tests pass their own store and clock/random context."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        logger.info(f"{settings.app_name} starting")
        yield
        # shutdown if needed

    app = FastAPI(
        title=settings.app_name,
        description="Attacker vs. account security training game",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else MemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    app.state.game_context = context if context is not None else GameContext()

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        return JSONResponse(status_code=exc.status_code, content={"error": "Internal error"})

    @app.exception_handler(GameError)
    async def game_error(request: Request, exc: GameError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    app.include_router(api.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()

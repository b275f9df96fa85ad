import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.endpoints.activities import router as activities_router
from app.api.v1.endpoints.auth import router as auth_router
from app.api.v1.endpoints.games import router as games_router
from app.api.v1.endpoints.users import router as users_router
from app.core.config import Settings, get_settings
from app.core.database import DatabaseSessionManager, aget_db
from app.core.exceptions import AppError
from app.core.limiter import limiter

logger = logging.getLogger(__name__)


def error_response(message, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "status": status_code}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""
    settings: Settings = app.state.settings
    session_manager = DatabaseSessionManager.from_settings(settings)

    try:
        logger.info("🚀 Starting pickup application...")
        logger.info("🔌 Initializing database connection pool...")
        await session_manager.init()
        app.state.session_manager = session_manager
        logger.info("✅ Database connection pool ready")
    except Exception as e:
        logger.critical(f"🔥 Application startup failed: {str(e)}")
        raise

    try:
        logger.info("🏁 Pickup application startup complete")
        yield
    finally:
        logger.info("🔌 Closing database connections...")
        await session_manager.close()
        logger.info("👋 Application shutdown complete")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation Error: {exc.errors()}")
        messages = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        return error_response(messages, 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.detail, exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response("Internal server error", 500)

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="Pickup API",
        description="API for organizing pickup games, invites and messaging",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    limiter.bind(app, settings)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url}")
        response = await call_next(request)
        logger.info(f"Response status: {response.status_code}")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/", tags=["Health Check"])
    async def health_check(db: AsyncSession = Depends(aget_db)):
        try:
            await db.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "service": "Pickup API",
                "database": "connected",
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return {
                "status": "unhealthy",
                "service": "Pickup API",
                "database": "disconnected",
                "error": str(e)
            }

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(games_router, prefix="/api/v1")
    app.include_router(activities_router, prefix="/api/v1")

    return app


app = create_app()

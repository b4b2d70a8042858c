"""
FastAPI application for the Fruit Spinner Telegram Mini App.

Provides REST API endpoints for the frontend: spinner points, welcome
message, points read-back.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise import Tortoise

from fruit_spinner.config import config
from fruit_spinner.database.config import TORTOISE_ORM
from fruit_spinner.interfaces.api.routers import spinner, user, welcome
from fruit_spinner.services.notifications import WelcomeSender
from fruit_spinner.storage import UserRepository

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and build shared collaborators."""
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()
    logger.info("Database initialized")

    app.state.points_gateway = UserRepository()
    app.state.welcome_sender = WelcomeSender(
        config.BOT_TOKEN.get_secret_value() if config.BOT_TOKEN else None
    )
    if not app.state.welcome_sender.configured:
        logger.warning("BOT_TOKEN is not set, /api/send-welcome will fail")

    yield

    await Tortoise.close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="Fruit Spinner API",
    description="REST API for Telegram Mini App",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# AICODE-NOTE: CORS origins include localhost for dev, Vercel previews and TMA_URL
cors_origin_regex = r"^https://.*\.vercel\.app$|^https?://localhost:\d+$"
cors_origins = []
if config.TMA_URL:
    tma_url = config.TMA_URL.rstrip("/")
    cors_origins.append(tma_url)
    logger.info(f"Added TMA URL to CORS origins: {tma_url}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=cors_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.include_router(spinner.router)
app.include_router(welcome.router)
app.include_router(user.router)


@app.get("/api/health")
async def api_health():
    """API health check endpoint."""
    return {"status": "ok", "service": "fruit-spinner-api"}

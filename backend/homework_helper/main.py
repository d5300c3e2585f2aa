"""
Homework Helper FastAPI Application Entry Point.

Run with: uvicorn homework_helper.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from homework_helper.config import get_settings, sanitize_error
from homework_helper.db.session import Database
from homework_helper.errors import HomeworkHelperError, PersistenceError
from homework_helper.api.routes import auth, chat, chats, resources

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.database = Database.from_settings(settings)
    logger.info("Database engine created")
    yield
    # Shutdown
    await app.state.database.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    description="Homework help with staged AI hints",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(HomeworkHelperError)
async def homework_helper_error_handler(request: Request, exc: HomeworkHelperError) -> JSONResponse:
    detail = exc.detail
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, cause)
        detail = sanitize_error(cause, generic_message=exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    error = PersistenceError()
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": sanitize_error(exc, generic_message=error.detail)},
    )


# Include routers
app.include_router(auth.router)
app.include_router(chat.router)
app.include_router(chats.router)
app.include_router(resources.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}

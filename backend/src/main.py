from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from playback.interfaces.routes import router as playback_router
from shared.config import settings
from shared.dependencies import session_registry
from shared.exceptions import (
    AppError,
    ConflictError,
    InvalidIndexError,
    InvalidSpeedError,
    NotFoundError,
    PlaybackInProgressError,
)
from shared.infrastructure.database import engine
from shared.infrastructure.logging import setup_logging
from versioning.interfaces.routes import router as history_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    yield
    session_registry.close_all()
    await engine.dispose()


app = FastAPI(
    title="Document History",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(history_router)
app.include_router(playback_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(InvalidIndexError)
async def invalid_index_handler(request, exc: InvalidIndexError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(InvalidSpeedError)
async def invalid_speed_handler(request, exc: InvalidSpeedError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(PlaybackInProgressError)
async def playback_in_progress_handler(request, exc: PlaybackInProgressError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    return {"status": "ok"}

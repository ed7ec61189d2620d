from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from tinywins.db.base import get_db
from tinywins.core.config import settings
from tinywins.core.logging import setup_logging
from tinywins.routers import progress as progress_router
from tinywins.routers import agreements as agreements_router
from tinywins.routers import reflections as reflections_router
from tinywins.routers import milestones as milestones_router
from tinywins.routers import celebrations as celebrations_router
from tinywins.core.errors import (
    TinyWinsException,
    tinywins_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

setup_logging()

app = FastAPI(
    title="TinyWins Engine API",
    description=(
        "**Goal progress & agreement coverage engine**\n\n"
        "Derives reward progress, family-agreement coverage, the parent "
        "reflection streak and once-only celebrations from client snapshots.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(TinyWinsException, tinywins_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(progress_router.router)
app.include_router(agreements_router.router)
app.include_router(reflections_router.router)
app.include_router(milestones_router.router)
app.include_router(celebrations_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the
    celebration ledger database are reachable. Returns HTTP 503 if the DB
    is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}

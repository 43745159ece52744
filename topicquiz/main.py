from __future__ import annotations

import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .errors import TopicValidationError
from .log import setup_logging
from .routers import quiz
from .services.llm import build_llm
from .settings import settings
from .staticfiles import PublicStaticFiles

# ---------- logging ----------
setup_logging(settings.LOG_LEVEL)

# ---------- app ----------
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.llm = build_llm(settings)
    yield
    logger.info("Application shutting down")

app = FastAPI(title="Topic Quiz API", version="1.0.0", lifespan=lifespan)

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- errors ----------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # the only input is the topic, so any malformed body means "no topic"
    logger.warning(f"[quiz] invalid body on {request.url.path}: {exc.errors()}")
    err = TopicValidationError()
    return JSONResponse({"error": err.message}, status_code=err.status_code)

# ---------- health ----------
@app.get("/health")
def health(request: Request):
    llm = getattr(request.app.state, "llm", None)
    return {
        "ok": True,
        "mock": settings.MOCK_MODE,
        "model": llm.model_name if llm else settings.GEMINI_MODEL,
    }

# ---------- routers ----------
app.include_router(quiz.router, prefix="/api", tags=["quiz"])

# ---------- static files (mounted last so API routes win) ----------
if os.path.isdir(settings.STATIC_DIR):
    app.mount("/", PublicStaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
else:
    logger.warning(f"STATIC_DIR {settings.STATIC_DIR!r} not found; static files disabled")

def run() -> None:
    logger.info(f"Server running at http://localhost:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)

if __name__ == "__main__":
    run()

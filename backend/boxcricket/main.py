from contextlib import asynccontextmanager
import logging
import os

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import API_PREFIX, SCORING_BONUS_POLICY
from .db import create_schema
from .exceptions import DomainException, ProblemDetail
from .routers import balls, streams
from .scoring import get_bonus_policy
from .utils.sentry import init_sentry

logger = logging.getLogger(__name__)

init_sentry()

# Fail fast on an unknown policy rather than on the first ball
get_bonus_policy(SCORING_BONUS_POLICY)

# -----------------------------------------------------------------------------
# CORS configuration
# -----------------------------------------------------------------------------
ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()
]
ALLOW_CREDENTIALS = os.getenv("ALLOW_CREDENTIALS", "true").lower() == "true"

# Credentials + wildcard origins is unsafe
if "*" in ALLOWED_ORIGINS:
    raise ValueError(
        "ALLOWED_ORIGINS cannot include '*' (wildcard). Specify explicit, trusted origins."
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_schema()
    logger.info("API_PREFIX=%r, bonus policy=%r", API_PREFIX, SCORING_BONUS_POLICY)
    yield


# -----------------------------------------------------------------------------
# FastAPI app
# -----------------------------------------------------------------------------
app = FastAPI(
    title="Box Cricket Scorer API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

if ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# -----------------------------------------------------------------------------
# Health checks
# -----------------------------------------------------------------------------
@app.get("/healthz", tags=["health"])  # Unprefixed for reverse proxy / uptime checks
def root_healthz():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Error handling: every error leaves as application/problem+json
# -----------------------------------------------------------------------------
def problem_response(problem: ProblemDetail, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(),
        media_type="application/problem+json",
        headers=headers,
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    return problem_response(
        ProblemDetail(
            type=exc.type,
            title=exc.title,
            detail=exc.detail,
            status=exc.status_code,
            instance=request.url.path,
            code=exc.code,
        )
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return problem_response(
        ProblemDetail(title=detail, detail=detail, status=exc.status_code,
                      code=f"http_{exc.status_code}"),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # scoring computation errors land here; they are bugs, never retried
    logger.error("Unhandled exception", exc_info=(type(exc), exc, exc.__traceback__))
    return problem_response(
        ProblemDetail(
            title="Internal Server Error",
            status=500,
            detail=str(exc),
            code="internal_server_error",
        )
    )


# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
api_router = APIRouter(prefix=API_PREFIX, tags=["meta"])


@api_router.get("/healthz", tags=["health"])
def api_healthz():
    return {"status": "ok"}


@api_router.get("")
def api_root():
    return {"message": "Box Cricket Scorer API. See /docs."}


v0_router = APIRouter(prefix="/v0")
v0_router.include_router(balls.router)
v0_router.include_router(streams.router)

api_router.include_router(v0_router)
app.include_router(api_router)

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reportd.api.middleware import RequestLoggingMiddleware
from reportd.api.routes import annotations, graph, metrics, overview, samples
from reportd.backends import close_backend, init_backend
from reportd.config import settings
from reportd.diagnosis.dependency_graph import init_dependency_graph
from reportd.errors import DiagnosisError
from reportd.logging_config import setup_logging

setup_logging(settings.log_level)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the dependency table and open the query backend."""
    logger.info("starting_up", app=settings.app_name, version=settings.app_version)

    # ── Startup ──────────────────────────────────────────
    init_dependency_graph(settings.dependency_graph_file)

    await init_backend()
    logger.info("backend_ready", backend=settings.backend)

    logger.info("startup_complete")
    yield

    # ── Shutdown ─────────────────────────────────────────
    logger.info("shutting_down")
    await close_backend()
    logger.info("shutdown_complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Diagnosis node graph, annotations and overview values for TiDB clusters.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Middleware ────────────────────────────────────────────

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Exception Handlers ───────────────────────────────────

@app.exception_handler(DiagnosisError)
async def diagnosis_exception_handler(request: Request, exc: DiagnosisError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "detail": exc.details, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred.",
            "code": "INTERNAL_ERROR",
        },
    )


# ── Health Check ─────────────────────────────────────────

@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "backend": settings.backend,
    }


# ── Routers ──────────────────────────────────────────────

app.include_router(graph.router,       tags=["Diagnosis"])
app.include_router(annotations.router, tags=["Diagnosis"])
app.include_router(overview.router,    tags=["Diagnosis"])
app.include_router(samples.router,     tags=["Samples"])
app.include_router(metrics.router,     tags=["Metrics"])

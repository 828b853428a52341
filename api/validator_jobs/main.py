from __future__ import annotations

import logging
import time
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from validator_jobs.routers import health, reputation, teams
from validator_jobs.services.errors import ValidatorJobsError
from validator_jobs.services.reputation_service import ReputationService
from validator_jobs.services.settings import Settings
from validator_jobs.services.team_registry_service import TeamRegistryService

load_dotenv(Path(__file__).resolve().parents[1] / ".env")
settings = Settings.from_env()

app = FastAPI(title="Validator Jobs API", version="1.0.0")
logger = logging.getLogger("validator_jobs.api")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
logger.propagate = False
logger.setLevel(logging.INFO)


RUNTIME_HEADER = "x-validator-jobs-runtime-ms"
REQUEST_ID_HEADER = "x-validator-jobs-request-id"


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[RUNTIME_HEADER, REQUEST_ID_HEADER],
)

app.state.settings = settings
app.state.reputation_service = ReputationService.from_settings(settings)
app.state.team_registry = TeamRegistryService()


@app.exception_handler(ValidatorJobsError)
async def _validator_jobs_error_handler(request: Request, exc: ValidatorJobsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(
            "upstream_failure path=%s status=%s detail=%s",
            request.url.path,
            exc.status_code,
            exc.detail,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error path=%s exception=%s", request.url.path, exc.__class__.__name__, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return RedirectResponse(url="/docs")


app.include_router(reputation.router, prefix="/api", tags=["reputation"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(health.router, prefix="/api", tags=["health"])


@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    start = time.perf_counter()
    request_id = request.headers.get("x-request-id")
    status_code = 500
    try:
        response: Response = await call_next(request)
        status_code = response.status_code
        response.headers[RUNTIME_HEADER] = f"{max(0.1, (time.perf_counter() - start) * 1000.0):.4f}"
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if elapsed_ms >= settings.slow_request_ms or settings.log_all_requests or status_code >= 500:
            logger.warning(
                "api_request method=%s path=%s status=%s elapsed_ms=%.2f request_id=%s",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
                request_id or "none",
            )

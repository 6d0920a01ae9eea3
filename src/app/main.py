from __future__ import annotations

"""FastAPI application entrypoint for the podcast vector search service."""

import json
import logging
import uuid

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from src.app.dependencies import get_pipeline
from src.app.metrics import metrics_middleware, metrics_response, record_outcome
from src.app.schemas import ErrorResponse, HealthResponse
from src.app.settings import settings
from src.rag.errors import ApplicationError, UserError
from src.rag.pipeline import SearchPipeline

logger = logging.getLogger(__name__)

app = FastAPI(title="Podcast Vector Search", version="0.1.0")

GENERIC_ERROR = "There was an error processing your request"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": settings.cors_allow_headers,
}


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def pipeline_dependency() -> SearchPipeline:
    """Resolve the shared pipeline, mapping configuration failures to 500s."""
    try:
        return get_pipeline()
    except Exception as exc:
        raise ApplicationError(
            "Failed to configure search pipeline",
            {"type": type(exc).__name__, "detail": str(exc)},
        ) from exc


def _generic_error_response() -> JSONResponse:
    return JSONResponse(
        ErrorResponse(error=GENERIC_ERROR).model_dump(exclude_none=True),
        status_code=500,
        headers=CORS_HEADERS,
    )


@app.exception_handler(UserError)
async def handle_user_error(request: Request, exc: UserError) -> JSONResponse:
    """Return caller-caused failures with their payload."""
    record_outcome("user_error")
    return JSONResponse(
        ErrorResponse(error=exc.message, data=exc.data).model_dump(exclude_none=True),
        status_code=400,
        headers=CORS_HEADERS,
    )


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
    """Log backend failures in full and hide them from the caller."""
    record_outcome("application_error")
    logger.error(
        "application_error: %s: %s",
        exc.message,
        json.dumps(exc.data, default=str, ensure_ascii=False),
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return _generic_error_response()


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Simple health probe for uptime checks."""
    return HealthResponse(status="ok")


@app.options("/vector-search")
async def vector_search_preflight() -> PlainTextResponse:
    """Answer CORS preflight requests."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@app.api_route("/vector-search", methods=["GET", "POST"])
async def vector_search(
    request: Request,
    query: str | None = None,
    pipeline: SearchPipeline = Depends(pipeline_dependency),
):
    """Stream a recommendation answer for the ``query`` URL parameter."""
    try:
        stream = await pipeline.answer(query)
    except (UserError, ApplicationError):
        raise
    except Exception:
        record_outcome("unexpected_error")
        logger.exception(
            "unexpected_error",
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return _generic_error_response()
    record_outcome("success")
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers=CORS_HEADERS,
    )

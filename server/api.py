"""FastAPI server exposing the health, analyze and search endpoints."""

import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from closet_app.app import ClosetBackend
from closet_app.logging_config import configure_logging, get_logger, log_event
from logic.product_aggregation import InvalidSearchRequestError
from logic.validation import AnalyzeRequest, HealthResponse, SearchRequest, SearchResponse
from models.analysis import AnalysisResult
from tools.vision_classifier import InvalidImagePayloadError

configure_logging()

LOGGER = get_logger(__name__)

closet_backend = ClosetBackend()
app = FastAPI(title="Closet Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors and answer 400, like missing fields."""

    log_event(LOGGER, logging.WARNING, "invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


def get_backend() -> ClosetBackend:
    """Dependency hook so tests can swap in a backend with fake vendors."""

    return closet_backend


@app.get("/api/health", response_model=HealthResponse)
def healthcheck(backend: ClosetBackend = Depends(get_backend)) -> HealthResponse:
    """Report liveness and which third-party credentials are configured."""

    return backend.health()


@app.post("/api/analyze", response_model=AnalysisResult)
def analyze(request: AnalyzeRequest, backend: ClosetBackend = Depends(get_backend)) -> AnalysisResult:
    """Classify a clothing photo into category, color, season and description."""

    if not request.image:
        raise HTTPException(status_code=400, detail="Image is required")
    try:
        return backend.analyze(request.image)
    except InvalidImagePayloadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        log_event(LOGGER, logging.ERROR, "analyze_failed", error=str(exc), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to analyze image") from exc


@app.post("/api/search", response_model=SearchResponse)
def search(request: SearchRequest, backend: ClosetBackend = Depends(get_backend)) -> SearchResponse:
    """Look up purchasable products by text query and/or barcode."""

    try:
        result = backend.search(query=request.query, barcode=request.barcode)
    except InvalidSearchRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        log_event(LOGGER, logging.ERROR, "search_failed", error=str(exc), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search products") from exc
    return SearchResponse(products=[product.to_wire() for product in result.products])


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=3000, reload=False)

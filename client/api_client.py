"""HTTP client for the closet backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from models.analysis import AnalysisResult
from models.product import ProductResult

logger = logging.getLogger(__name__)


class BackendRequestError(RuntimeError):
    """Raised when the backend cannot be reached or answers with an error."""


class ClosetApiClient:
    """Calls ``/api/analyze``, ``/api/search`` and ``/api/health``."""

    def __init__(self, base_url: str, timeout_seconds: float = 30.0, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=body, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            logger.error("Backend unreachable", extra={"path": path, "error": str(exc)})
            raise BackendRequestError(f"Network error calling {path}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.error("Backend returned an error", extra={"path": path, "status_code": response.status_code})
            raise BackendRequestError(f"HTTP error: {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise BackendRequestError(f"Invalid JSON from {path}") from exc

    def analyze_image(self, base64_image: str) -> AnalysisResult:
        payload = self._post("/api/analyze", {"image": base64_image})
        try:
            return AnalysisResult.model_validate(payload)
        except ValidationError as exc:
            raise BackendRequestError("Unexpected analyze response shape") from exc

    def search_products(self, query: Optional[str], barcode: Optional[str] = None) -> List[ProductResult]:
        payload = self._post("/api/search", {"query": query, "barcode": barcode})
        try:
            return [ProductResult.model_validate(entry) for entry in payload.get("products") or []]
        except (ValidationError, AttributeError) as exc:
            raise BackendRequestError("Unexpected search response shape") from exc

    def check_health(self) -> Dict[str, Any]:
        """Return the health payload, or an ``error`` status instead of raising."""

        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=self.timeout_seconds)
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Health check error", extra={"error": str(exc)})
            return {"status": "error", "error": str(exc)}


__all__ = ["BackendRequestError", "ClosetApiClient"]

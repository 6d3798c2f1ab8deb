"""HTTP surface tests against the FastAPI app with fake vendors."""

from __future__ import annotations

import base64
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from closet_app.app import ClosetBackend
from closet_app.config import ClosetConfig
from logic.product_aggregation import ProductAggregator
from models.product import ProductResult
from server.api import app, get_backend
from tools.product_search import StaticProductSearch
from tools.vision_classifier import GeminiClothingClassifier

IMAGE_B64 = base64.b64encode(b"jpeg bytes").decode()


class _Response:
    def __init__(self, text: str) -> None:
        self.text = text


class _Model:
    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error

    def generate_content(self, contents, generation_config=None):
        if self.error:
            raise self.error
        return _Response(self.text)


def _backend(model: _Model | None = None, serp=None, rakuten=None) -> ClosetBackend:
    config = ClosetConfig(gemini_api_key="g-key", serpapi_key="s-key", rakuten_app_id=None)
    serp = serp or StaticProductSearch("serpapi")
    rakuten = rakuten or StaticProductSearch("rakuten")
    return ClosetBackend(
        config=config,
        classifier=GeminiClothingClassifier(api_key="g-key", model_name="test", model=model or _Model("{}")),
        aggregator=ProductAggregator(barcode_source=rakuten, text_sources=[serp, rakuten]),
    )


@pytest.fixture()
def client_factory() -> Iterator:
    def make(backend: ClosetBackend) -> TestClient:
        app.dependency_overrides[get_backend] = lambda: backend
        return TestClient(app)

    yield make
    app.dependency_overrides.clear()


def test_health_reports_configured_services(client_factory) -> None:
    response = client_factory(_backend()).get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")
    assert body["services"] == {"gemini": True, "serpapi": True, "rakuten": False}


def test_analyze_requires_image(client_factory) -> None:
    response = client_factory(_backend()).post("/api/analyze", json={})
    assert response.status_code == 400


def test_analyze_returns_classifier_fields(client_factory) -> None:
    model = _Model(
        '```json\n{"category": "Top", "color": "Black", "season": "Winter", '
        '"description": "タートルネックニット", "brand_guess": "UNIQLO"}\n```'
    )
    response = client_factory(_backend(model)).post(
        "/api/analyze", json={"image": f"data:image/jpeg;base64,{IMAGE_B64}"}
    )
    assert response.status_code == 200
    assert response.json() == {
        "category": "Top",
        "color": "Black",
        "season": "Winter",
        "description": "タートルネックニット",
        "brand_guess": "UNIQLO",
    }


def test_analyze_unparseable_reply_returns_fallback(client_factory) -> None:
    response = client_factory(_backend(_Model("Sorry, I cannot help."))).post(
        "/api/analyze", json={"image": IMAGE_B64}
    )
    assert response.status_code == 200
    assert response.json() == {
        "category": "Other",
        "color": "Unknown",
        "season": "All",
        "description": "Unable to analyze",
        "brand_guess": None,
    }


def test_analyze_classifier_failure_is_500(client_factory) -> None:
    model = _Model(error=RuntimeError("quota exceeded"))
    response = client_factory(_backend(model)).post("/api/analyze", json={"image": IMAGE_B64})
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to analyze image"}


def test_search_requires_query_or_barcode(client_factory) -> None:
    client = client_factory(_backend())
    assert client.post("/api/search", json={}).status_code == 400
    assert client.post("/api/search", json={"query": "", "barcode": None}).status_code == 400


@pytest.mark.parametrize(
    "path, body",
    [
        ("/api/search", {"query": 123}),
        ("/api/search", {"barcode": ["490"]}),
        ("/api/analyze", {"image": 5}),
    ],
)
def test_wrongly_typed_body_is_400(client_factory, path: str, body: dict) -> None:
    response = client_factory(_backend()).post(path, json=body)
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid request body"}


def test_search_returns_ranked_products_in_wire_format(client_factory) -> None:
    serp = StaticProductSearch(
        "serpapi",
        [ProductResult(name="Linen Shirt", price=None, url="https://a.test", source="serpapi")],
    )
    rakuten = StaticProductSearch(
        "rakuten",
        [
            ProductResult(
                name="Linen Shirt",
                price=4990,
                url="https://b.test",
                image_url="https://b.test/1.jpg",
                source="rakuten",
                jan_code="shop:1",
            )
        ],
    )
    response = client_factory(_backend(serp=serp, rakuten=rakuten)).post(
        "/api/search", json={"query": "linen shirt"}
    )

    assert response.status_code == 200
    products = response.json()["products"]
    assert [product["source"] for product in products] == ["rakuten", "serpapi"]
    assert products[0]["imageUrl"] == "https://b.test/1.jpg"
    assert products[0]["janCode"] == "shop:1"
    assert products[1]["price"] is None


def test_search_unexpected_failure_is_500(client_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _backend()

    def explode(**_kwargs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(backend.aggregator, "search", explode)
    response = client_factory(backend).post("/api/search", json={"query": "x"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to search products"}


def test_cors_preflight_allows_any_origin(client_factory) -> None:
    response = client_factory(_backend()).options(
        "/api/search",
        headers={
            "Origin": "http://localhost:8081",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]

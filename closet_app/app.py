"""Backend bootstrap: wires the classifier, vendor clients and aggregator."""

from __future__ import annotations

import logging

from closet_app.config import ClosetConfig
from closet_app.logging_config import configure_logging, get_logger, log_event, operation_context
from logic.product_aggregation import AggregationResult, ProductAggregator
from logic.validation import HealthResponse
from models.analysis import AnalysisResult
from models.closet_item import utc_timestamp
from tools.rakuten import RakutenClient
from tools.serpapi import SerpApiClient
from tools.vision_classifier import GeminiClothingClassifier, strip_data_url_prefix

LOGGER = get_logger(__name__)


class ClosetBackend:
    """Stateless request handlers shared by the HTTP layer."""

    def __init__(
        self,
        config: ClosetConfig | None = None,
        classifier: GeminiClothingClassifier | None = None,
        aggregator: ProductAggregator | None = None,
    ) -> None:
        self.config = config or ClosetConfig.from_env()
        configure_logging()

        self.classifier = classifier or GeminiClothingClassifier(
            api_key=self.config.gemini_api_key,
            model_name=self.config.gemini_model,
        )
        if aggregator is None:
            rakuten = RakutenClient(
                app_id=self.config.rakuten_app_id,
                timeout_seconds=self.config.request_timeout_seconds,
            )
            serpapi = SerpApiClient(
                api_key=self.config.serpapi_key,
                timeout_seconds=self.config.request_timeout_seconds,
            )
            aggregator = ProductAggregator(barcode_source=rakuten, text_sources=[serpapi, rakuten])
        self.aggregator = aggregator

    def health(self) -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=utc_timestamp(),
            services=self.config.configured_services(),
        )

    def analyze(self, image: str) -> AnalysisResult:
        """Classify one clothing photo; unparseable replies yield the fallback record."""

        with operation_context("app:analyze") as correlation_id:
            result = self.classifier.classify(strip_data_url_prefix(image))
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                method="analyze",
                correlation_id=correlation_id,
                category=result.category,
            )
            return result

    def search(self, query: str | None = None, barcode: str | None = None) -> AggregationResult:
        with operation_context("app:search") as correlation_id:
            result = self.aggregator.search(query=query, barcode=barcode)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                method="search",
                correlation_id=correlation_id,
                product_count=len(result.products),
            )
            return result


__all__ = ["ClosetBackend"]

"""Gemini-backed clothing photo classifier used to pre-fill the item form."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from typing import Any

import google.generativeai as genai
from pydantic import ValidationError

from models.analysis import AnalysisResult, fallback_analysis
from tools.observability import instrument_call

LOGGER = logging.getLogger(__name__)

CLASSIFIER_INSTRUCTION = """You are a fashion expert that analyzes clothing images.
Analyze the clothing item and return a JSON object with the following fields:
- category: One of "Top", "Bottom", "Outerwear", "Shoes", "Accessory", "Other"
- color: Primary color (e.g., "Black", "White", "Navy", "Blue", "Green", "Brown", "Beige", "Gray")
- season: One of "All", "Spring", "Summer", "Autumn", "Winter"
- description: Brief description of the item in Japanese (e.g., "ボーダー柄の長袖Tシャツ")
- brand_guess: Guessed brand name if recognizable, otherwise null

Respond ONLY with valid JSON, no additional text."""
USER_PROMPT = "Analyze this clothing item."
MAX_OUTPUT_TOKENS = 500

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")
_CODE_FENCE = re.compile(r"```json\n?|\n?```")


class InvalidImagePayloadError(ValueError):
    """Raised when the uploaded image is not valid base64."""


def strip_data_url_prefix(image: str) -> str:
    """Drop a ``data:image/<type>;base64,`` prefix if the client sent one."""

    return _DATA_URL_PREFIX.sub("", image)


def decode_image(base64_image: str) -> bytes:
    try:
        return base64.b64decode(base64_image, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImagePayloadError("Image must be base64 encoded") from exc


def parse_analysis(content: str) -> AnalysisResult:
    """Parse the classifier's reply, falling back to a fixed record on any failure."""

    try:
        payload = json.loads(_CODE_FENCE.sub("", content).strip())
        return AnalysisResult.model_validate(payload)
    except (ValueError, TypeError, ValidationError) as exc:
        LOGGER.warning("Unparseable classifier response, using fallback", extra={"error": str(exc)})
        return fallback_analysis()


class GeminiClothingClassifier:
    """Send a clothing photo to Gemini and read back structured attributes."""

    def __init__(self, api_key: str | None, model_name: str, model: Any | None = None) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=CLASSIFIER_INSTRUCTION,
            )
        return self._model

    def _response_text(self, response: Any) -> str:
        try:
            return response.text or "{}"
        except ValueError:
            # Blocked or empty candidates raise on ``.text``.
            return "{}"

    @instrument_call("gemini_classify_image")
    def classify(self, base64_image: str) -> AnalysisResult:
        image_bytes = decode_image(base64_image)
        response = self._get_model().generate_content(
            [{"mime_type": "image/jpeg", "data": image_bytes}, USER_PROMPT],
            generation_config={"max_output_tokens": MAX_OUTPUT_TOKENS},
        )
        return parse_analysis(self._response_text(response))


__all__ = [
    "CLASSIFIER_INSTRUCTION",
    "GeminiClothingClassifier",
    "InvalidImagePayloadError",
    "decode_image",
    "parse_analysis",
    "strip_data_url_prefix",
]

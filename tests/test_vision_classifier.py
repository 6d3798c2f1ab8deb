"""Classifier response parsing and Gemini request shape tests."""

from __future__ import annotations

import base64
from typing import Any, Dict, List

import pytest

from tools.vision_classifier import (
    GeminiClothingClassifier,
    InvalidImagePayloadError,
    parse_analysis,
    strip_data_url_prefix,
)

FALLBACK = {
    "category": "Other",
    "color": "Unknown",
    "season": "All",
    "description": "Unable to analyze",
    "brand_guess": None,
}
IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff fake jpeg").decode()


class FakeGeminiResponse:
    def __init__(self, text: str | None = None, blocked: bool = False) -> None:
        self._text = text
        self._blocked = blocked

    @property
    def text(self) -> str | None:
        if self._blocked:
            raise ValueError("response was blocked")
        return self._text


class FakeGeminiModel:
    def __init__(self, response: FakeGeminiResponse) -> None:
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, contents, generation_config=None):
        self.calls.append({"contents": contents, "generation_config": generation_config})
        return self.response


def test_parse_plain_json() -> None:
    result = parse_analysis(
        '{"category": "Top", "color": "Navy", "season": "Summer", '
        '"description": "ボーダー柄の長袖Tシャツ", "brand_guess": "UNIQLO"}'
    )
    assert result.category == "Top"
    assert result.brand_guess == "UNIQLO"


def test_parse_strips_markdown_fences() -> None:
    content = '```json\n{"category": "Shoes", "color": "White", "season": "All", "description": "スニーカー", "brand_guess": null}\n```'
    result = parse_analysis(content)
    assert result.category == "Shoes"
    assert result.brand_guess is None


@pytest.mark.parametrize(
    "content",
    [
        "I think this is a shirt.",
        "",
        "[1, 2, 3]",
        '{"category": "Top"}',
    ],
)
def test_unparseable_response_returns_fallback(content: str) -> None:
    assert parse_analysis(content).model_dump() == FALLBACK


def test_strip_data_url_prefix() -> None:
    assert strip_data_url_prefix("data:image/png;base64,AAAA") == "AAAA"
    assert strip_data_url_prefix("AAAA") == "AAAA"


def test_classify_sends_inline_image_and_prompt() -> None:
    model = FakeGeminiModel(
        FakeGeminiResponse(
            '{"category": "Bottom", "color": "Beige", "season": "Spring", "description": "チノパン", "brand_guess": null}'
        )
    )
    classifier = GeminiClothingClassifier(api_key=None, model_name="test-model", model=model)

    result = classifier.classify(IMAGE_B64)

    assert result.category == "Bottom"
    image_part, prompt = model.calls[0]["contents"]
    assert image_part == {"mime_type": "image/jpeg", "data": b"\xff\xd8\xff fake jpeg"}
    assert prompt == "Analyze this clothing item."
    assert model.calls[0]["generation_config"] == {"max_output_tokens": 500}


def test_classify_blocked_response_falls_back() -> None:
    model = FakeGeminiModel(FakeGeminiResponse(blocked=True))
    classifier = GeminiClothingClassifier(api_key=None, model_name="test-model", model=model)
    assert classifier.classify(IMAGE_B64).model_dump() == FALLBACK


def test_classify_rejects_invalid_base64() -> None:
    model = FakeGeminiModel(FakeGeminiResponse("{}"))
    classifier = GeminiClothingClassifier(api_key=None, model_name="test-model", model=model)
    with pytest.raises(InvalidImagePayloadError):
        classifier.classify("not base64!!")
    assert model.calls == []

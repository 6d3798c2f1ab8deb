"""Classifier output used to pre-fill the item form."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class AnalysisResult(BaseModel):
    """Structured attributes guessed from a clothing photo."""

    category: str
    color: str
    season: str
    description: str
    brand_guess: Optional[str] = None


def fallback_analysis() -> AnalysisResult:
    """Record returned whenever the classifier reply cannot be parsed."""

    return AnalysisResult(
        category="Other",
        color="Unknown",
        season="All",
        description="Unable to analyze",
        brand_guess=None,
    )


__all__ = ["AnalysisResult", "fallback_analysis"]

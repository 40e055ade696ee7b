"""Inference result models: the JSON contracts of the two remote services."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DiseaseInfo(BaseModel):
    emoji: str
    description: str
    severity: str
    treatment: str

    model_config = {"frozen": True}


class VerificationResult(BaseModel):
    is_grape_leaf: bool
    grape_probability: float = 0.0
    message: str = ""


class ClassificationResult(BaseModel):
    predicted_class: str
    confidence: float
    all_predictions: dict[str, float] = Field(default_factory=dict)
    disease_info: DiseaseInfo | None = None

    def has_confident_class(self, threshold: float) -> bool:
        """True when at least one class probability is strictly above ``threshold``."""
        return any(p > threshold for p in self.all_predictions.values())

"""Scoring package for AI crawler exposure."""

from worker.scoring.exposure import (
    ExposureEstimate,
    RiskScore,
    calculate_risk_score,
    estimate_exposure,
)

__all__ = [
    "ExposureEstimate",
    "RiskScore",
    "calculate_risk_score",
    "estimate_exposure",
]

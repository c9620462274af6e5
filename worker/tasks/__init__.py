"""Background task definitions."""

from worker.tasks.exposure import (
    ExposureReport,
    run_exposure_analysis,
    run_exposure_analysis_sync,
)

__all__ = [
    "ExposureReport",
    "run_exposure_analysis",
    "run_exposure_analysis_sync",
]

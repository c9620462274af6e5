"""AI crawler exposure analyzer endpoint."""

import structlog
from fastapi import APIRouter

from api.deps import RegistryDep, SettingsDep
from api.exceptions import ValidationError
from api.schemas.analyzer import AnalyzeRequest, AnalyzeResponse
from worker.tasks.exposure import run_exposure_analysis

router = APIRouter(prefix="/analyzer", tags=["Analyzer"])
logger = structlog.get_logger(__name__)


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="Estimate a site's exposure to AI crawlers",
)
async def analyze(
    body: AnalyzeRequest,
    settings: SettingsDep,
    registry: RegistryDep,
) -> AnalyzeResponse:
    """
    Audit robots.txt, sitemaps and the homepage of a site.

    Unreachable resources fall back to defaults, so any parseable URL gets a
    best-effort report.
    """
    try:
        report = await run_exposure_analysis(body.url, settings=settings, registry=registry)
    except ValueError as e:
        raise ValidationError(str(e), field="url") from e

    return AnalyzeResponse.model_validate(report.to_dict())

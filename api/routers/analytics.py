"""Site analytics endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query

from api.deps import SiteServiceDep
from api.exceptions import AuthenticationError
from api.schemas.analytics import AnalyticsResponse
from api.schemas.responses import SuccessResponse

router = APIRouter(tags=["Analytics"])


@router.get(
    "/analytics",
    response_model=SuccessResponse[AnalyticsResponse],
    summary="Request and revenue totals for a site",
)
async def get_analytics(
    site_service: SiteServiceDep,
    api_key: Annotated[str, Query(min_length=1, max_length=100)],
    days: Annotated[int, Query(ge=1, le=365)] = 30,
) -> SuccessResponse[AnalyticsResponse]:
    """Totals over the last ``days`` days for the site owning ``api_key``."""
    context = await site_service.get_site_by_api_key(api_key)
    if context is None:
        raise AuthenticationError()

    summary = await site_service.analytics_summary(context.site.id, days=days)
    return SuccessResponse(data=summary)

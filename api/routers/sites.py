"""Site registration endpoint."""

from fastapi import APIRouter, status

from api.deps import SiteServiceDep
from api.schemas.responses import SuccessResponse
from api.schemas.site import SiteRegister, SiteRegistered

router = APIRouter(prefix="/sites", tags=["Sites"])


@router.post(
    "/register",
    response_model=SuccessResponse[SiteRegistered],
    status_code=status.HTTP_201_CREATED,
    summary="Register a site and issue its API key",
)
async def register_site(
    site_in: SiteRegister,
    site_service: SiteServiceDep,
) -> SuccessResponse[SiteRegistered]:
    """
    Register a site.

    New sites start on the free tier with monetization disabled. Returns 409
    if the URL is already registered.
    """
    site = await site_service.register_site(
        site_url=site_in.site_url,
        site_name=site_in.site_name,
        admin_email=site_in.admin_email,
    )
    return SuccessResponse(data=SiteRegistered.model_validate(site))

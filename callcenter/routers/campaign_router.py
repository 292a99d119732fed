from typing import Optional

from fastapi import APIRouter, Depends, Query
from callcenter.services import campaign_service
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api", tags=["Campaigns"])


@router.get("/campaigns")
async def list_campaigns(principal: Principal = Depends(get_current_principal)):
    return await campaign_service.list_campaigns(principal.user_id)


@router.get("/campaigns/{campaign_id}")
async def get_campaign(campaign_id: str, principal: Principal = Depends(get_current_principal)):
    return await campaign_service.get_campaign(principal.user_id, campaign_id)


@router.get("/campaigns/{campaign_id}/stats")
async def get_stats(campaign_id: str, principal: Principal = Depends(get_current_principal)):
    return await campaign_service.get_campaign_stats(principal.user_id, campaign_id)


@router.get("/call-logs")
async def list_call_logs(
    campaign_id: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=campaign_service.MAX_CALL_LOG_PAGE),
    principal: Principal = Depends(get_current_principal)
):
    return await campaign_service.list_call_logs(
        principal.user_id,
        campaign_id=campaign_id,
        status=status,
        search=search,
        limit=limit
    )


@router.get("/dashboard/stats")
async def dashboard_stats(principal: Principal = Depends(get_current_principal)):
    return await campaign_service.get_dashboard_stats(principal.user_id)

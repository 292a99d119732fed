from typing import Optional

from fastapi import HTTPException

from callcenter.db.unit_of_work import UnitOfWork

MAX_CALL_LOG_PAGE = 500


async def list_campaigns(user_id: str):
    with UnitOfWork() as uow:
        campaigns = uow.campaigns.list_by_user(user_id)
    return {"campaigns": campaigns}


async def get_campaign(user_id: str, campaign_id: str):

    with UnitOfWork() as uow:
        campaign = uow.campaigns.get_by_id(campaign_id, user_id)

        if not campaign:
            raise HTTPException(status_code=404, detail="Campaign not found")

        call_logs = uow.call_logs.get_by_campaign(campaign_id)

    prompt = {
        "prompt_name": campaign.pop("prompt_name"),
        "first_message": campaign.pop("first_message"),
        "system_prompt": campaign.pop("system_prompt"),
    }
    return {
        "campaign": campaign,
        "prompt": prompt if prompt["prompt_name"] is not None else None,
        "call_logs": call_logs
    }


async def get_campaign_stats(user_id: str, campaign_id: str):

    with UnitOfWork() as uow:
        campaign = uow.campaigns.get_by_id(campaign_id, user_id)

        if not campaign:
            raise HTTPException(status_code=404, detail="Campaign not found")

        stats = uow.call_logs.get_campaign_stats(campaign_id)

    stats.update({
        "status": campaign["status"],
        "total_numbers": campaign["total_numbers"],
        "successful_calls": campaign["successful_calls"],
        "failed_calls": campaign["failed_calls"],
        "closed_calls": campaign["closed_calls"],
        "not_closed_calls": campaign["not_closed_calls"],
    })
    return stats


async def list_call_logs(
    user_id: str,
    campaign_id: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100
):
    limit = max(1, min(limit, MAX_CALL_LOG_PAGE))

    with UnitOfWork() as uow:
        call_logs = uow.call_logs.list_by_user(
            user_id,
            campaign_id=campaign_id,
            status=status,
            search=search,
            limit=limit
        )
    return {"call_logs": call_logs}


async def get_dashboard_stats(user_id: str):
    with UnitOfWork() as uow:
        total_campaigns = uow.campaigns.count_by_user(user_id)
        calls = uow.call_logs.get_user_stats(user_id)

    total_calls = calls["total"]
    conversion_rate = (calls["success"] / total_calls * 100) if total_calls else 0.0

    return {
        "totalCampaigns": total_campaigns,
        "totalCalls": total_calls,
        "successfulCalls": calls["success"],
        "failedCalls": calls["failed"],
        "conversionRate": round(conversion_rate, 1),
        "averageDuration": round(calls["average_duration"], 1),
    }

from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, List

from chatapp.api.deps import get_session_id, get_repo, get_usage_recorder, log_error
from chatapp.services import usage as rollups
from chatapp.services.repository import ConversationRepository
from chatapp.services.usage import UsageRecorder
from chatapp.models.domain import DailyUsage, UsageStat, UsageTotals

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("", response_model=List[UsageStat])
async def list_usage(
    session_id: str = Depends(get_session_id),
    recorder: UsageRecorder = Depends(get_usage_recorder),
):
    """Raw usage rows in the order they were recorded."""
    try:
        return recorder.list(session_id)
    except Exception as e:
        log_error("Error fetching analytics", e)
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")


@router.get("/totals", response_model=UsageTotals)
async def usage_totals(
    session_id: str = Depends(get_session_id),
    recorder: UsageRecorder = Depends(get_usage_recorder),
    repo: ConversationRepository = Depends(get_repo),
):
    try:
        return rollups.totals(recorder.list(session_id), repo.count_conversations(session_id))
    except Exception as e:
        log_error("Error fetching totals", e)
        raise HTTPException(status_code=500, detail="Failed to fetch totals")


@router.get("/daily", response_model=List[DailyUsage])
async def usage_by_day(
    session_id: str = Depends(get_session_id),
    recorder: UsageRecorder = Depends(get_usage_recorder),
):
    return rollups.daily(recorder.list(session_id))


@router.get("/models", response_model=Dict[str, int])
async def usage_by_model(
    session_id: str = Depends(get_session_id),
    recorder: UsageRecorder = Depends(get_usage_recorder),
):
    return rollups.per_model(recorder.list(session_id))

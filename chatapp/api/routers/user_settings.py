from fastapi import APIRouter, Depends, HTTPException

from chatapp.api.deps import get_session_id, get_repo, log_error
from chatapp.services.repository import ConversationRepository
from chatapp.models.domain import UserSettings, SettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=UserSettings)
async def get_user_settings(
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Returns the session's preferences, provisioning defaults on first use."""
    try:
        return repo.get_settings(session_id)
    except Exception as e:
        log_error("Error fetching settings", e)
        raise HTTPException(status_code=500, detail="Failed to fetch settings")


@router.patch("", response_model=UserSettings)
async def update_user_settings(
    body: SettingsUpdate,
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    try:
        return repo.update_settings(session_id, body.changes())
    except Exception as e:
        log_error("Error updating settings", e)
        raise HTTPException(status_code=500, detail="Failed to update settings")

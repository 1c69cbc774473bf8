from fastapi import APIRouter, Depends, HTTPException, status, Path

from chatapp.api.deps import get_session_id, get_repo, log_error
from chatapp.services.repository import ConversationRepository
from chatapp.models.domain import Message, MessageUpdate

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/{message_id}", response_model=Message)
async def get_message(
    message_id: str = Path(..., title="The ID of the message"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    message = repo.get_message(session_id, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


@router.patch("/{message_id}", response_model=Message)
async def update_message(
    body: MessageUpdate,
    message_id: str = Path(..., title="The ID of the message"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Edits a message or toggles its reactions / bookmark."""
    try:
        message = repo.update_message(session_id, message_id, body.changes())
    except Exception as e:
        log_error(f"Error updating message {message_id}", e)
        raise HTTPException(status_code=500, detail="Failed to update message")

    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


@router.delete("/{message_id}")
async def delete_message(
    message_id: str = Path(..., title="The ID of the message to delete"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    if not repo.delete_message(session_id, message_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return {"message": "Message deleted successfully"}

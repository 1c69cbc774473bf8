import logging
from fastapi import APIRouter, Depends, HTTPException, status, Path
from typing import List

from chatapp.api.deps import get_session_id, get_repo, get_chat_service, log_error
from chatapp.services.repository import ConversationRepository
from chatapp.services.chat import ChatService
from chatapp.services.errors import InvalidRequest, NotFound, StoreFault
from chatapp.models.domain import Conversation, ConversationUpdate, Message
from chatapp.models.api_io import CreateConversationRequest, SendMessageRequest, SendMessageResponse

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=List[Conversation])
async def list_conversations(
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Retrieves the session's conversations, most recently active first."""
    try:
        return repo.list_conversations(session_id)
    except Exception as e:
        log_error("Error fetching conversations", e)
        raise HTTPException(status_code=500, detail="Failed to fetch conversations")


@router.post("", response_model=Conversation, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: CreateConversationRequest,
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Creates a new, empty conversation."""
    try:
        return repo.create_conversation(session_id, title=body.title, model=body.model)
    except Exception as e:
        log_error("Error creating conversation", e)
        raise HTTPException(status_code=500, detail="Failed to create conversation")


@router.get("/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: str = Path(..., title="The ID of the conversation"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    conversation = repo.get_conversation(session_id, conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


@router.patch("/{conversation_id}", response_model=Conversation)
async def update_conversation(
    body: ConversationUpdate,
    conversation_id: str = Path(..., title="The ID of the conversation"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Renames a conversation or switches its model."""
    updates = body.changes()
    if "title" in updates:
        updates["title"] = updates["title"].strip()
        if not updates["title"]:
            raise HTTPException(status_code=400, detail="Title cannot be empty")

    conversation = repo.update_conversation(session_id, conversation_id, updates)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: str = Path(..., title="The ID of the conversation to delete"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Deletes a conversation and all its messages."""
    try:
        deleted = repo.delete_conversation(session_id, conversation_id)
    except Exception as e:
        log_error(f"Error deleting conversation {conversation_id}", e)
        raise HTTPException(status_code=500, detail="Failed to delete conversation")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return {"message": "Conversation deleted successfully"}


@router.get("/{conversation_id}/messages", response_model=List[Message])
async def list_messages(
    conversation_id: str = Path(..., title="The ID of the conversation"),
    session_id: str = Depends(get_session_id),
    repo: ConversationRepository = Depends(get_repo),
):
    """Retrieves all messages of a conversation in chronological order."""
    try:
        return repo.list_messages(session_id, conversation_id)
    except Exception as e:
        log_error(f"Error fetching messages for conversation {conversation_id}", e)
        raise HTTPException(status_code=500, detail="Failed to fetch messages")


@router.post(
    "/{conversation_id}/messages",
    response_model=SendMessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    body: SendMessageRequest,
    conversation_id: str = Path(..., title="The ID of the conversation"),
    session_id: str = Depends(get_session_id),
    chat: ChatService = Depends(get_chat_service),
):
    """
    Saves the user's message, titles the conversation on its first user
    message, generates the assistant reply and records usage. An AI failure
    still returns 201 with the saved user message and an ``error`` field.
    """
    try:
        return await chat.send_message(session_id, conversation_id, body.content)
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    except StoreFault as e:
        log_error(f"Message creation error for conversation {conversation_id}", e)
        raise HTTPException(status_code=500, detail="Failed to create message")
    except Exception as e:
        logging.error(f"Error processing message for conversation {conversation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create message")

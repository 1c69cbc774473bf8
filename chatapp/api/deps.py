import json
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from chatapp.config import Settings
from chatapp.services.chat import ChatService
from chatapp.services.llm_service import LLMService
from chatapp.services.repository import ConversationRepository
from chatapp.services.session_store import SessionStore
from chatapp.services.usage import UsageRecorder

SESSION_HEADER = "X-Session-Id"
SESSION_FIELD = "sessionId"


# --- Simplified Logging Utility ---
def log_error(message: str, exception: Exception = None):
    """Centralized error logging."""
    if exception:
        logging.error(f"{message}: {exception}", exc_info=True)
    else:
        logging.error(message)


# --- Session Resolution ---
async def _session_from_body(request: Request) -> Optional[str]:
    body = await request.body()
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(payload, dict) and payload.get(SESSION_FIELD):
        return str(payload[SESSION_FIELD])
    return None


async def get_session_id(request: Request) -> str:
    """
    Resolves the opaque session identifier from the header, the query string
    or the JSON body, in that order. Raises HTTPException when absent.
    """
    session_id = (
        request.headers.get(SESSION_HEADER)
        or request.query_params.get(SESSION_FIELD)
        or await _session_from_body(request)
    )
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing sessionId",
        )
    return str(session_id)


# --- Application State Dependencies ---
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_llm_service(request: Request) -> LLMService:
    return request.app.state.llm


def get_repo(
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> ConversationRepository:
    """Provides a ConversationRepository over the application's session store."""
    return ConversationRepository(store, default_model=settings.default_model)


def get_usage_recorder(store: SessionStore = Depends(get_store)) -> UsageRecorder:
    return UsageRecorder(store)


def get_chat_service(
    repo: ConversationRepository = Depends(get_repo),
    usage: UsageRecorder = Depends(get_usage_recorder),
    llm: LLMService = Depends(get_llm_service),
) -> ChatService:
    return ChatService(repo=repo, usage=usage, llm=llm)

import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from chatapp.api.deps import get_chat_service
from chatapp.services.chat import ChatService
from chatapp.services.errors import UpstreamGenerationFailure
from chatapp.models.api_io import CompareRequest, CompareResponse
from chatapp.models.domain import GEMINI_MODELS, ModelInfo

router = APIRouter(tags=["models"])


@router.post("/compare", response_model=CompareResponse, response_model_exclude_none=True)
async def compare_models(body: CompareRequest, chat: ChatService = Depends(get_chat_service)):
    """Sends one message to each requested model. Stateless: no session, no persistence."""
    try:
        results = await chat.compare(body.message, body.target_models())
        return CompareResponse(results=results)
    except UpstreamGenerationFailure as e:
        logging.error(f"Error in chat compare: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate comparison response")
    except Exception as e:
        logging.error(f"Error in chat compare: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate comparison response")


@router.get("/models", response_model=List[ModelInfo])
async def list_models():
    """Catalog of the Gemini variants a conversation can use."""
    return GEMINI_MODELS

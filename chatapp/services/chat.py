"""Chat service – the send-message sequence over the session store + Gemini calls."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from ..models.api_io import CompareResult, SendMessageResponse
from ..models.domain import Conversation, Message
from .errors import InvalidRequest, NotFound, StoreFault, UpstreamGenerationFailure
from .llm_service import LLMService
from .repository import ConversationRepository
from .usage import UsageRecorder

logger = logging.getLogger(__name__)

AI_FAILURE_MESSAGE = "Failed to generate AI response. Please try again."
CONVERSATION_GONE_MESSAGE = "The conversation was removed before the AI response could be saved."


class ChatService:
    """Sequences persistence, title generation, AI reply and usage recording.

    The flow is forward-only: nothing persisted by an earlier step is rolled
    back when a later step fails.
    """

    def __init__(self, repo: ConversationRepository, usage: UsageRecorder, llm: LLMService):
        self.repo = repo
        self.usage = usage
        self.llm = llm

    # ─────────────────────────── Send message ───────────────────────────
    async def send_message(self, session_id: str, conversation_id: str, content: str) -> SendMessageResponse:
        if not session_id:
            raise InvalidRequest("Missing sessionId")
        if not content or not content.strip():
            raise InvalidRequest("Message content is required")

        conversation = self.repo.get_conversation(session_id, conversation_id)
        if conversation is None:
            raise NotFound(f"Conversation {conversation_id} not found")

        try:
            user_message = self.repo.create_message(session_id, conversation_id, "user", content)
            self.repo.touch_conversation(session_id, conversation_id)
            # No await between persisting and counting, so concurrent first
            # messages on one event loop cannot both see a count of 1.
            user_count = sum(
                1 for m in self.repo.list_messages(session_id, conversation_id) if m.role == "user"
            )
        except Exception as exc:
            raise StoreFault(f"Failed to store message: {exc}") from exc

        # The user's message is saved; finish the rest even if the client goes away.
        return await asyncio.shield(
            self._complete(session_id, conversation, user_message, first=user_count == 1)
        )

    async def _complete(
        self, session_id: str, conversation: Conversation, user_message: Message, first: bool
    ) -> SendMessageResponse:
        if first:
            await self._generate_title(session_id, conversation, user_message.content)

        try:
            result = await self.llm.generate(user_message.content, conversation.model)
        except Exception as exc:
            logger.error("AI response generation error for conversation %s: %s", conversation.id, exc)
            return SendMessageResponse(user_message=user_message, error=AI_FAILURE_MESSAGE)

        # The session may have been evicted or the conversation deleted during the call.
        if not self.repo.has_conversation(session_id, conversation.id):
            logger.warning("Conversation %s vanished before its reply was stored", conversation.id)
            return SendMessageResponse(user_message=user_message, error=CONVERSATION_GONE_MESSAGE)

        assistant_message = self.repo.create_message(
            session_id,
            conversation.id,
            "assistant",
            result.text,
            tokens=result.tokens_used,
            response_time=result.response_time_ms,
        )
        self.repo.touch_conversation(session_id, conversation.id)
        self.usage.record(
            session_id,
            messages_exchanged=1,
            tokens_used=result.tokens_used,
            average_response_time=result.response_time_ms,
            models_used={conversation.model: 1},
        )
        return SendMessageResponse(user_message=user_message, assistant_message=assistant_message)

    async def _generate_title(self, session_id: str, conversation: Conversation, content: str) -> None:
        """Best effort; failures are logged and never reach the caller."""
        try:
            title = await self.llm.generate_title(content, conversation.model)
            if not self.repo.has_conversation(session_id, conversation.id):
                return
            self.repo.update_conversation(session_id, conversation.id, {"title": title})
            logger.info("Updated title for conversation %s to '%s'", conversation.id, title)
        except Exception as exc:
            logger.warning("Error generating/updating title for conversation %s: %s", conversation.id, exc)

    # ─────────────────────────── Model comparison ───────────────────────────
    async def compare(self, message: str, models: List[str]) -> List[CompareResult]:
        """Asks every model the same question; nothing is persisted."""
        outcomes = await asyncio.gather(
            *(self.llm.generate(message, model) for model in models), return_exceptions=True
        )

        results = []
        for model, outcome in zip(models, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("Comparison call failed for %s: %s", model, outcome)
                results.append(CompareResult(model=model, error=str(outcome)))
                continue
            results.append(
                CompareResult(
                    model=model,
                    response=outcome.text,
                    response_time=outcome.response_time_ms,
                    tokens=outcome.tokens_used,
                )
            )

        if all(r.error for r in results):
            raise UpstreamGenerationFailure("Failed to generate comparison response")
        return results

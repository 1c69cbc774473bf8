"""Session-scoped CRUD over conversations, messages and user settings."""

import datetime as _dt
import logging
from typing import Any, Dict, List, Optional

from ..models.domain import Conversation, Message, UserSettings
from .session_store import SessionBundle, SessionStore

_DEFAULT_MODEL = "gemini-1.5-flash"


def _now() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


def _advance(previous: Optional[_dt.datetime]) -> _dt.datetime:
    """Current time, never earlier than *previous*."""
    now = _now()
    if previous is not None and previous > now:
        return previous
    return now


class ConversationRepository:
    """Session-scoped CRUD over conversations, messages and settings."""

    def __init__(self, store: SessionStore, default_model: str = _DEFAULT_MODEL) -> None:
        self.store = store
        self.default_model = default_model

    def _bundle(self, session_id: str) -> SessionBundle:
        return self.store.get_or_create(session_id)

    # --------------------------------------------------------------------- #
    # Conversations
    # --------------------------------------------------------------------- #
    def list_conversations(self, session_id: str) -> List[Conversation]:
        """Lists the session's conversations, most recently active first."""
        bundle = self._bundle(session_id)
        with bundle.lock:
            conversations = list(bundle.conversations.values())
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    def get_conversation(self, session_id: str, conversation_id: str) -> Optional[Conversation]:
        bundle = self._bundle(session_id)
        with bundle.lock:
            return bundle.conversations.get(conversation_id)

    def has_conversation(self, session_id: str, conversation_id: str) -> bool:
        """Existence check that never provisions an evicted or unknown session."""
        bundle = self.store.get(session_id)
        if bundle is None:
            return False
        with bundle.lock:
            return conversation_id in bundle.conversations

    def count_conversations(self, session_id: str) -> int:
        bundle = self._bundle(session_id)
        with bundle.lock:
            return len(bundle.conversations)

    def create_conversation(self, session_id: str, title: str, model: Optional[str] = None) -> Conversation:
        bundle = self._bundle(session_id)
        now = _now()
        conversation = Conversation(
            session_id=session_id,
            title=title,
            model=model or self.default_model,
            created_at=now,
            updated_at=now,
        )
        with bundle.lock:
            bundle.conversations[conversation.id] = conversation
        logging.info(f"Created conversation {conversation.id} in session {session_id}")
        return conversation

    def update_conversation(
        self, session_id: str, conversation_id: str, updates: Optional[Dict[str, Any]] = None
    ) -> Optional[Conversation]:
        """Merges *updates* and always refreshes ``updated_at``."""
        bundle = self._bundle(session_id)
        with bundle.lock:
            conversation = bundle.conversations.get(conversation_id)
            if conversation is None:
                return None
            payload = dict(updates or {})
            payload["updated_at"] = _advance(conversation.updated_at)
            updated = conversation.model_copy(update=payload)
            bundle.conversations[conversation_id] = updated
            return updated

    def touch_conversation(self, session_id: str, conversation_id: str) -> Optional[Conversation]:
        return self.update_conversation(session_id, conversation_id)

    def delete_conversation(self, session_id: str, conversation_id: str) -> bool:
        """Deletes a conversation and, first, every message that belongs to it."""
        bundle = self._bundle(session_id)
        with bundle.lock:
            if conversation_id not in bundle.conversations:
                return False
            doomed = [m.id for m in bundle.messages.values() if m.conversation_id == conversation_id]
            for message_id in doomed:
                del bundle.messages[message_id]
            del bundle.conversations[conversation_id]
        logging.info(f"Deleted conversation {conversation_id} and {len(doomed)} messages.")
        return True

    # --------------------------------------------------------------------- #
    # Messages
    # --------------------------------------------------------------------- #
    def list_messages(self, session_id: str, conversation_id: str) -> List[Message]:
        """Messages of a conversation ordered by timestamp; empty when none match."""
        bundle = self._bundle(session_id)
        with bundle.lock:
            messages = [m for m in bundle.messages.values() if m.conversation_id == conversation_id]
        return sorted(messages, key=lambda m: m.timestamp)

    def get_message(self, session_id: str, message_id: str) -> Optional[Message]:
        bundle = self._bundle(session_id)
        with bundle.lock:
            return bundle.messages.get(message_id)

    def create_message(
        self,
        session_id: str,
        conversation_id: str,
        role: str,
        content: str,
        tokens: Optional[int] = None,
        response_time: Optional[int] = None,
    ) -> Message:
        """Pure insert; the caller has already checked the parent conversation."""
        bundle = self._bundle(session_id)
        message = Message(
            conversation_id=conversation_id,
            session_id=session_id,
            role=role,
            content=content,
            timestamp=_now(),
            tokens=tokens,
            response_time=response_time,
        )
        with bundle.lock:
            bundle.messages[message.id] = message
        return message

    def update_message(
        self, session_id: str, message_id: str, updates: Dict[str, Any]
    ) -> Optional[Message]:
        bundle = self._bundle(session_id)
        with bundle.lock:
            message = bundle.messages.get(message_id)
            if message is None:
                return None
            payload = dict(updates)
            # role and conversation are fixed at creation
            for frozen in ("id", "role", "conversation_id", "session_id", "timestamp"):
                payload.pop(frozen, None)
            payload["updated_at"] = _advance(message.updated_at)
            updated = message.model_copy(update=payload)
            bundle.messages[message_id] = updated
            return updated

    def delete_message(self, session_id: str, message_id: str) -> bool:
        bundle = self._bundle(session_id)
        with bundle.lock:
            return bundle.messages.pop(message_id, None) is not None

    # --------------------------------------------------------------------- #
    # User settings
    # --------------------------------------------------------------------- #
    def get_settings(self, session_id: str) -> UserSettings:
        bundle = self._bundle(session_id)
        with bundle.lock:
            return bundle.settings

    def update_settings(self, session_id: str, updates: Dict[str, Any]) -> UserSettings:
        bundle = self._bundle(session_id)
        with bundle.lock:
            payload = {k: v for k, v in updates.items() if k not in ("id", "created_at")}
            payload["updated_at"] = _advance(bundle.settings.updated_at)
            bundle.settings = bundle.settings.model_copy(update=payload)
            return bundle.settings

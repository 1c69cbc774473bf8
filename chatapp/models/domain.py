from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal, Dict
import datetime
import uuid


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class _UpdateCommand(CamelModel):
    """Partial update; only explicitly listed fields may be patched."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"

    # session transport, never patched onto the entity
    session_id: Optional[str] = None

    def changes(self) -> Dict:
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude={"session_id"})


# --- Conversations ---
class Conversation(CamelModel):
    id: str = Field(default_factory=_new_id)
    session_id: str
    title: str
    model: str
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)


class ConversationUpdate(_UpdateCommand):
    title: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)


# --- Messages ---
class Message(CamelModel):
    id: str = Field(default_factory=_new_id)
    conversation_id: str
    session_id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime.datetime = Field(default_factory=_now)
    updated_at: Optional[datetime.datetime] = None
    tokens: Optional[int] = None
    response_time: Optional[int] = None
    is_edited: Optional[bool] = None
    reactions: Optional[List[str]] = None
    is_bookmarked: Optional[bool] = None


class MessageUpdate(_UpdateCommand):
    content: Optional[str] = Field(default=None, min_length=1)
    is_edited: Optional[bool] = None
    reactions: Optional[List[str]] = None
    is_bookmarked: Optional[bool] = None


# --- User settings ---
class UserSettings(CamelModel):
    id: str = Field(default_factory=_new_id)
    theme: str = "dark-gray"
    font_size: str = "medium"
    typing_speed: str = "normal"
    auto_save: bool = True
    show_timestamps: bool = True
    sound_enabled: bool = False
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)


class SettingsUpdate(_UpdateCommand):
    theme: Optional[str] = None
    font_size: Optional[str] = None
    typing_speed: Optional[str] = None
    auto_save: Optional[bool] = None
    show_timestamps: Optional[bool] = None
    sound_enabled: Optional[bool] = None


# --- Usage analytics ---
class UsageStat(CamelModel):
    id: str = Field(default_factory=_new_id)
    date: datetime.datetime = Field(default_factory=_now)
    conversations_created: int = 0
    messages_exchanged: int = 0
    tokens_used: int = 0
    average_response_time: int = 0
    models_used: Dict[str, int] = Field(default_factory=dict)


class UsageTotals(CamelModel):
    total_tokens: int
    total_messages: int
    total_conversations: int
    average_response_time: float


class DailyUsage(CamelModel):
    date: datetime.date
    conversations_created: int = 0
    messages_exchanged: int = 0
    tokens_used: int = 0
    average_response_time: float = 0.0
    models_used: Dict[str, int] = Field(default_factory=dict)


# --- Uploads ---
class FileMetadata(CamelModel):
    size: int
    mime_type: str
    language: Optional[str] = None
    lines: Optional[int] = None


class FileAnalysis(CamelModel):
    type: Literal["image", "text", "code", "document"]
    content: Optional[str] = None
    metadata: FileMetadata


# --- Model catalog ---
class ModelInfo(CamelModel):
    id: str
    name: str
    description: str
    speed: str
    capabilities: List[str]


GEMINI_MODELS: List[ModelInfo] = [
    ModelInfo(
        id="gemini-1.5-flash",
        name="Gemini 1.5 Flash",
        description="Fast responses, great for general tasks",
        speed="Fast",
        capabilities=["Text", "Code", "Math"],
    ),
    ModelInfo(
        id="gemini-2.0-flash-exp",
        name="Gemini 2.0 Flash",
        description="Latest model with enhanced capabilities",
        speed="Fast",
        capabilities=["Text", "Code", "Math", "Reasoning"],
    ),
    ModelInfo(
        id="gemini-2.5-flash",
        name="Gemini 2.5 Flash",
        description="Advanced model with thinking capabilities",
        speed="Fast",
        capabilities=["Text", "Code", "Math", "Reasoning", "Thinking"],
    ),
]

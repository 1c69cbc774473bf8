from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional

from .domain import FileAnalysis, Message, CamelModel


class CreateConversationRequest(CamelModel):
    title: str = Field(..., min_length=1)
    model: Optional[str] = None
    session_id: Optional[str] = None


class SendMessageRequest(CamelModel):
    role: Literal["user"] = "user"
    content: str = Field(..., min_length=1)
    session_id: Optional[str] = None


class SendMessageResponse(CamelModel):
    user_message: Message
    assistant_message: Optional[Message] = None
    error: Optional[str] = None


class CompareRequest(BaseModel):
    message: str = Field(..., min_length=1)
    model: Optional[str] = None
    models: List[str] = []

    @model_validator(mode="after")
    def require_model(self):
        if not self.model and not self.models:
            raise ValueError("At least one model is required")
        return self

    def target_models(self) -> List[str]:
        targets = list(self.models)
        if self.model and self.model not in targets:
            targets.insert(0, self.model)
        return targets


class CompareResult(CamelModel):
    model: str
    response: Optional[str] = None
    response_time: Optional[int] = None
    tokens: Optional[int] = None
    error: Optional[str] = None


class CompareResponse(BaseModel):
    results: List[CompareResult]


class UploadResponse(CamelModel):
    url: str
    filename: str
    original_name: str
    size: int
    type: str
    analysis: FileAnalysis

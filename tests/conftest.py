import pytest
from fastapi.testclient import TestClient

from chatapp.api.main import create_app
from chatapp.config import Settings
from chatapp.services.chat import ChatService
from chatapp.services.errors import UpstreamGenerationFailure
from chatapp.services.llm_service import GenerationResult
from chatapp.services.repository import ConversationRepository
from chatapp.services.session_store import SessionStore
from chatapp.services.usage import UsageRecorder


class FakeLLM:
    """Stands in for LLMService; records calls and can be told to fail."""

    def __init__(self, text="hi", tokens=1, response_time_ms=50, title="Friendly Greeting"):
        self.text = text
        self.tokens = tokens
        self.response_time_ms = response_time_ms
        self.title = title
        self.fail_generate = False
        self.fail_title = False
        self.failing_models = set()
        self.generate_calls = []
        self.title_calls = []

    async def generate(self, prompt, model=None):
        self.generate_calls.append((prompt, model))
        if self.fail_generate or model in self.failing_models:
            raise UpstreamGenerationFailure("quota exhausted")
        return GenerationResult(
            text=self.text, tokens_used=self.tokens, response_time_ms=self.response_time_ms
        )

    async def generate_title(self, first_message, model=None):
        self.title_calls.append((first_message, model))
        if self.fail_title:
            raise UpstreamGenerationFailure("title failed")
        return self.title


@pytest.fixture
def settings(tmp_path):
    return Settings(api_prefix="/api", gemini_api_key="test-key", upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def repo(store):
    return ConversationRepository(store)


@pytest.fixture
def recorder(store):
    return UsageRecorder(store)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def chat(repo, recorder, llm):
    return ChatService(repo=repo, usage=recorder, llm=llm)


@pytest.fixture
def client(settings, store, llm):
    app = create_app(settings=settings, store=store, llm=llm)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def headers():
    return {"X-Session-Id": "session-a"}

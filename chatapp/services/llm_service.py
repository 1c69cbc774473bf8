import logging
import time
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import types              # pydantic config classes

from ..config import Settings, get_settings
from .errors import UpstreamGenerationFailure

_FALLBACK_REPLY = "I apologize, but I couldn't generate a response at this time."
_DEFAULT_TITLE = "New Conversation"


@dataclass
class GenerationResult:
    text: str
    tokens_used: int
    response_time_ms: int


class LLMService:
    """Wrapper around the Google Gen AI SDK (chat replies + conversation titles).

    Calls go out with the primary API key; after a failure the client is
    rebuilt once with the backup key before giving up.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        s = settings or get_settings()
        self.api_key = s.gemini_api_key
        self.backup_api_key = s.gemini_backup_api_key
        self.default_model = s.default_model
        self.instruction = s.system_instruction
        self.max_output_tokens = s.max_output_tokens
        self.max_title_length = s.max_chat_title_length
        self._client: Optional[genai.Client] = None

    # One client per key, built on first use
    @property
    def client(self) -> genai.Client:
        if self._client is None:
            logging.info("Initialising Google Gen AI client …")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _fall_back(self) -> bool:
        if not self.backup_api_key or self.backup_api_key == self.api_key:
            return False
        logging.warning("Switching Gen AI client to the backup API key")
        self.api_key = self.backup_api_key
        self._client = genai.Client(api_key=self.api_key)
        return True

    async def _generate_content(self, prompt: str, model: str):
        cfg = types.GenerateContentConfig(max_output_tokens=self.max_output_tokens)
        key_used = self.api_key
        try:
            return await self.client.aio.models.generate_content(
                model=model, contents=prompt, config=cfg
            )
        except Exception as exc:
            logging.error("Gen AI error (%s): %s", model, exc)
            # A concurrent call may already have switched keys while this one waited.
            if self.api_key == key_used and not self._fall_back():
                raise UpstreamGenerationFailure(f"Failed to generate AI response: {exc}") from exc

        try:
            return await self.client.aio.models.generate_content(
                model=model, contents=prompt, config=cfg
            )
        except Exception as exc:
            logging.error("Gen AI error with backup key (%s): %s", model, exc)
            raise UpstreamGenerationFailure(f"Failed to generate AI response: {exc}") from exc

    # ---------- chat replies --------------------------------------------------
    async def generate(self, prompt: str, model: Optional[str] = None) -> GenerationResult:
        model = model or self.default_model
        full_prompt = f"{self.instruction}\nUser: {prompt}"

        started = time.perf_counter()
        resp = await self._generate_content(full_prompt, model)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        text = (getattr(resp, "text", None) or "").strip()
        if not text:
            logging.warning("Empty or filtered response: %s", resp)
            text = _FALLBACK_REPLY

        usage = getattr(resp, "usage_metadata", None)
        tokens = getattr(usage, "total_token_count", None) if usage else None
        if not tokens:
            tokens = len(text.split())

        return GenerationResult(text=text, tokens_used=tokens, response_time_ms=elapsed_ms)

    # ---------- conversation titles -------------------------------------------
    async def generate_title(self, first_message: str, model: Optional[str] = None) -> str:
        prompt = (
            "Generate a short, descriptive title (max 6 words) for a conversation "
            f'that starts with: "{first_message}". Only return the title, nothing else.'
        )
        resp = await self._generate_content(prompt, model or self.default_model)
        return shorten_title(getattr(resp, "text", None) or "", self.max_title_length)


def shorten_title(raw: str, max_len: int = 50) -> str:
    title = raw.strip().strip('"\'').strip() or _DEFAULT_TITLE
    if len(title) > max_len:
        return title[: max_len - 3] + "..."
    return title

import asyncio, json
from typing import Protocol

import google.generativeai as genai
from fastapi import Request
from loguru import logger

from ..errors import EmptyResponseError, ExternalApiError
from ..settings import Settings

class QuizLLM(Protocol):
    model_name: str

    async def generate(self, prompt: str) -> str: ...


class GeminiClient:
    """Single long-lived handle on the Gemini API. One call per `generate`, no retries."""

    def __init__(self, api_key: str | None, model_name: str, timeout: float = 60.0):
        genai.configure(api_key=api_key or "")
        self.model_name = model_name
        self.timeout = timeout
        self._model = genai.GenerativeModel(model_name)

    async def generate(self, prompt: str) -> str:
        try:
            resp = await asyncio.wait_for(
                self._model.generate_content_async(prompt), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ExternalApiError(f"{self.model_name} timed out after {self.timeout}s") from e
        except Exception as e:
            raise ExternalApiError(f"{self.model_name} call failed: {e}") from e

        try:
            text = resp.text
        except ValueError as e:
            # no candidates / parts (e.g. blocked prompt)
            raise EmptyResponseError(f"{self.model_name} returned no text: {e}") from e
        if not text or not text.strip():
            raise EmptyResponseError(f"{self.model_name} returned no text")
        return text


_MOCK_QUESTIONS = [
    {"question": "Which planet is closest to the Sun?",
     "options": ["A: Venus", "B: Mercury", "C: Earth", "D: Mars"], "answer": "B"},
    {"question": "What is the chemical symbol for water?",
     "options": ["A: H2O", "B: O2", "C: CO2", "D: NaCl"], "answer": "A"},
    {"question": "How many sides does a hexagon have?",
     "options": ["A: Five", "B: Seven", "C: Six", "D: Eight"], "answer": "C"},
    {"question": "Which layer handles routing on the Internet?",
     "options": ["A: Physical", "B: Data Link", "C: Transport", "D: Network"], "answer": "D"},
    {"question": "Who wrote 'Hamlet'?",
     "options": ["A: William Shakespeare", "B: Charles Dickens", "C: Jane Austen", "D: Mark Twain"],
     "answer": "A"},
]

class MockQuizClient:
    """Offline stand-in used when MOCK_MODE is on. Wraps its answer in a fence like the real model often does."""

    model_name = "mock"

    async def generate(self, prompt: str) -> str:
        return "```json\n" + json.dumps(_MOCK_QUESTIONS, indent=2) + "\n```"


def build_llm(settings: Settings) -> QuizLLM:
    if settings.MOCK_MODE:
        logger.info("[llm] MOCK_MODE on, using canned quiz")
        return MockQuizClient()
    if not settings.GOOGLE_API_KEY:
        logger.warning("[llm] GOOGLE_API_KEY is not set; provider calls will fail authentication")
    logger.info(f"[llm] Gemini client ready (model={settings.GEMINI_MODEL})")
    return GeminiClient(
        api_key=settings.GOOGLE_API_KEY,
        model_name=settings.GEMINI_MODEL,
        timeout=settings.GENERATION_TIMEOUT,
    )

def get_llm(request: Request) -> QuizLLM:
    return request.app.state.llm

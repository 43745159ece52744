import json
import os

# keep the app's own client offline; tests inject their own stub anyway
os.environ.setdefault("MOCK_MODE", "1")

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from topicquiz.main import app
from topicquiz.services.llm import get_llm


def make_questions(n=5):
    return [
        {
            "question": f"Q{i}",
            "options": [f"A: a{i}", f"B: b{i}", f"C: c{i}", f"D: d{i}"],
            "answer": "A",
        }
        for i in range(1, n + 1)
    ]


class StubLLM:
    model_name = "stub"

    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.exc is not None:
            raise self.exc
        return self.text


@pytest.fixture
def stub():
    return StubLLM(text=json.dumps(make_questions()))


@pytest.fixture
def client(stub):
    app.dependency_overrides[get_llm] = lambda: stub
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)

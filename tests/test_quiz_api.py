import json

import pytest

from topicquiz.errors import EmptyResponseError, ExternalApiError
from conftest import make_questions


@pytest.mark.parametrize("body", [{}, {"topic": ""}, {"topic": "   "}, {"topic": None}])
def test_missing_topic_is_400(client, stub, body):
    r = client.post("/api/quiz", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "No topic provided"}
    assert stub.prompts == []


@pytest.mark.parametrize("content", [b"", b"not json", b"[1, 2]", b'{"topic": 42}'])
def test_bad_body_is_400(client, stub, content):
    r = client.post("/api/quiz", content=content, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "No topic provided"}
    assert stub.prompts == []


def test_generates_quiz(client, stub):
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 200
    body = r.json()
    assert list(body) == ["questions"]
    assert body["questions"] == make_questions()
    assert len(stub.prompts) == 1
    assert 'about "history"' in stub.prompts[0]


def test_fenced_output_is_cleaned_before_parsing(client, stub):
    stub.text = "```json\n" + json.dumps(make_questions(1)) + "\n```"
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 200
    assert r.json() == {"questions": make_questions(1)}


def test_provider_failure_is_500(client, stub):
    stub.exc = ExternalApiError("boom")
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate quiz"}


def test_unexpected_provider_exception_is_500(client, stub):
    stub.exc = RuntimeError("socket closed")
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate quiz"}


def test_empty_provider_text_is_500(client, stub):
    stub.exc = EmptyResponseError()
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    assert r.json() == {"error": "No text returned from API"}


def test_unparseable_output_is_500_and_not_leaked(client, stub):
    stub.text = "Sure! Here is your quiz: Q1..."
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to parse quiz JSON"}
    assert "Sure!" not in r.text


def test_missing_fields_pass_through(client, stub):
    stub.text = '[{"question": "Q1", "answer": "A"}]'
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 200
    assert r.json() == {"questions": [{"question": "Q1", "answer": "A"}]}


def test_health_reports_mock_client(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["model"] == "mock"


def errors_logged(records):
    return [r["message"] for r in records if r["level"].name == "ERROR"]


def test_parse_failure_logs_cleaned_text(client, stub, log_records):
    stub.text = "```json\nSure! Here is your quiz\n```"
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    errors = errors_logged(log_records)
    assert any("Sure! Here is your quiz" in m for m in errors)
    assert not any("```" in m for m in errors)


def test_provider_failure_logs_detail(client, stub, log_records):
    stub.exc = ExternalApiError("gemini-test call failed: 403 API key not valid")
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 500
    assert any("403 API key not valid" in m for m in errors_logged(log_records))
    assert "403" not in r.text


def test_topic_reaches_prompt_as_sent(client, stub):
    r = client.post("/api/quiz", json={"topic": "  history "})
    assert r.status_code == 200
    assert 'about "  history "' in stub.prompts[0]


def test_untyped_values_are_relayed(client, stub):
    questions = make_questions()
    questions[0]["answer"] = 1
    questions[1]["options"] = [1, 2, 3, 4]
    stub.text = json.dumps(questions)
    r = client.post("/api/quiz", json={"topic": "history"})
    assert r.status_code == 200
    assert r.json() == {"questions": questions}


def test_dotfiles_are_not_served(client):
    assert client.get("/.env").status_code == 404
    assert client.get("/.git/config").status_code == 404

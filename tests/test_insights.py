import pytest
from fastapi import status

import requests

from hr_portal.core.config import settings
from hr_portal.core.exceptions import AIError, AIKillSwitchError
from hr_portal.services import openrouter_client
from hr_portal.services import chat_ai
from hr_portal.services.retention import calculate_risk_score, predict_retention, risk_level_for

HAPPY = {
    "job_satisfaction": 9, "engagement_level": 9, "tenure": 4, "work_life_balance": 9,
    "salary_satisfaction": 9, "career_growth": 9, "manager_relationship": 9, "performance_score": 9,
}
UNHAPPY = {
    "job_satisfaction": 2, "engagement_level": 2, "tenure": 0.5, "work_life_balance": 2,
    "salary_satisfaction": 2, "career_growth": 2, "manager_relationship": 2, "performance_score": 2,
}

@pytest.mark.parametrize("score, level", [(0, "Low"), (29, "Low"), (30, "Medium"), (59, "Medium"), (60, "High")])
def test_risk_level_thresholds(score, level):
    assert risk_level_for(score) == level

def test_happy_employee_is_low_risk():
    prediction = predict_retention(HAPPY)
    assert prediction["risk_level"] == "Low"
    assert prediction["retention_probability"] == 100 - prediction["risk_score"]

def test_unhappy_employee_is_high_risk():
    prediction = predict_retention(UNHAPPY)
    assert prediction["risk_level"] == "High"
    assert calculate_risk_score(UNHAPPY) > calculate_risk_score(HAPPY)
    assert "Immediate retention intervention required" in prediction["recommendations"]
    assert 0 <= prediction["retention_probability"] <= 100

def test_predict_endpoint(client, hr_user, auth_headers):
    response = client.post("/api/employee-retention/predict", headers=auth_headers(hr_user), json=UNHAPPY)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["risk_level"] == "High"

def test_predict_rejects_out_of_range(client, hr_user, auth_headers):
    response = client.post("/api/employee-retention/predict", headers=auth_headers(hr_user), json={**HAPPY, "job_satisfaction": 11})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

def test_build_messages_keeps_recent_history():
    history = [{"role": "user", "content": str(i)} for i in range(15)]
    messages = chat_ai.build_messages("hi", "technical", history, max_history=10)
    assert messages[0]["content"] == chat_ai.SYSTEM_PROMPTS["technical"]
    assert [m["content"] for m in messages[1:-1]] == [str(i) for i in range(5, 15)]
    assert messages[-1] == {"role": "user", "content": "hi"}

def test_chat_endpoint(client, employee, auth_headers, monkeypatch):
    captured = {}

    def fake_call(messages, temperature=0.7):
        captured["messages"] = messages
        return "You have 12 casual days."

    monkeypatch.setattr(chat_ai, "call_openrouter", fake_call)
    response = client.post(
        "/api/chat",
        headers=auth_headers(employee.user),
        json={"message": "How many casual days do I get?", "conversation_history": [{"role": "assistant", "content": "Hello"}]},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["response"] == "You have 12 casual days."
    assert response.json()["context"] == "hr"
    assert len(captured["messages"]) == 3

def test_chat_ai_failure_is_503(client, employee, auth_headers, monkeypatch):
    def failing_call(messages, temperature=0.7):
        raise AIError("AI service unavailable")

    monkeypatch.setattr(chat_ai, "call_openrouter", failing_call)
    response = client.post("/api/chat", headers=auth_headers(employee.user), json={"message": "Hello"})
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["success"] is False

def test_faq(client):
    response = client.get("/api/chat/faq")
    assert response.status_code == status.HTTP_200_OK
    faqs = response.json()["faqs"]
    assert len(faqs) == len(chat_ai.hr_faq())
    allotments = next(f["answer"] for f in faqs if f["id"] == 2)
    assert "12 casual, 12 sick and 21 earned days" in allotments
    assert "Maternity (180 days)" in allotments

def test_faq_follows_configured_allotments(client, monkeypatch):
    monkeypatch.setitem(settings.leave.default_allotments, "casual", 15)
    monkeypatch.setitem(settings.leave.default_allotments, "earned", 24.5)
    faqs = client.get("/api/chat/faq").json()["faqs"]
    allotments = next(f["answer"] for f in faqs if f["id"] == 2)
    assert "15 casual, 12 sick and 24.5 earned days" in allotments

class _FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload

def test_openrouter_kill_switch(monkeypatch):
    monkeypatch.setattr(settings.ai, "kill_switch", True)
    with pytest.raises(AIKillSwitchError):
        openrouter_client.call_openrouter([{"role": "user", "content": "hi"}])

def test_openrouter_missing_key(monkeypatch):
    monkeypatch.setattr(settings.ai, "kill_switch", False)
    monkeypatch.setattr(settings.ai, "openrouter_api_key", None)
    with pytest.raises(AIError):
        openrouter_client.call_openrouter([{"role": "user", "content": "hi"}])

def test_openrouter_falls_back_to_secondary_model(monkeypatch):
    monkeypatch.setattr(settings.ai, "kill_switch", False)
    monkeypatch.setattr(settings.ai, "openrouter_api_key", "test-key")
    models = []

    def fake_post(url, headers, json, timeout):
        models.append(json["model"])
        if json["model"] == settings.ai.model_name:
            return _FakeResponse(500)
        return _FakeResponse(200, {"choices": [{"message": {"content": "fallback answer"}}]})

    monkeypatch.setattr(openrouter_client.requests, "post", fake_post)
    assert openrouter_client.call_openrouter([{"role": "user", "content": "hi"}]) == "fallback answer"
    assert models == [settings.ai.model_name, settings.ai_fallback_model]

def test_openrouter_both_models_fail(monkeypatch):
    monkeypatch.setattr(settings.ai, "kill_switch", False)
    monkeypatch.setattr(settings.ai, "openrouter_api_key", "test-key")
    monkeypatch.setattr(openrouter_client.requests, "post", lambda url, headers, json, timeout: _FakeResponse(502))
    with pytest.raises(AIError):
        openrouter_client.call_openrouter([{"role": "user", "content": "hi"}])

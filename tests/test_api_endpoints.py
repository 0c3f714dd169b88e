"""Tests for the HTTP API."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from cobalt_hub.api.utils import get_cobalt_client
from cobalt_hub.infra.error_handler import DeliveryFailure
from cobalt_hub.main import app


@pytest.fixture
def client(mock_client):
    """Test client whose connector deliveries are mocked."""
    app.dependency_overrides[get_cobalt_client] = lambda: mock_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestMessages:
    def test_reply(self, client, mock_client):
        response = client.post("/messages/reply", json={
            "items": [{"sessionId": "abc"}],
            "content": [
                {"type": "text", "message": "Hi"},
                {"type": "hologram"},
                {"type": "card", "cardTitle": "Order #42"},
            ],
            "meta": {"lockInput": True},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        result = data["results"][0]
        assert result["sessionId"] == "abc"
        assert result["sent"] is True
        assert result["meta"] == {"lockInput": True}
        assert [item["type"] for item in result["richContent"]] == ["text", "card"]
        mock_client.deliver_message.assert_awaited_once()

    def test_reply_strict_unknown_kind(self, client):
        response = client.post("/messages/reply", json={
            "session_id": "abc",
            "content": [{"type": "hologram"}],
            "policy": "strict",
        })
        assert response.status_code == 422
        assert "hologram" in response.json()["detail"]
        assert response.json()["category"] == "content"

    def test_missing_session(self, client):
        response = client.post("/messages/html", json={"html": "<b>x</b>", "items": [{}]})
        assert response.status_code == 400
        assert response.json()["detail"] == "Session ID is missing."

    def test_missing_session_continue_on_fail(self, client):
        response = client.post("/messages/html", json={"html": "x", "items": [{}], "continue_on_fail": True})
        assert response.status_code == 200
        assert response.json()["results"] == [{"error": "Session ID is missing."}]

    def test_invalid_session_id(self, client, mock_client):
        response = client.post("/messages/html", json={"html": "x", "items": [{"sessionId": "x" * 300}]})

        assert response.status_code == 400
        assert response.json()["category"] == "validation"
        mock_client.deliver_message.assert_not_called()

    def test_invalid_session_id_continue_on_fail(self, client):
        response = client.post("/messages/html", json={
            "html": "x",
            "items": [{"sessionId": "bad\u0001id"}, {"sessionId": "ok"}],
            "continue_on_fail": True,
        })

        assert response.status_code == 200
        results = response.json()["results"]
        assert results[0] == {"error": "Session ID contains control characters."}
        assert results[1]["sessionId"] == "ok"

    def test_oversized_body(self, client):
        response = client.post(
            "/messages/html",
            content=b"{}",
            headers={"content-type": "application/json", "content-length": str(2 * 1024 * 1024)},
        )
        assert response.status_code == 413

    def test_survey(self, client):
        response = client.post("/messages/survey", json={
            "session_id": "abc",
            "title": "CSAT",
            "questions": [{"type": "rating", "title": "Rate us"}, {"type": "boolean", "title": "Resolved?"}],
            "completion_message": "Thanks!",
        })

        assert response.status_code == 200
        survey = response.json()["results"][0]["richContent"][0]
        assert [page["id"] for page in survey["pages"]] == ["q-1", "q-2", "end"]
        assert survey["pages"][1]["surveyType"] == "options"

    def test_survey_rejects_unknown_question_kind(self, client):
        response = client.post("/messages/survey", json={
            "session_id": "abc",
            "title": "CSAT",
            "questions": [{"type": "essay", "title": "?"}],
        })
        assert response.status_code == 422

    def test_escalate_delivery_failure_keeps_body(self, client, mock_client):
        mock_client.deliver_message.side_effect = DeliveryFailure("Connector returned 503", status_code=503)

        response = client.post("/messages/escalate", json={"session_id": "abc", "reason": "refund"})

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["error"] == "Connector returned 503"
        assert result["body"]["meta"]["escalationReason"] == "refund"


class TestControl:
    def test_end_chat(self, client, mock_client):
        response = client.post("/control/end", json={"session_id": "abc"})

        assert response.status_code == 200
        request = mock_client.deliver_state.call_args.args[0]
        assert request.path == "end"
        assert request.body() == {"sessionId": "abc"}

    def test_unknown_operation(self, client):
        response = client.post("/control/teleport", json={"session_id": "abc"})
        assert response.status_code == 422

    def test_control_delivery_failure(self, client, mock_client):
        mock_client.deliver_state.side_effect = DeliveryFailure("down")
        response = client.post("/control/bot", json={"session_id": "abc"})
        assert response.status_code == 502


class TestWebhooks:
    def test_trigger_echoes_body(self, client):
        response = client.post("/webhook/cobalt-start", json={"sessionId": "abc", "text": "hello"})

        assert response.status_code == 200
        data = response.json()
        assert data["trigger"] == "Cobalt Trigger"
        assert data["workflowData"] == [[{"json": {"sessionId": "abc", "text": "hello"}}]]

    @patch("cobalt_hub.services.triggers.log_event")
    def test_trigger_is_logged_with_query(self, mock_log_event, client):
        response = client.post("/webhook/timeout?source=widget", json={"sessionId": "abc"})

        assert response.json()["trigger"] == "Cobalt Timeout Trigger"
        mock_log_event.assert_called_once_with(
            "webhook_received",
            session_id="abc",
            target="timeout",
            payload={"node": "Cobalt Timeout Trigger", "query": {"source": "widget"}},
        )

    def test_text_body_is_echoed(self, client):
        response = client.post("/webhook/analytics", content=b"not json", headers={"content-type": "text/plain"})

        assert response.status_code == 200
        assert response.json()["workflowData"] == [[{"json": "not json"}]]

    def test_empty_body_echoes_empty_object(self, client):
        response = client.post("/webhook/end-chat")
        assert response.json()["workflowData"] == [[{"json": {}}]]

    def test_unknown_trigger(self, client):
        response = client.post("/webhook/nope", json={})
        assert response.status_code == 404


class TestTools:
    def test_list_tools(self, client):
        response = client.get("/tools")
        assert response.status_code == 200
        assert [tool["name"] for tool in response.json()][:2] == ["send_rich_content", "send_html_content"]

    def test_invoke_tool(self, client, mock_client):
        response = client.post("/tools/send_html_content/invoke", json={
            "session_id": "abc",
            "arguments": {"html": "<b>hi</b>"},
        })

        assert response.status_code == 200
        assert response.json() == {
            "tool": "send_html_content",
            "response": "HTML content sent successfully to the user.",
        }
        mock_client.deliver_message.assert_awaited_once()

    def test_invoke_without_session(self, client):
        response = client.post("/tools/send_rich_content/invoke", json={"arguments": {"text": "hi"}})
        assert response.status_code == 200
        assert response.json()["response"].startswith("Error: Could not determine Session ID")

    def test_invoke_unknown_tool(self, client):
        response = client.post("/tools/teleport/invoke", json={})
        assert response.status_code == 404


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"
        assert client.get("/health/live").json() == {"status": "alive"}
        assert client.get("/health/ready").json() == {
            "status": "ready",
            "connector": "http://cobalt.test",
            "content_policy": "lenient",
        }

    def test_metrics(self, client):
        client.get("/health")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text

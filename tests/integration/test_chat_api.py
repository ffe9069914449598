"""
Integration tests for the chat endpoint
"""

from unittest.mock import Mock, patch

import httpx
import requests
from openai import APIConnectionError

from docchat.core.config import settings
from docchat.deps.llm_providers import CompletionResult
from docchat.models import ApiUsage, ChatSession, ChatTurn, ProviderConfig
from tests.conftest import USER_ID


def lmstudio_reply(content="The document discusses revenue.", total_tokens=120):
    response = Mock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"total_tokens": total_tokens},
    }
    return response


class TestChatEndpoint:

    def test_requires_authentication(self, client, db_session):
        response = client.post("/api/ai/chat", json={"message": "Hello"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
        assert db_session.query(ChatTurn).count() == 0

    def test_invalid_token(self, client):
        response = client.post(
            "/api/ai/chat",
            json={"message": "Hello"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_blank_message_rejected_before_persistence(self, client, auth_headers, db_session):
        response = client.post("/api/ai/chat", json={"message": "   "}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert db_session.query(ChatSession).count() == 0
        assert db_session.query(ChatTurn).count() == 0
        assert db_session.query(ApiUsage).count() == 0

    def test_malformed_session_id_rejected(self, client, auth_headers):
        response = client.post(
            "/api/ai/chat",
            json={"message": "Hello", "session_id": "not-a-uuid"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @patch("docchat.deps.llm_providers.requests.post")
    def test_successful_exchange(self, mock_post, client, auth_headers, db_session):
        mock_post.return_value = lmstudio_reply()

        response = client.post("/api/ai/chat", json={"message": "What is this about?"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["message"] == "The document discusses revenue."
        assert body["data"]["tokens_used"] == 120

        session = db_session.query(ChatSession).one()
        assert body["data"]["session_id"] == session.id
        assert session.title == "What is this about?"
        assert [t.role for t in session.turns] == ["user", "assistant"]

        usage = db_session.query(ApiUsage).one()
        assert usage.user_id == USER_ID
        assert usage.endpoint == "/api/ai/chat"
        assert usage.status == "success"
        assert usage.tokens_used == 120
        assert usage.cost == 1

        # Default provider for a new user is the local LM Studio server
        assert mock_post.call_args.args[0] == "http://localhost:1234/v1/chat/completions"
        sent = mock_post.call_args.kwargs["json"]["messages"]
        assert [m["role"] for m in sent] == ["system", "user"]

    @patch("docchat.services.chat_sessions.generate_chat_completion")
    def test_exchange_in_existing_session(self, mock_completion, client, auth_headers, db_session, sample_session):
        mock_completion.return_value = CompletionResult(content="Sure.", tokens_used=7)

        response = client.post(
            "/api/ai/chat",
            json={"message": "Continue", "session_id": sample_session.id},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["session_id"] == sample_session.id
        assert db_session.query(ChatSession).count() == 1

    @patch("docchat.deps.llm_providers.requests.post")
    def test_provider_unavailable(self, mock_post, client, auth_headers, db_session, sample_session):
        failed = Mock()
        failed.ok = False
        failed.status_code = 503
        failed.reason = "Service Unavailable"
        mock_post.return_value = failed

        response = client.post(
            "/api/ai/chat",
            json={"message": "Hello", "session_id": sample_session.id},
            headers=auth_headers,
        )

        assert response.status_code == 502
        assert response.json()["error"] == {
            "code": "PROVIDER_UNAVAILABLE",
            "message": "LM Studio API error: Service Unavailable",
        }

        turns = db_session.query(ChatTurn).all()
        assert [t.role for t in turns] == ["user"]

        usage = db_session.query(ApiUsage).one()
        assert usage.status == "error"
        assert usage.tokens_used == 0
        assert usage.error_message == "LM Studio API error: Service Unavailable"

    def test_missing_hosted_key_is_configuration_error(self, client, auth_headers, db_session):
        db_session.add(ProviderConfig(user_id=USER_ID, llm_provider="claude", llm_model="claude-3-opus-20240229"))
        db_session.commit()

        with patch.object(settings, "claude_api_key", None):
            response = client.post("/api/ai/chat", json={"message": "Hello"}, headers=auth_headers)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "CONFIGURATION_ERROR"
        assert "CLAUDE_API_KEY" in error["message"]

    @patch("docchat.deps.llm_providers.OpenAI")
    def test_hosted_client_error_is_chat_error_with_key_masked(self, mock_openai_class, client, auth_headers, db_session):
        api_key = "sk-user-private-key-0123456789"
        db_session.add(ProviderConfig(user_id=USER_ID, llm_provider="openai", llm_model="gpt-4", openai_api_key=api_key))
        db_session.commit()
        mock_openai_class.return_value.chat.completions.create.side_effect = Exception(
            f"Incorrect API key provided: {api_key}"
        )

        response = client.post("/api/ai/chat", json={"message": "Hello"}, headers=auth_headers)

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "CHAT_ERROR"
        assert api_key not in error["message"]
        assert "Incorrect API key provided" in error["message"]

        usage = db_session.query(ApiUsage).one()
        assert usage.status == "error"
        assert api_key not in usage.error_message

    @patch("docchat.deps.llm_providers.OpenAI")
    def test_hosted_connection_failure_is_provider_unavailable(self, mock_openai_class, client, auth_headers, db_session):
        db_session.add(ProviderConfig(user_id=USER_ID, llm_provider="openai", llm_model="gpt-4", openai_api_key="sk-user-key-for-tests"))
        db_session.commit()
        mock_openai_class.return_value.chat.completions.create.side_effect = APIConnectionError(
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        )

        response = client.post("/api/ai/chat", json={"message": "Hello"}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "PROVIDER_UNAVAILABLE"
        assert mock_openai_class.return_value.chat.completions.create.call_count == 1

        usage = db_session.query(ApiUsage).one()
        assert usage.status == "error"
        assert [t.role for t in db_session.query(ChatTurn).all()] == ["user"]

    @patch("docchat.deps.llm_providers.requests.post")
    def test_hosted_timeout_is_provider_unavailable(self, mock_post, client, auth_headers, db_session):
        db_session.add(ProviderConfig(user_id=USER_ID, llm_provider="claude", llm_model="claude-3-opus-20240229", claude_api_key="sk-ant-user-key"))
        db_session.commit()
        mock_post.side_effect = requests.Timeout("Read timed out. (read timeout=60.0)")

        response = client.post("/api/ai/chat", json={"message": "Hello"}, headers=auth_headers)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "PROVIDER_UNAVAILABLE"
        assert "Read timed out" in error["message"]

    @patch("docchat.deps.llm_providers.requests.post")
    def test_hosted_http_error_stays_chat_error(self, mock_post, client, auth_headers, db_session):
        db_session.add(ProviderConfig(user_id=USER_ID, llm_provider="claude", llm_model="claude-3-opus-20240229", claude_api_key="sk-ant-user-key"))
        db_session.commit()
        rejected = Mock()
        rejected.raise_for_status.side_effect = requests.HTTPError("401 Client Error: Unauthorized")
        mock_post.return_value = rejected

        response = client.post("/api/ai/chat", json={"message": "Hello"}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CHAT_ERROR"

    @patch("docchat.services.chat_sessions.generate_chat_completion")
    def test_foreign_session_not_found(self, mock_completion, client, other_auth_headers, db_session, sample_session):
        response = client.post(
            "/api/ai/chat",
            json={"message": "Let me in", "session_id": sample_session.id},
            headers=other_auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
        assert db_session.query(ChatTurn).count() == 0
        mock_completion.assert_not_called()


class TestChatHistoryEndpoint:

    @patch("docchat.services.chat_sessions.generate_chat_completion")
    def test_history_oldest_first(self, mock_completion, client, auth_headers):
        mock_completion.return_value = CompletionResult(content="Answer", tokens_used=3)
        client.post("/api/ai/chat", json={"message": "First question"}, headers=auth_headers)
        client.post("/api/ai/chat", json={"message": "Second question"}, headers=auth_headers)

        response = client.get("/api/ai/chat/history", headers=auth_headers)

        assert response.status_code == 200
        turns = response.json()["data"]
        assert [t["content"] for t in turns] == ["First question", "Answer", "Second question", "Answer"]

    def test_history_requires_authentication(self, client):
        assert client.get("/api/ai/chat/history").status_code == 401

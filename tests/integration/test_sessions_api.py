"""
Integration tests for chat session endpoints
"""

from docchat.models import ChatSession, ChatTurn
from tests.conftest import USER_ID


def add_turn(db_session, session, role, content):
    turn = ChatTurn(session_id=session.id, user_id=session.user_id, role=role, content=content)
    db_session.add(turn)
    db_session.commit()
    return turn


class TestSessionEndpoints:

    def test_create_and_list(self, client, auth_headers):
        created = client.post("/api/chat/sessions", json={}, headers=auth_headers)

        assert created.status_code == 200
        session = created.json()["data"]
        assert session["title"] == "new conversation"
        assert session["user_id"] == USER_ID
        assert session["deleted_at"] is None

        listed = client.get("/api/chat/sessions", headers=auth_headers)
        assert [s["id"] for s in listed.json()["data"]] == [session["id"]]

    def test_create_with_title(self, client, auth_headers):
        response = client.post("/api/chat/sessions", json={"title": "Contract review"}, headers=auth_headers)

        assert response.json()["data"]["title"] == "Contract review"

    def test_sessions_are_private(self, client, auth_headers, other_auth_headers):
        client.post("/api/chat/sessions", json={"title": "mine"}, headers=auth_headers)

        response = client.get("/api/chat/sessions", headers=other_auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_rename(self, client, auth_headers, sample_session):
        response = client.patch(
            f"/api/chat/sessions/{sample_session.id}",
            json={"title": "Budget questions"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Budget questions"

    def test_rename_blank_title_rejected(self, client, auth_headers, sample_session):
        response = client.patch(f"/api/chat/sessions/{sample_session.id}", json={"title": "  "}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_rename_foreign_session(self, client, other_auth_headers, sample_session):
        response = client.patch(
            f"/api/chat/sessions/{sample_session.id}",
            json={"title": "hijacked"},
            headers=other_auth_headers,
        )

        assert response.status_code == 404

    def test_delete_hides_session_but_keeps_transcript(self, client, auth_headers, db_session, sample_session):
        add_turn(db_session, sample_session, "user", "What is in the appendix?")

        response = client.delete(f"/api/chat/sessions/{sample_session.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Session deleted"}
        assert client.get("/api/chat/sessions", headers=auth_headers).json()["data"] == []

        transcript = client.get(f"/api/chat/sessions/{sample_session.id}/messages", headers=auth_headers)
        assert transcript.status_code == 200
        assert [t["content"] for t in transcript.json()["data"]] == ["What is in the appendix?"]

        db_session.refresh(sample_session)
        assert sample_session.deleted_at is not None
        assert db_session.query(ChatSession).count() == 1

    def test_delete_twice_succeeds(self, client, auth_headers, sample_session):
        client.delete(f"/api/chat/sessions/{sample_session.id}", headers=auth_headers)

        response = client.delete(f"/api/chat/sessions/{sample_session.id}", headers=auth_headers)

        assert response.status_code == 200

    def test_delete_foreign_session(self, client, other_auth_headers, sample_session):
        response = client.delete(f"/api/chat/sessions/{sample_session.id}", headers=other_auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_transcript_order(self, client, auth_headers, db_session, sample_session):
        add_turn(db_session, sample_session, "user", "Question one")
        add_turn(db_session, sample_session, "assistant", "Answer one")
        add_turn(db_session, sample_session, "user", "Question two")

        response = client.get(f"/api/chat/sessions/{sample_session.id}/messages", headers=auth_headers)

        turns = response.json()["data"]
        assert [(t["role"], t["content"]) for t in turns] == [
            ("user", "Question one"),
            ("assistant", "Answer one"),
            ("user", "Question two"),
        ]

    def test_transcript_foreign_session(self, client, other_auth_headers, sample_session):
        response = client.get(f"/api/chat/sessions/{sample_session.id}/messages", headers=other_auth_headers)

        assert response.status_code == 404

    def test_malformed_session_id(self, client, auth_headers):
        response = client.get("/api/chat/sessions/12345/messages", headers=auth_headers)

        assert response.status_code == 422

    def test_requires_authentication(self, client):
        assert client.get("/api/chat/sessions").status_code == 401
        assert client.post("/api/chat/sessions", json={}).status_code == 401

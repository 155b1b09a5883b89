"""
Training-chat function: code validation, session lifecycle and evaluation
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from convertia.core.clock import utcnow
from convertia.models.training import TrainingCode, TrainingSession, TrainingMessage

URL = "/functions/v1/training-chat"


@pytest.fixture
def valid_code(db):
    code = TrainingCode(code="ABC234", expires_at=utcnow() + timedelta(days=3))
    db.add(code)
    db.commit()
    return code


@pytest.fixture
def expired_code(db):
    code = TrainingCode(code="OLD999", expires_at=utcnow() - timedelta(hours=1))
    db.add(code)
    db.commit()
    return code


def start(client, code="ABC234", name="Ana Pérez"):
    response = client.post(URL, json={"action": "start-session", "trainingCode": code, "candidateName": name})
    assert response.status_code == 200, response.text
    return response.json()["sessionId"]


def test_rejects_unparseable_body(client):
    response = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_and_unknown_action(client):
    assert client.post(URL, json={}).json() == {"success": False, "error": "No action specified"}

    response = client.post(URL, json={"action": "dance"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid action: dance"


def test_validate_code_in_future(client, valid_code):
    response = client.post(URL, json={"action": "validate-code", "trainingCode": "ABC234"})

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["code"]["id"] == valid_code.id
    assert body["code"]["expiresAt"]


def test_validate_expired_code(client, expired_code):
    response = client.post(URL, json={"action": "validate-code", "trainingCode": "OLD999"})

    assert response.status_code == 400
    assert response.json()["reason"] == "expired"


def test_validate_unknown_and_missing_code(client):
    unknown = client.post(URL, json={"action": "validate-code", "trainingCode": "NOPE00"})
    assert unknown.status_code == 404
    assert unknown.json()["reason"] == "not_found"

    missing = client.post(URL, json={"action": "validate-code"})
    assert missing.status_code == 400
    assert missing.json()["reason"] == "missing"


def test_start_session_marks_code_used(client, db, valid_code):
    session_id = start(client, name="  Ana Pérez ")

    db.expire_all()
    session = db.query(TrainingSession).filter(TrainingSession.id == session_id).one()
    assert session.candidate_name == "Ana Pérez"
    assert session.ended_at is None
    assert db.query(TrainingCode).filter(TrainingCode.id == valid_code.id).one().is_used is True
    assert db.query(TrainingMessage).count() == 0


def test_start_session_requires_name(client, valid_code):
    response = client.post(URL, json={"action": "start-session", "trainingCode": "ABC234", "candidateName": " "})

    assert response.status_code == 400
    assert response.json()["error"] == "Candidate name not provided"


def test_start_session_with_expired_code(client, expired_code):
    response = client.post(URL, json={"action": "start-session", "trainingCode": "OLD999", "candidateName": "Ana"})

    assert response.status_code == 400
    assert response.json()["reason"] == "expired"


def test_send_message_appends_candidate_and_ai_turns(client, db, fake_ai, valid_code):
    session_id = start(client)
    fake_ai.replies = ["¿Qué velocidad tiene esa fibra?"]

    response = client.post(URL, json={
        "action": "send-message",
        "sessionId": session_id,
        "message": "Buenos días, le llamo para ofrecerle internet de fibra",
    })

    body = response.json()
    assert response.status_code == 200
    assert body["response"] == "¿Qué velocidad tiene esa fibra?"
    assert body["message"]["sender_type"] == "ai"

    turns = (
        db.query(TrainingMessage)
        .filter(TrainingMessage.session_id == session_id)
        .order_by(TrainingMessage.sent_at, TrainingMessage.id)
        .all()
    )
    assert [t.sender_type for t in turns] == ["candidate", "ai"]

    system_prompt = fake_ai.calls[0]["messages"][0]["content"]
    assert "internet" in system_prompt
    assert "primera interacción" in system_prompt
    assert fake_ai.calls[0]["messages"][-1] == {
        "role": "user",
        "content": "Buenos días, le llamo para ofrecerle internet de fibra",
    }


def test_second_message_sends_full_history(client, fake_ai, valid_code):
    session_id = start(client)
    for text in ("Hola, le ofrezco un plan móvil", "Incluye llamadas ilimitadas"):
        client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": text})

    history = fake_ai.calls[1]["messages"][1:]
    assert [m["role"] for m in history] == ["user", "assistant", "user"]
    assert "Continúa la conversación" in fake_ai.calls[1]["messages"][0]["content"]


def test_failed_reply_stores_nothing(client, db, fake_ai, valid_code):
    session_id = start(client)
    fake_ai.error = "OpenAI error: rate limited"

    response = client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": "Hola"})

    assert response.status_code == 500
    assert response.json()["error"].startswith("Error generating response")
    assert db.query(TrainingMessage).count() == 0


def test_failed_commit_stores_nothing(client, db, fake_ai, valid_code, monkeypatch):
    session_id = start(client)

    def broken_commit(self):
        raise OperationalError("INSERT INTO training_messages", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", broken_commit)
    response = client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": "Hola"})
    monkeypatch.undo()

    body = response.json()
    assert response.status_code == 500
    assert body["success"] is False
    assert body["error"].startswith("Error saving message: ")
    assert "disk I/O error" in body["error"]
    assert len(fake_ai.calls) == 1
    assert db.query(TrainingMessage).count() == 0


def test_send_message_validation(client, valid_code):
    missing_session = client.post(URL, json={"action": "send-message", "message": "Hola"})
    assert missing_session.status_code == 400

    session_id = start(client)
    missing_message = client.post(URL, json={"action": "send-message", "sessionId": session_id})
    assert missing_message.status_code == 400

    unknown = client.post(URL, json={"action": "send-message", "sessionId": "does-not-exist", "message": "Hola"})
    assert unknown.status_code == 404


def test_end_session_without_messages_skips_llm(client, db, fake_ai, valid_code):
    session_id = start(client)

    response = client.post(URL, json={"action": "end-session", "sessionId": session_id})

    body = response.json()
    assert body["success"] is True
    assert body["evaluation"]["score"] == 50
    assert fake_ai.calls == []
    db.expire_all()
    assert db.query(TrainingSession).filter(TrainingSession.id == session_id).one().ended_at is not None


def test_end_session_scores_transcript(client, db, fake_ai, valid_code):
    session_id = start(client)
    client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": "Le ofrezco TV"})
    fake_ai.replies = ["## Evaluación\nPuntuación global: **85**\nBuen cierre."]

    response = client.post(URL, json={"action": "end-session", "sessionId": session_id})

    body = response.json()
    assert body["evaluation"]["score"] == 85
    assert "Buen cierre" in body["evaluation"]["text"]
    assert "USER (" in fake_ai.calls[-1]["messages"][1]["content"]

    db.expire_all()
    session = db.query(TrainingSession).filter(TrainingSession.id == session_id).one()
    assert session.score == 85
    assert session.feedback.startswith("## Evaluación")
    assert session.average_response_time == 0.0


def test_end_session_twice_evaluates_again(client, fake_ai, valid_code):
    session_id = start(client)
    client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": "Hola"})
    fake_ai.replies = ["Puntuación global: 40", "Puntuación global: 90"]

    first = client.post(URL, json={"action": "end-session", "sessionId": session_id}).json()
    second = client.post(URL, json={"action": "end-session", "sessionId": session_id}).json()

    assert first["evaluation"]["score"] == 40
    assert second["evaluation"]["score"] == 90


def test_end_session_falls_back_when_llm_fails(client, db, fake_ai, valid_code):
    session_id = start(client)
    client.post(URL, json={"action": "send-message", "sessionId": session_id, "message": "Hola"})
    fake_ai.error = "OpenAI error: timeout"

    body = client.post(URL, json={"action": "end-session", "sessionId": session_id}).json()

    assert body["success"] is True
    assert body["evaluation"]["score"] == 60
    assert body["error"] == "OpenAI error: timeout"
    db.expire_all()
    assert db.query(TrainingSession).filter(TrainingSession.id == session_id).one().score is None

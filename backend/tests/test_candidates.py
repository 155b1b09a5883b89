from convertia.candidates.service import format_phone
from convertia.models.candidate import Application, Candidate

from helpers import apply, create_job


def test_format_phone():
    assert format_phone("600 123 456", "+34") == "+34600123456"
    assert format_phone("600123456", None) is None
    assert format_phone("", "+34") is None


def test_public_application_creates_candidate(client, db, recruiter_headers):
    job = create_job(client, recruiter_headers)

    response = apply(client, job["id"], cedula="X123", fechaNacimiento="1995-04-02", fuente="LinkedIn")

    assert response.status_code == 201
    body = response.json()
    candidate = db.query(Candidate).filter(Candidate.id == body["candidate_id"]).one()
    assert candidate.phone == "+34600123456"
    assert candidate.application_data["cedula"] == "X123"
    assert candidate.application_data["fechaNacimiento"] == "1995-04-02"
    application = db.query(Application).filter(Application.id == body["application_id"]).one()
    assert application.status == "new"


def test_reapplying_to_another_job_reuses_candidate(client, db, recruiter_headers):
    first = create_job(client, recruiter_headers)
    second = create_job(client, recruiter_headers, title="Back Office")

    a = apply(client, first["id"]).json()
    b = apply(client, second["id"], firstName="Lucia").json()

    assert a["candidate_id"] == b["candidate_id"]
    assert db.query(Candidate).count() == 1
    db.expire_all()
    assert db.query(Candidate).one().first_name == "Lucia"


def test_duplicate_application_conflicts(client, recruiter_headers):
    job = create_job(client, recruiter_headers)
    apply(client, job["id"])

    response = apply(client, job["id"])

    assert response.status_code == 409
    assert "application_id" in response.json()["error"]["details"]


def test_cannot_apply_to_closed_job(client, recruiter_headers):
    job = create_job(client, recruiter_headers, status="closed")

    assert apply(client, job["id"]).status_code == 404


def test_application_inherits_job_campaign(client, recruiter_headers):
    campaign = client.post("/api/v1/campaigns/", json={"name": "Verano"}, headers=recruiter_headers).json()
    job = create_job(client, recruiter_headers, campaign_id=campaign["id"])

    application_id = apply(client, job["id"]).json()["application_id"]

    application = client.get(f"/api/v1/applications/{application_id}", headers=recruiter_headers).json()
    assert application["campaign_id"] == campaign["id"]


def test_list_candidates_filters(client, recruiter_headers):
    job = create_job(client, recruiter_headers)
    other = create_job(client, recruiter_headers, title="Back Office")
    apply(client, job["id"])
    apply(client, other["id"], email="pedro@example.com", firstName="Pedro")

    by_job = client.get("/api/v1/candidates/", params={"job_id": other["id"]}, headers=recruiter_headers).json()
    assert [c["first_name"] for c in by_job] == ["Pedro"]

    by_search = client.get("/api/v1/candidates/", params={"search": "lucía"}, headers=recruiter_headers).json()
    assert [c["email"] for c in by_search] == ["lucia@example.com"]

    by_status = client.get("/api/v1/candidates/", params={"status": "pending"}, headers=recruiter_headers).json()
    assert len(by_status) == 2


def test_update_candidate_email_conflict(client, recruiter_headers):
    job = create_job(client, recruiter_headers)
    lucia = apply(client, job["id"]).json()["candidate_id"]
    apply(client, job["id"], email="pedro@example.com")

    response = client.put(
        f"/api/v1/candidates/{lucia}",
        json={"email": "pedro@example.com"},
        headers=recruiter_headers,
    )

    assert response.status_code == 409


def test_delete_candidate_removes_applications(client, db, recruiter_headers):
    job = create_job(client, recruiter_headers)
    candidate_id = apply(client, job["id"]).json()["candidate_id"]

    assert client.delete(f"/api/v1/candidates/{candidate_id}", headers=recruiter_headers).status_code == 204
    assert db.query(Application).count() == 0


def test_analysis_requires_resume(client, recruiter_headers):
    job = create_job(client, recruiter_headers)
    candidate_id = apply(client, job["id"]).json()["candidate_id"]

    response = client.post(f"/api/v1/candidates/{candidate_id}/analyze", headers=recruiter_headers)

    assert response.status_code == 422


def test_analysis_runs_task_and_stores_score(client, monkeypatch, fake_ai, recruiter_headers):
    monkeypatch.setattr("convertia.ai_engine.service.ai_engine", fake_ai)
    fake_ai.replies = ["1. Resumen...\n7. Compatibilidad con la Vacante: 82 - Buen perfil comercial"]
    job = create_job(client, recruiter_headers)
    candidate_id = apply(client, job["id"], resumeText="Cinco años vendiendo fibra").json()["candidate_id"]

    response = client.post(f"/api/v1/candidates/{candidate_id}/analyze", headers=recruiter_headers)

    assert response.status_code == 202
    detail = client.get(f"/api/v1/candidates/{candidate_id}", headers=recruiter_headers).json()
    assert detail["compatibility_score"] == 82
    assert detail["analysis_data"] == {"compatibilidad": {"porcentaje": 82}}
    assert "Experiencia en call center" in fake_ai.calls[0]["messages"][0]["content"]

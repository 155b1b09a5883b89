from helpers import apply, create_job


def test_end_date_before_start_is_rejected(client, recruiter_headers):
    response = client.post(
        "/api/v1/campaigns/",
        json={"name": "Navidad", "start_date": "2024-12-10", "end_date": "2024-12-01"},
        headers=recruiter_headers,
    )

    assert response.status_code == 422


def test_update_cannot_invert_dates(client, recruiter_headers):
    campaign = client.post(
        "/api/v1/campaigns/",
        json={"name": "Navidad", "start_date": "2024-12-01", "end_date": "2024-12-31"},
        headers=recruiter_headers,
    ).json()

    response = client.put(
        f"/api/v1/campaigns/{campaign['id']}",
        json={"end_date": "2024-11-01"},
        headers=recruiter_headers,
    )

    assert response.status_code == 422
    detail = client.get(f"/api/v1/campaigns/{campaign['id']}", headers=recruiter_headers).json()
    assert detail["end_date"] == "2024-12-31"


def test_campaign_detail_counts_pipeline(client, recruiter_headers):
    campaign = client.post("/api/v1/campaigns/", json={"name": "Verano"}, headers=recruiter_headers).json()
    job = create_job(client, recruiter_headers, campaign_id=campaign["id"])
    create_job(client, recruiter_headers, title="Back Office", campaign_id=campaign["id"])
    first = apply(client, job["id"]).json()["application_id"]
    apply(client, job["id"], email="pedro@example.com")
    client.patch(f"/api/v1/applications/{first}/status", json={"status": "rejected"}, headers=recruiter_headers)

    detail = client.get(f"/api/v1/campaigns/{campaign['id']}", headers=recruiter_headers).json()

    assert detail["job_count"] == 2
    assert detail["application_count"] == 2
    counts = {row["status"]: row["count"] for row in detail["applications_by_status"]}
    assert counts == {"new": 1, "rejected": 1}


def test_filter_and_delete_campaign(client, recruiter_headers):
    active = client.post("/api/v1/campaigns/", json={"name": "Activa"}, headers=recruiter_headers).json()
    client.post("/api/v1/campaigns/", json={"name": "Pausada", "status": "paused"}, headers=recruiter_headers)
    job = create_job(client, recruiter_headers, campaign_id=active["id"])

    paused = client.get("/api/v1/campaigns/", params={"status": "paused"}, headers=recruiter_headers).json()
    assert [c["name"] for c in paused] == ["Pausada"]

    assert client.delete(f"/api/v1/campaigns/{active['id']}", headers=recruiter_headers).status_code == 204
    assert client.get(f"/api/v1/jobs/{job['id']}", headers=recruiter_headers).json()["campaign_id"] is None

"""
Request helpers shared by the recruiting tests
"""


def create_job(client, headers, **overrides):
    payload = {
        "title": "Agente de Ventas",
        "department": "Ventas",
        "location": "Madrid",
        "requirements": "Experiencia en call center",
        "type": "full-time",
        **overrides,
    }
    response = client.post("/api/v1/jobs/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def apply(client, job_id, email="lucia@example.com", **overrides):
    payload = {
        "firstName": "Lucía",
        "lastName": "Gómez",
        "email": email,
        "phone": "600 123 456",
        "phoneCountry": "+34",
        "jobId": job_id,
        **overrides,
    }
    return client.post("/api/v1/public/applications", json=payload)

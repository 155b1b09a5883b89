from datetime import date, datetime, timedelta, timezone

import pytest

from convertia.core.clock import utcnow
from convertia.rrhh import service

API = "/api/v1/rrhh"


@pytest.fixture
def department(client, rrhh_headers):
    return client.post(f"{API}/departments", json={"name": "Ventas"}, headers=rrhh_headers).json()


def hire(client, headers, first_name, email, **extra):
    payload = {"first_name": first_name, "last_name": "Ruiz", "email": email, "position": "Agente", **extra}
    response = client.post(f"{API}/employees", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def set_manager(client, headers, employee_id, manager_id):
    return client.put(f"{API}/employees/{employee_id}/manager", json={"manager_id": manager_id}, headers=headers)


def test_rrhh_routes_require_rrhh_or_admin(client, recruiter_headers, admin_headers):
    assert client.get(f"{API}/employees", headers=recruiter_headers).status_code == 403
    assert client.get(f"{API}/employees", headers=admin_headers).status_code == 200


def test_organisation_catalogues(client, rrhh_headers, department):
    center = client.post(f"{API}/work-centers", json={"name": "Sede Central", "country_code": "es"},
                         headers=rrhh_headers).json()
    team = client.post(f"{API}/teams", json={"name": "Fibra", "department_id": department["id"]},
                       headers=rrhh_headers).json()

    assert center["country_code"] == "ES"
    assert team["department_id"] == department["id"]
    assert client.post(f"{API}/departments", json={"name": "Ventas"}, headers=rrhh_headers).status_code == 409


def test_employee_crud_and_search(client, rrhh_headers, department):
    ana = hire(client, rrhh_headers, "Ana", "ana@convertia.com", department_id=department["id"])
    hire(client, rrhh_headers, "Bruno", "bruno@convertia.com", status="Vacaciones")

    assert ana["department_name"] == "Ventas"

    by_text = client.get(f"{API}/employees", params={"search": "bruno"}, headers=rrhh_headers).json()
    assert [e["first_name"] for e in by_text] == ["Bruno"]
    by_department = client.get(f"{API}/employees", params={"department_id": department["id"]},
                               headers=rrhh_headers).json()
    assert [e["first_name"] for e in by_department] == ["Ana"]
    by_status = client.get(f"{API}/employees", params={"status": "Vacaciones"}, headers=rrhh_headers).json()
    assert [e["first_name"] for e in by_status] == ["Bruno"]

    updated = client.put(f"{API}/employees/{ana['id']}", json={"status": "Licencia"}, headers=rrhh_headers)
    assert updated.json()["status"] == "Licencia"

    duplicate = client.post(
        f"{API}/employees",
        json={"first_name": "Otra", "last_name": "Ana", "email": "ana@convertia.com", "position": "Agente"},
        headers=rrhh_headers,
    )
    assert duplicate.status_code == 409

    assert client.delete(f"{API}/employees/{ana['id']}", headers=rrhh_headers).status_code == 204
    assert client.get(f"{API}/employees/{ana['id']}", headers=rrhh_headers).status_code == 404


def test_invalid_employee_status_is_rejected(client, rrhh_headers):
    response = client.post(
        f"{API}/employees",
        json={"first_name": "Eva", "last_name": "Ruiz", "email": "eva@convertia.com", "position": "Agente",
              "status": "Jubilado"},
        headers=rrhh_headers,
    )

    assert response.status_code == 422


def test_manager_cycles_are_refused(client, rrhh_headers):
    boss = hire(client, rrhh_headers, "Carmen", "carmen@convertia.com")
    lead = hire(client, rrhh_headers, "Diego", "diego@convertia.com")
    agent = hire(client, rrhh_headers, "Elena", "elena@convertia.com")

    assert set_manager(client, rrhh_headers, lead["id"], boss["id"]).status_code == 200
    assert set_manager(client, rrhh_headers, agent["id"], lead["id"]).status_code == 200

    assert set_manager(client, rrhh_headers, boss["id"], boss["id"]).status_code == 409
    assert set_manager(client, rrhh_headers, boss["id"], lead["id"]).status_code == 409
    assert set_manager(client, rrhh_headers, boss["id"], agent["id"]).status_code == 409


def test_direct_report_counts_and_tree(client, rrhh_headers):
    boss = hire(client, rrhh_headers, "Carmen", "carmen@convertia.com")
    lead = hire(client, rrhh_headers, "Diego", "diego@convertia.com")
    agent = hire(client, rrhh_headers, "Elena", "elena@convertia.com")
    set_manager(client, rrhh_headers, lead["id"], boss["id"])
    set_manager(client, rrhh_headers, agent["id"], boss["id"])

    listed = {e["first_name"]: e for e in client.get(f"{API}/employees", headers=rrhh_headers).json()}
    assert listed["Carmen"]["direct_report_count"] == 2
    assert listed["Diego"]["manager_name"] == "Carmen Ruiz"

    tree = client.get(f"{API}/org-chart", headers=rrhh_headers).json()
    assert [node["full_name"] for node in tree] == ["Carmen Ruiz"]
    assert sorted(r["full_name"] for r in tree[0]["reports"]) == ["Diego Ruiz", "Elena Ruiz"]

    reports = client.get(f"{API}/employees/{boss['id']}/reports", headers=rrhh_headers).json()
    assert len(reports) == 2


def test_deleting_manager_releases_reports(client, rrhh_headers):
    boss = hire(client, rrhh_headers, "Carmen", "carmen@convertia.com")
    agent = hire(client, rrhh_headers, "Elena", "elena@convertia.com", manager_id=boss["id"])

    client.delete(f"{API}/employees/{boss['id']}", headers=rrhh_headers)

    assert client.get(f"{API}/employees/{agent['id']}", headers=rrhh_headers).json()["manager_id"] is None


def test_check_in_and_out_once_per_day(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    url = f"{API}/employees/{employee['id']}"

    assert client.post(f"{url}/check-out", headers=rrhh_headers).status_code == 409

    check_in = client.post(f"{url}/check-in", headers=rrhh_headers)
    assert check_in.status_code == 201
    assert check_in.json()["status"] == "present"
    assert client.post(f"{url}/check-in", headers=rrhh_headers).status_code == 409

    check_out = client.post(f"{url}/check-out", json={"notes": "Turno de mañana"}, headers=rrhh_headers)
    assert check_out.status_code == 200
    assert check_out.json()["status"] == "completed"
    assert check_out.json()["hours_worked"] is not None
    assert client.post(f"{url}/check-out", headers=rrhh_headers).status_code == 409


def test_check_out_computes_overtime(db, rrhh_headers, client):
    employee_id = hire(client, rrhh_headers, "Ana", "ana@convertia.com")["id"]
    employee = service.get_employee(db, employee_id)
    start = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)

    service.check_in(db, employee, now=start)
    record = service.check_out(db, employee, now=start + timedelta(hours=9, minutes=30))

    assert record.hours_worked == 9.5
    assert record.overtime_hours == 1.5


def test_register_past_attendance(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    day = utcnow().date() - timedelta(days=1)
    payload = {
        "date": day.isoformat(),
        "check_in_time": f"{day.isoformat()}T08:00:00+00:00",
        "check_out_time": f"{day.isoformat()}T18:30:00+00:00",
    }
    url = f"{API}/employees/{employee['id']}/attendance"

    created = client.post(url, json=payload, headers=rrhh_headers)

    assert created.status_code == 201
    assert created.json()["hours_worked"] == 10.5
    assert created.json()["overtime_hours"] == 2.5
    assert client.post(url, json=payload, headers=rrhh_headers).status_code == 409

    month = client.get(url, params={"year": day.year, "month": day.month}, headers=rrhh_headers).json()
    assert [r["date"] for r in month] == [day.isoformat()]


def test_future_attendance_is_rejected(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    day = utcnow().date() + timedelta(days=2)

    response = client.post(
        f"{API}/employees/{employee['id']}/attendance",
        json={"date": day.isoformat(), "check_in_time": f"{day.isoformat()}T08:00:00+00:00"},
        headers=rrhh_headers,
    )

    assert response.status_code == 422


def test_past_attendance_accepts_mixed_offsets(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    day = utcnow().date() - timedelta(days=1)
    url = f"{API}/employees/{employee['id']}/attendance"

    inverted = client.post(
        url,
        json={"date": day.isoformat(), "check_in_time": f"{day.isoformat()}T18:00:00+00:00",
              "check_out_time": f"{day.isoformat()}T08:00:00"},
        headers=rrhh_headers,
    )
    assert inverted.status_code == 422

    created = client.post(
        url,
        json={"date": day.isoformat(), "check_in_time": f"{day.isoformat()}T08:00:00+00:00",
              "check_out_time": f"{day.isoformat()}T18:30:00"},
        headers=rrhh_headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["hours_worked"] == 10.5


def test_past_attendance_check_in_must_match_date(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    day = utcnow().date() - timedelta(days=3)
    other_day = day - timedelta(days=1)

    response = client.post(
        f"{API}/employees/{employee['id']}/attendance",
        json={"date": day.isoformat(), "check_in_time": f"{other_day.isoformat()}T08:00:00+00:00"},
        headers=rrhh_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["details"]["check_in_date"] == other_day.isoformat()


def test_absence_days_and_decisions(client, rrhh_headers, rrhh_user):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    request = {
        "employee_id": employee["id"],
        "absence_type": "vacaciones",
        "start_date": "2024-08-01",
        "end_date": "2024-08-05",
    }

    absence = client.post(f"{API}/absences", json=request, headers=rrhh_headers).json()
    assert absence["days_requested"] == 5
    assert absence["status"] == "pending"

    approved = client.post(f"{API}/absences/{absence['id']}/approve", headers=rrhh_headers).json()
    assert approved["status"] == "approved"
    assert approved["approved_by"] == rrhh_user.id

    again = client.post(f"{API}/absences/{absence['id']}/reject", json={"rejection_reason": "Tarde"},
                        headers=rrhh_headers)
    assert again.status_code == 409


def test_reject_absence_with_reason(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    absence = client.post(
        f"{API}/absences",
        json={"employee_id": employee["id"], "absence_type": "personal",
              "start_date": "2024-09-02", "end_date": "2024-09-02"},
        headers=rrhh_headers,
    ).json()

    rejected = client.post(f"{API}/absences/{absence['id']}/reject", json={"rejection_reason": "Cierre de mes"},
                           headers=rrhh_headers).json()

    assert absence["days_requested"] == 1
    assert rejected["status"] == "rejected"
    assert rejected["rejection_reason"] == "Cierre de mes"


def test_absence_end_before_start_is_rejected(client, rrhh_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")

    response = client.post(
        f"{API}/absences",
        json={"employee_id": employee["id"], "absence_type": "personal",
              "start_date": "2024-09-05", "end_date": "2024-09-02"},
        headers=rrhh_headers,
    )

    assert response.status_code == 422


def test_analytics(client, rrhh_headers, department):
    ana = hire(client, rrhh_headers, "Ana", "ana@convertia.com", department_id=department["id"])
    hire(client, rrhh_headers, "Bruno", "bruno@convertia.com", status="Vacaciones")
    day = date(2024, 6, 3)
    client.post(
        f"{API}/employees/{ana['id']}/attendance",
        json={"date": day.isoformat(), "check_in_time": "2024-06-03T08:00:00+00:00",
              "check_out_time": "2024-06-03T17:00:00+00:00"},
        headers=rrhh_headers,
    )
    client.post(
        f"{API}/absences",
        json={"employee_id": ana["id"], "absence_type": "enfermedad",
              "start_date": "2024-06-10", "end_date": "2024-06-11"},
        headers=rrhh_headers,
    )

    stats = client.get(
        f"{API}/analytics",
        params={"start_date": "2024-06-01", "end_date": "2024-06-30"},
        headers=rrhh_headers,
    ).json()

    assert stats["total_employees"] == 2
    assert {"key": "Ventas", "count": 1} in stats["headcount_by_department"]
    assert {"key": "Sin departamento", "count": 1} in stats["headcount_by_department"]
    assert {row["key"]: row["count"] for row in stats["headcount_by_status"]} == {"Activo": 1, "Vacaciones": 1}
    assert stats["attendance"] == {
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
        "records": 1,
        "total_hours": 9.0,
        "overtime_hours": 1.0,
    }
    assert stats["pending_absences"] == 1


def test_employee_notes_newest_first(client, db, rrhh_headers, rrhh_user):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    url = f"{API}/employees/{employee['id']}/notes"

    first = client.post(url, json={"note_content": "Buen cierre de ventas"}, headers=rrhh_headers)
    second = client.post(
        url,
        json={"note_content": "Baja médica informada", "note_type": "medical", "is_confidential": True},
        headers=rrhh_headers,
    )

    assert first.status_code == 201
    assert first.json()["note_type"] == "general"
    assert first.json()["created_by"] == rrhh_user.id
    notes = client.get(url, headers=rrhh_headers).json()
    assert [n["id"] for n in notes] == [second.json()["id"], first.json()["id"]]
    assert notes[0]["is_confidential"] is True

    deleted = client.delete(f"{API}/notes/{first.json()['id']}", headers=rrhh_headers)
    assert deleted.status_code == 204
    assert len(client.get(url, headers=rrhh_headers).json()) == 1
    assert client.delete(f"{API}/notes/{first.json()['id']}", headers=rrhh_headers).status_code == 404


def test_employee_note_validation(client, rrhh_headers, recruiter_headers):
    employee = hire(client, rrhh_headers, "Ana", "ana@convertia.com")
    url = f"{API}/employees/{employee['id']}/notes"

    assert client.post(url, json={"note_content": ""}, headers=rrhh_headers).status_code == 422
    assert client.post(url, json={"note_content": "x", "note_type": "gossip"}, headers=rrhh_headers).status_code == 422
    assert client.post(f"{API}/employees/9999/notes", json={"note_content": "x"}, headers=rrhh_headers).status_code == 404
    assert client.get(url, headers=recruiter_headers).status_code == 403

"""
RRHH service: organisation, employees, attendance and absences
"""
from calendar import monthrange
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session
import structlog

from convertia.core.audit import record_action
from convertia.core.clock import as_utc, utcnow
from convertia.core.config import settings
from convertia.core.exceptions import ConflictError, NotFoundError, ValidationError
from convertia.models.rrhh import (
    AbsenceRequest,
    AttendanceRecord,
    Department,
    Employee,
    EmployeeNote,
    Team,
    WorkCenter,
)
from convertia.models.user import User
from convertia.rrhh.schemas import (
    AbsenceCreate,
    AbsenceResponse,
    EmployeeNoteCreate,
    EmployeeResponse,
    OrgNode,
    PastAttendanceCreate,
)

logger = structlog.get_logger()

ABSENCE_PENDING = "pending"
ABSENCE_APPROVED = "approved"
ABSENCE_REJECTED = "rejected"

ATTENDANCE_PRESENT = "present"
ATTENDANCE_COMPLETED = "completed"


def _get(db: Session, model, resource: str, identifier: Optional[int]):
    instance = db.query(model).filter(model.id == identifier).first()
    if not instance:
        raise NotFoundError(resource, str(identifier))
    return instance


def get_department(db: Session, department_id: int) -> Department:
    return _get(db, Department, "Department", department_id)


def get_work_center(db: Session, work_center_id: int) -> WorkCenter:
    return _get(db, WorkCenter, "Work center", work_center_id)


def get_team(db: Session, team_id: int) -> Team:
    return _get(db, Team, "Team", team_id)


def get_employee(db: Session, employee_id: int) -> Employee:
    return _get(db, Employee, "Employee", employee_id)


def get_absence(db: Session, absence_id: int) -> AbsenceRequest:
    return _get(db, AbsenceRequest, "Absence request", absence_id)


def get_note(db: Session, note_id: int) -> EmployeeNote:
    return _get(db, EmployeeNote, "Employee note", note_id)


# Employees

def report_counts(db: Session) -> Dict[int, int]:
    rows = (
        db.query(Employee.manager_id, func.count(Employee.id))
        .filter(Employee.manager_id.isnot(None))
        .group_by(Employee.manager_id)
        .all()
    )
    return {manager_id: count for manager_id, count in rows}


def to_employee_response(employee: Employee, report_count: int = 0) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        full_name=employee.full_name,
        email=employee.email,
        phone=employee.phone,
        position=employee.position,
        department_id=employee.department_id,
        department_name=employee.department.name if employee.department else None,
        work_center_id=employee.work_center_id,
        work_center_name=employee.work_center.name if employee.work_center else None,
        team_id=employee.team_id,
        team_name=employee.team.name if employee.team else None,
        manager_id=employee.manager_id,
        manager_name=employee.manager.full_name if employee.manager else None,
        status=employee.status,
        employment_type=employee.employment_type,
        hire_date=employee.hire_date,
        birth_date=employee.birth_date,
        salary=employee.salary,
        direct_report_count=report_count,
        created_at=employee.created_at,
        updated_at=employee.updated_at,
    )


def _check_references(db: Session, values: Dict[str, Any]):
    if values.get("department_id") is not None:
        get_department(db, values["department_id"])
    if values.get("work_center_id") is not None:
        get_work_center(db, values["work_center_id"])
    if values.get("team_id") is not None:
        get_team(db, values["team_id"])


def search_employees(
    db: Session,
    search: Optional[str] = None,
    department_id: Optional[int] = None,
    work_center_id: Optional[int] = None,
    status: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Employee]:
    query = db.query(Employee)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Employee.first_name.ilike(pattern),
                Employee.last_name.ilike(pattern),
                Employee.email.ilike(pattern),
                Employee.position.ilike(pattern),
            )
        )
    if department_id is not None:
        query = query.filter(Employee.department_id == department_id)
    if work_center_id is not None:
        query = query.filter(Employee.work_center_id == work_center_id)
    if status:
        query = query.filter(Employee.status == status)
    return query.order_by(Employee.last_name.asc(), Employee.first_name.asc()).offset(skip).limit(limit).all()


def create_employee(db: Session, values: Dict[str, Any], user: User) -> Employee:
    if db.query(Employee).filter(Employee.email == values["email"]).first():
        raise ConflictError("An employee with this email already exists")
    _check_references(db, values)

    manager_id = values.pop("manager_id", None)
    if manager_id is not None:
        get_employee(db, manager_id)

    employee = Employee(**values, manager_id=manager_id)
    db.add(employee)
    db.flush()
    record_action(db, user, "employee_created", "employee", employee.id)
    db.commit()
    db.refresh(employee)

    logger.info("employee_created", employee_id=employee.id, email=employee.email)
    return employee


def update_employee(db: Session, employee: Employee, changes: Dict[str, Any], user: User) -> Employee:
    if changes.get("email") and changes["email"] != employee.email:
        if db.query(Employee).filter(Employee.email == changes["email"]).first():
            raise ConflictError("An employee with this email already exists")
    _check_references(db, changes)

    for field, value in changes.items():
        setattr(employee, field, value)

    record_action(db, user, "employee_updated", "employee", employee.id, {"fields": sorted(changes)})
    db.commit()
    db.refresh(employee)

    logger.info("employee_updated", employee_id=employee.id, fields=sorted(changes))
    return employee


def delete_employee(db: Session, employee: Employee, user: User):
    # Direct reports are left without a manager
    db.query(Employee).filter(Employee.manager_id == employee.id).update({Employee.manager_id: None})
    record_action(db, user, "employee_deleted", "employee", employee.id, {"email": employee.email})
    db.delete(employee)
    db.commit()

    logger.info("employee_deleted", employee_id=employee.id)


# Org structure

def set_manager(db: Session, employee: Employee, manager_id: Optional[int], user: User) -> Employee:
    """Assign (or clear) the manager, refusing self-management and cycles"""
    if manager_id is not None:
        if manager_id == employee.id:
            raise ConflictError("An employee cannot manage themselves")

        manager = get_employee(db, manager_id)
        seen = set()
        while manager is not None and manager.id not in seen:
            if manager.manager_id == employee.id:
                raise ConflictError(
                    "Assignment would create a management cycle",
                    details={"employee_id": employee.id, "manager_id": manager_id},
                )
            seen.add(manager.id)
            manager = manager.manager

    previous = employee.manager_id
    employee.manager_id = manager_id
    record_action(
        db, user, "manager_assigned", "employee", employee.id,
        {"from": previous, "to": manager_id},
    )
    db.commit()
    db.refresh(employee)

    logger.info("employee_manager_set", employee_id=employee.id, manager_id=manager_id)
    return employee


def org_tree(db: Session) -> List[OrgNode]:
    employees = db.query(Employee).order_by(Employee.last_name.asc(), Employee.first_name.asc()).all()
    known = {e.id for e in employees}
    children: Dict[Optional[int], List[Employee]] = {}
    for employee in employees:
        parent = employee.manager_id if employee.manager_id in known else None
        children.setdefault(parent, []).append(employee)

    def build(employee: Employee) -> OrgNode:
        return OrgNode(
            id=employee.id,
            full_name=employee.full_name,
            position=employee.position,
            department_name=employee.department.name if employee.department else None,
            reports=[build(child) for child in children.get(employee.id, [])],
        )

    return [build(root) for root in children.get(None, [])]


# Attendance

def _apply_hours(record: AttendanceRecord):
    worked = (as_utc(record.check_out_time) - as_utc(record.check_in_time)).total_seconds() / 3600
    expected = record.expected_hours or settings.RRHH_EXPECTED_DAILY_HOURS
    record.hours_worked = round(worked, 2)
    record.overtime_hours = round(max(0.0, worked - expected), 2)
    record.status = ATTENDANCE_COMPLETED


def _attendance_for(db: Session, employee_id: int, day: date) -> Optional[AttendanceRecord]:
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.employee_id == employee_id, AttendanceRecord.date == day)
        .first()
    )


def check_in(db: Session, employee: Employee, notes: Optional[str] = None,
             now: Optional[datetime] = None) -> AttendanceRecord:
    now = now or utcnow()
    if _attendance_for(db, employee.id, now.date()):
        raise ConflictError("Check-in already registered for today")

    record = AttendanceRecord(
        employee_id=employee.id,
        date=now.date(),
        check_in_time=now,
        expected_hours=settings.RRHH_EXPECTED_DAILY_HOURS,
        status=ATTENDANCE_PRESENT,
        notes=notes,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("attendance_check_in", employee_id=employee.id, date=str(record.date))
    return record


def check_out(db: Session, employee: Employee, notes: Optional[str] = None,
              now: Optional[datetime] = None) -> AttendanceRecord:
    now = now or utcnow()
    record = _attendance_for(db, employee.id, now.date())
    if not record or not record.check_in_time:
        raise ConflictError("No check-in registered for today")
    if record.check_out_time:
        raise ConflictError("Check-out already registered for today")

    record.check_out_time = now
    if notes:
        record.notes = notes
    _apply_hours(record)
    db.commit()
    db.refresh(record)

    logger.info(
        "attendance_check_out",
        employee_id=employee.id,
        hours_worked=record.hours_worked,
        overtime_hours=record.overtime_hours,
    )
    return record


def register_past_attendance(db: Session, employee: Employee, data: PastAttendanceCreate,
                             user: User) -> AttendanceRecord:
    if data.date > utcnow().date():
        raise ValidationError("Attendance cannot be registered for a future date")
    if data.check_in_time.date() != data.date:
        raise ValidationError(
            "check_in_time must fall on the attendance date",
            details={"date": data.date.isoformat(), "check_in_date": data.check_in_time.date().isoformat()},
        )
    if _attendance_for(db, employee.id, data.date):
        raise ConflictError(f"Attendance already registered for {data.date.isoformat()}")

    record = AttendanceRecord(
        employee_id=employee.id,
        date=data.date,
        check_in_time=data.check_in_time,
        check_out_time=data.check_out_time,
        expected_hours=data.expected_hours or settings.RRHH_EXPECTED_DAILY_HOURS,
        status=ATTENDANCE_PRESENT,
        notes=data.notes,
    )
    if record.check_out_time:
        _apply_hours(record)

    db.add(record)
    db.flush()
    record_action(db, user, "attendance_registered", "attendance", record.id, {"date": data.date.isoformat()})
    db.commit()
    db.refresh(record)

    logger.info("attendance_registered", employee_id=employee.id, date=str(data.date))
    return record


def monthly_attendance(db: Session, employee_id: int, year: int, month: int) -> List[AttendanceRecord]:
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    return (
        db.query(AttendanceRecord)
        .filter(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date >= first,
            AttendanceRecord.date <= last,
        )
        .order_by(AttendanceRecord.date.asc())
        .all()
    )


# Absences

def to_absence_response(absence: AbsenceRequest) -> AbsenceResponse:
    return AbsenceResponse(
        id=absence.id,
        employee_id=absence.employee_id,
        employee_name=absence.employee.full_name if absence.employee else None,
        absence_type=absence.absence_type,
        start_date=absence.start_date,
        end_date=absence.end_date,
        days_requested=absence.days_requested,
        reason=absence.reason,
        status=absence.status,
        approved_by=absence.approved_by,
        approved_at=absence.approved_at,
        rejection_reason=absence.rejection_reason,
        created_at=absence.created_at,
    )


def create_absence(db: Session, data: AbsenceCreate) -> AbsenceRequest:
    get_employee(db, data.employee_id)
    absence = AbsenceRequest(
        employee_id=data.employee_id,
        absence_type=data.absence_type,
        start_date=data.start_date,
        end_date=data.end_date,
        days_requested=(data.end_date - data.start_date).days + 1,
        reason=data.reason,
        status=ABSENCE_PENDING,
    )
    db.add(absence)
    db.commit()
    db.refresh(absence)

    logger.info("absence_requested", absence_id=absence.id, employee_id=absence.employee_id,
                days=absence.days_requested)
    return absence


def decide_absence(db: Session, absence: AbsenceRequest, user: User, approve: bool,
                   rejection_reason: Optional[str] = None) -> AbsenceRequest:
    if absence.status != ABSENCE_PENDING:
        raise ConflictError(
            f"Absence request already {absence.status}",
            details={"status": absence.status},
        )

    absence.status = ABSENCE_APPROVED if approve else ABSENCE_REJECTED
    absence.approved_by = user.id
    absence.approved_at = utcnow()
    if not approve:
        absence.rejection_reason = rejection_reason

    record_action(db, user, f"absence_{absence.status}", "absence", absence.id)
    db.commit()
    db.refresh(absence)

    logger.info("absence_decided", absence_id=absence.id, status=absence.status)
    return absence


# Notes

def list_notes(db: Session, employee_id: int) -> List[EmployeeNote]:
    return (
        db.query(EmployeeNote)
        .filter(EmployeeNote.employee_id == employee_id)
        .order_by(EmployeeNote.created_at.desc(), EmployeeNote.id.desc())
        .all()
    )


def add_note(db: Session, employee: Employee, data: EmployeeNoteCreate, user: User) -> EmployeeNote:
    note = EmployeeNote(
        employee_id=employee.id,
        note_content=data.note_content,
        note_type=data.note_type,
        is_confidential=data.is_confidential,
        created_by=user.id,
    )
    db.add(note)
    db.flush()
    record_action(db, user, "employee_note_added", "employee", employee.id, {"note_id": note.id})
    db.commit()
    db.refresh(note)

    logger.info("employee_note_added", employee_id=employee.id, note_id=note.id, note_type=note.note_type)
    return note


def delete_note(db: Session, note: EmployeeNote, user: User):
    note_id = note.id
    record_action(db, user, "employee_note_deleted", "employee", note.employee_id, {"note_id": note_id})
    db.delete(note)
    db.commit()
    logger.info("employee_note_deleted", note_id=note_id)


# Analytics

def analytics(db: Session, start: date, end: date) -> Dict[str, Any]:
    by_department = (
        db.query(Department.name, func.count(Employee.id))
        .outerjoin(Employee, Employee.department_id == Department.id)
        .group_by(Department.id, Department.name)
        .order_by(Department.name.asc())
        .all()
    )
    unassigned = db.query(func.count(Employee.id)).filter(Employee.department_id.is_(None)).scalar() or 0

    by_status = (
        db.query(Employee.status, func.count(Employee.id))
        .group_by(Employee.status)
        .order_by(Employee.status.asc())
        .all()
    )

    records, total_hours, overtime = (
        db.query(
            func.count(AttendanceRecord.id),
            func.coalesce(func.sum(AttendanceRecord.hours_worked), 0.0),
            func.coalesce(func.sum(AttendanceRecord.overtime_hours), 0.0),
        )
        .filter(AttendanceRecord.date >= start, AttendanceRecord.date <= end)
        .one()
    )

    headcount = [{"key": name, "count": count} for name, count in by_department]
    if unassigned:
        headcount.append({"key": "Sin departamento", "count": unassigned})

    return {
        "total_employees": db.query(func.count(Employee.id)).scalar() or 0,
        "headcount_by_department": headcount,
        "headcount_by_status": [{"key": s, "count": count} for s, count in by_status],
        "attendance": {
            "start_date": start,
            "end_date": end,
            "records": records,
            "total_hours": round(float(total_hours), 2),
            "overtime_hours": round(float(overtime), 2),
        },
        "pending_absences": (
            db.query(func.count(AbsenceRequest.id))
            .filter(AbsenceRequest.status == ABSENCE_PENDING)
            .scalar()
            or 0
        ),
    }

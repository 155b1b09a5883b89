"""
RRHH routes
"""
from datetime import date, timedelta
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session
import structlog

from convertia.auth.dependencies import require_any_role
from convertia.auth.service import ROLE_ADMIN, ROLE_RRHH
from convertia.core.clock import utcnow
from convertia.core.database import get_db
from convertia.core.exceptions import ConflictError, ValidationError
from convertia.models.rrhh import AbsenceRequest, Department, Employee, Team, WorkCenter
from convertia.models.user import User
from convertia.rrhh import service
from convertia.rrhh.schemas import (
    AbsenceCreate,
    AbsenceRejection,
    AbsenceResponse,
    AttendanceResponse,
    CheckRequest,
    DepartmentCreate,
    DepartmentResponse,
    EmployeeCreate,
    EmployeeNoteCreate,
    EmployeeNoteResponse,
    EmployeeResponse,
    EmployeeUpdate,
    ManagerAssignment,
    OrgNode,
    PastAttendanceCreate,
    RRHHAnalytics,
    TeamCreate,
    TeamResponse,
    WorkCenterCreate,
    WorkCenterResponse,
)

router = APIRouter(prefix="/api/v1/rrhh", tags=["RRHH"])
logger = structlog.get_logger()

rrhh_user = require_any_role(ROLE_ADMIN, ROLE_RRHH)


# Departments, work centers, teams

@router.get("/departments", response_model=List[DepartmentResponse])
def list_departments(
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Department, func.count(Employee.id))
        .outerjoin(Employee, Employee.department_id == Department.id)
        .group_by(Department.id)
        .order_by(Department.name.asc())
        .all()
    )
    return [
        DepartmentResponse(id=d.id, name=d.name, description=d.description, employee_count=count)
        for d, count in rows
    ]


@router.post("/departments", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
def create_department(
    department_data: DepartmentCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    if db.query(Department).filter(Department.name == department_data.name).first():
        raise ConflictError("Department already exists")

    department = Department(**department_data.model_dump())
    db.add(department)
    db.commit()
    db.refresh(department)

    logger.info("department_created", department_id=department.id, name=department.name)
    return DepartmentResponse(id=department.id, name=department.name, description=department.description)


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    department = service.get_department(db, department_id)
    if department.employees:
        raise ConflictError("Cannot delete a department with employees")

    db.query(Team).filter(Team.department_id == department.id).update({Team.department_id: None})
    db.delete(department)
    db.commit()
    logger.info("department_deleted", department_id=department_id)


@router.get("/work-centers", response_model=List[WorkCenterResponse])
def list_work_centers(
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    return db.query(WorkCenter).order_by(WorkCenter.name.asc()).all()


@router.post("/work-centers", response_model=WorkCenterResponse, status_code=status.HTTP_201_CREATED)
def create_work_center(
    work_center_data: WorkCenterCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    values = work_center_data.model_dump()
    if values["country_code"]:
        values["country_code"] = values["country_code"].upper()

    work_center = WorkCenter(**values)
    db.add(work_center)
    db.commit()
    db.refresh(work_center)

    logger.info("work_center_created", work_center_id=work_center.id, country_code=work_center.country_code)
    return work_center


@router.get("/teams", response_model=List[TeamResponse])
def list_teams(
    department_id: Optional[int] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    query = db.query(Team)
    if department_id is not None:
        query = query.filter(Team.department_id == department_id)
    return query.order_by(Team.name.asc()).all()


@router.post("/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    if team_data.department_id is not None:
        service.get_department(db, team_data.department_id)

    team = Team(**team_data.model_dump())
    db.add(team)
    db.commit()
    db.refresh(team)

    logger.info("team_created", team_id=team.id, department_id=team.department_id)
    return team


# Employees

@router.get("/employees", response_model=List[EmployeeResponse])
def list_employees(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = None,
    department_id: Optional[int] = None,
    work_center_id: Optional[int] = None,
    status: Optional[str] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Search employees; each row carries its direct-report count"""
    employees = service.search_employees(
        db,
        search=search,
        department_id=department_id,
        work_center_id=work_center_id,
        status=status,
        skip=skip,
        limit=limit,
    )
    counts = service.report_counts(db)
    return [service.to_employee_response(e, counts.get(e.id, 0)) for e in employees]


@router.post("/employees", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    employee_data: EmployeeCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.create_employee(db, employee_data.model_dump(), current_user)
    return service.to_employee_response(employee)


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    return service.to_employee_response(employee, len(employee.direct_reports))


@router.put("/employees/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    employee_data: EmployeeUpdate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    changes = employee_data.model_dump(exclude_unset=True)
    for field in ("first_name", "last_name", "email", "position", "status"):
        if field in changes and not changes[field]:
            raise ValidationError(f"{field} cannot be empty")

    employee = service.update_employee(db, employee, changes, current_user)
    return service.to_employee_response(employee, len(employee.direct_reports))


@router.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    service.delete_employee(db, service.get_employee(db, employee_id), current_user)


# Org structure

@router.put("/employees/{employee_id}/manager", response_model=EmployeeResponse)
def set_manager(
    employee_id: int,
    assignment: ManagerAssignment,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Set or clear the employee's manager"""
    employee = service.get_employee(db, employee_id)
    employee = service.set_manager(db, employee, assignment.manager_id, current_user)
    return service.to_employee_response(employee, len(employee.direct_reports))


@router.get("/employees/{employee_id}/reports", response_model=List[EmployeeResponse])
def list_direct_reports(
    employee_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    counts = service.report_counts(db)
    return [service.to_employee_response(e, counts.get(e.id, 0)) for e in employee.direct_reports]


@router.get("/org-chart", response_model=List[OrgNode])
def org_chart(
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Management hierarchy rooted at employees without a manager"""
    return service.org_tree(db)


# Attendance

@router.post("/employees/{employee_id}/check-in", response_model=AttendanceResponse,
             status_code=status.HTTP_201_CREATED)
def check_in(
    employee_id: int,
    request: Optional[CheckRequest] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    return service.check_in(db, employee, notes=request.notes if request else None)


@router.post("/employees/{employee_id}/check-out", response_model=AttendanceResponse)
def check_out(
    employee_id: int,
    request: Optional[CheckRequest] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    return service.check_out(db, employee, notes=request.notes if request else None)


@router.post("/employees/{employee_id}/attendance", response_model=AttendanceResponse,
             status_code=status.HTTP_201_CREATED)
def register_attendance(
    employee_id: int,
    attendance_data: PastAttendanceCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Register a past workday with explicit times"""
    employee = service.get_employee(db, employee_id)
    return service.register_past_attendance(db, employee, attendance_data, current_user)


@router.get("/employees/{employee_id}/attendance", response_model=List[AttendanceResponse])
def monthly_attendance(
    employee_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Attendance of one month, current month by default"""
    service.get_employee(db, employee_id)
    today = utcnow().date()
    return service.monthly_attendance(db, employee_id, year or today.year, month or today.month)


# Notes

@router.get("/employees/{employee_id}/notes", response_model=List[EmployeeNoteResponse])
def list_employee_notes(
    employee_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Notes on the employee file, newest first"""
    service.get_employee(db, employee_id)
    return service.list_notes(db, employee_id)


@router.post("/employees/{employee_id}/notes", response_model=EmployeeNoteResponse,
             status_code=status.HTTP_201_CREATED)
def add_employee_note(
    employee_id: int,
    note_data: EmployeeNoteCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    employee = service.get_employee(db, employee_id)
    return service.add_note(db, employee, note_data, current_user)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee_note(
    note_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    service.delete_note(db, service.get_note(db, note_id), current_user)


# Absences

@router.get("/absences", response_model=List[AbsenceResponse])
def list_absences(
    status: Optional[str] = None,
    employee_id: Optional[int] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    query = db.query(AbsenceRequest)
    if status:
        query = query.filter(AbsenceRequest.status == status)
    if employee_id is not None:
        query = query.filter(AbsenceRequest.employee_id == employee_id)
    absences = query.order_by(AbsenceRequest.created_at.desc(), AbsenceRequest.id.desc()).all()
    return [service.to_absence_response(a) for a in absences]


@router.post("/absences", response_model=AbsenceResponse, status_code=status.HTTP_201_CREATED)
def create_absence(
    absence_data: AbsenceCreate,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    return service.to_absence_response(service.create_absence(db, absence_data))


@router.post("/absences/{absence_id}/approve", response_model=AbsenceResponse)
def approve_absence(
    absence_id: int,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    absence = service.get_absence(db, absence_id)
    return service.to_absence_response(service.decide_absence(db, absence, current_user, approve=True))


@router.post("/absences/{absence_id}/reject", response_model=AbsenceResponse)
def reject_absence(
    absence_id: int,
    rejection: AbsenceRejection,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    absence = service.get_absence(db, absence_id)
    return service.to_absence_response(
        service.decide_absence(db, absence, current_user, approve=False,
                               rejection_reason=rejection.rejection_reason)
    )


# Analytics

@router.get("/analytics", response_model=RRHHAnalytics)
def rrhh_analytics(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(rrhh_user),
    db: Session = Depends(get_db),
):
    """Headcount and attendance figures; last 30 days by default"""
    end = end_date or utcnow().date()
    start = start_date or end - timedelta(days=30)
    if end < start:
        raise ValidationError("end_date must not be before start_date")
    return service.analytics(db, start, end)

"""
RRHH Pydantic schemas
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, EmailStr, Field, model_validator
from datetime import date, datetime

from convertia.core.clock import as_utc

EmployeeStatus = Literal["Activo", "Inactivo", "Vacaciones", "Licencia", "Suspendido"]
AbsenceType = Literal["vacaciones", "enfermedad", "personal", "maternidad", "paternidad", "otro"]
NoteType = Literal["general", "performance", "disciplinary", "achievement", "training", "medical", "administrative"]


# Organisation

class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class DepartmentResponse(DepartmentCreate):
    id: int
    employee_count: int = 0


class WorkCenterCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=2)
    address: Optional[str] = None


class WorkCenterResponse(WorkCenterCreate):
    id: int

    class Config:
        from_attributes = True


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    department_id: Optional[int] = None


class TeamResponse(TeamCreate):
    id: int

    class Config:
        from_attributes = True


# Employees

class EmployeeBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    position: str = Field(..., min_length=1, max_length=255)
    department_id: Optional[int] = None
    work_center_id: Optional[int] = None
    team_id: Optional[int] = None
    manager_id: Optional[int] = None
    status: EmployeeStatus = "Activo"
    employment_type: Optional[str] = None
    hire_date: Optional[date] = None
    birth_date: Optional[date] = None
    salary: Optional[float] = Field(default=None, ge=0)


class EmployeeCreate(EmployeeBase):
    """Employee creation schema"""


class EmployeeUpdate(BaseModel):
    """Employee update schema"""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    position: Optional[str] = Field(default=None, min_length=1, max_length=255)
    department_id: Optional[int] = None
    work_center_id: Optional[int] = None
    team_id: Optional[int] = None
    status: Optional[EmployeeStatus] = None
    employment_type: Optional[str] = None
    hire_date: Optional[date] = None
    birth_date: Optional[date] = None
    salary: Optional[float] = Field(default=None, ge=0)


class EmployeeResponse(EmployeeBase):
    id: int
    full_name: str
    department_name: Optional[str] = None
    work_center_name: Optional[str] = None
    team_name: Optional[str] = None
    manager_name: Optional[str] = None
    direct_report_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ManagerAssignment(BaseModel):
    manager_id: Optional[int] = None


class OrgNode(BaseModel):
    id: int
    full_name: str
    position: str
    department_name: Optional[str] = None
    reports: List["OrgNode"] = []


# Attendance

class CheckRequest(BaseModel):
    notes: Optional[str] = None


class PastAttendanceCreate(BaseModel):
    """Attendance registered after the fact"""
    date: date
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    expected_hours: Optional[float] = Field(default=None, gt=0, le=24)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        # Naive times are taken as UTC so mixed inputs stay comparable
        self.check_in_time = as_utc(self.check_in_time)
        self.check_out_time = as_utc(self.check_out_time)
        if self.check_out_time and self.check_out_time <= self.check_in_time:
            raise ValueError("check_out_time must be after check_in_time")
        return self


class AttendanceResponse(BaseModel):
    id: int
    employee_id: int
    date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    expected_hours: Optional[float] = None
    hours_worked: Optional[float] = None
    overtime_hours: Optional[float] = None
    status: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True


# Absences

class AbsenceCreate(BaseModel):
    employee_id: int
    absence_type: AbsenceType
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class AbsenceRejection(BaseModel):
    rejection_reason: str = Field(..., min_length=1)


class AbsenceResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    absence_type: str
    start_date: date
    end_date: date
    days_requested: int
    reason: Optional[str] = None
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None


# Notes

class EmployeeNoteCreate(BaseModel):
    note_content: str = Field(..., min_length=1)
    note_type: NoteType = "general"
    is_confidential: bool = False


class EmployeeNoteResponse(BaseModel):
    id: int
    employee_id: int
    note_content: str
    note_type: str
    is_confidential: bool
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Analytics

class CountItem(BaseModel):
    key: str
    count: int


class AttendanceSummary(BaseModel):
    start_date: date
    end_date: date
    records: int
    total_hours: float
    overtime_hours: float


class RRHHAnalytics(BaseModel):
    total_employees: int
    headcount_by_department: List[CountItem]
    headcount_by_status: List[CountItem]
    attendance: AttendanceSummary
    pending_absences: int


OrgNode.model_rebuild()

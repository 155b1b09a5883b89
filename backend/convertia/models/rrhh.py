"""
RRHH (human resources) models
"""
from sqlalchemy import (
    Column,
    Integer,
    Float,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from convertia.core.clock import utcnow
from convertia.core.database import Base


class Department(Base):
    __tablename__ = "rrhh_departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)

    teams = relationship("Team", back_populates="department")
    employees = relationship("Employee", back_populates="department")


class WorkCenter(Base):
    __tablename__ = "rrhh_work_centers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    country_code = Column(String(2))
    address = Column(String(500))

    employees = relationship("Employee", back_populates="work_center")


class Team(Base):
    __tablename__ = "rrhh_teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    department_id = Column(Integer, ForeignKey("rrhh_departments.id", ondelete="SET NULL"), index=True)

    department = relationship("Department", back_populates="teams")
    employees = relationship("Employee", back_populates="team")


class Employee(Base):
    """Personnel record with a self-referential manager relationship"""

    __tablename__ = "rrhh_employees"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50))
    position = Column(String(255), nullable=False)

    department_id = Column(Integer, ForeignKey("rrhh_departments.id", ondelete="SET NULL"), index=True)
    work_center_id = Column(Integer, ForeignKey("rrhh_work_centers.id", ondelete="SET NULL"), index=True)
    team_id = Column(Integer, ForeignKey("rrhh_teams.id", ondelete="SET NULL"), index=True)
    manager_id = Column(Integer, ForeignKey("rrhh_employees.id", ondelete="SET NULL"), index=True)

    status = Column(String(20), default="Activo", index=True)  # Activo, Inactivo, Vacaciones, Licencia, Suspendido
    employment_type = Column(String(50))
    hire_date = Column(Date)
    birth_date = Column(Date)
    salary = Column(Float)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    department = relationship("Department", back_populates="employees")
    work_center = relationship("WorkCenter", back_populates="employees")
    team = relationship("Team", back_populates="employees")
    manager = relationship("Employee", remote_side=[id], back_populates="direct_reports")
    direct_reports = relationship("Employee", back_populates="manager")
    attendance_records = relationship("AttendanceRecord", back_populates="employee", cascade="all, delete-orphan")
    absence_requests = relationship("AbsenceRequest", back_populates="employee", cascade="all, delete-orphan")
    notes = relationship("EmployeeNote", back_populates="employee", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class AttendanceRecord(Base):
    """One workday of an employee"""

    __tablename__ = "rrhh_attendance_records"
    __table_args__ = (UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),)

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("rrhh_employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    check_in_time = Column(DateTime(timezone=True))
    check_out_time = Column(DateTime(timezone=True))
    expected_hours = Column(Float, default=8.0)
    hours_worked = Column(Float)
    overtime_hours = Column(Float)
    status = Column(String(20), default="present")  # present, completed
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    employee = relationship("Employee", back_populates="attendance_records")


class AbsenceRequest(Base):
    __tablename__ = "rrhh_absence_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("rrhh_employees.id", ondelete="CASCADE"), nullable=False, index=True)
    absence_type = Column(String(50), nullable=False)  # vacaciones, enfermedad, personal, ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days_requested = Column(Integer, nullable=False)
    reason = Column(Text)

    status = Column(String(20), default="pending", index=True)  # pending, approved, rejected
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    approved_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    employee = relationship("Employee", back_populates="absence_requests")


class EmployeeNote(Base):
    """Free-text note kept on an employee file"""

    __tablename__ = "rrhh_employee_notes"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("rrhh_employees.id", ondelete="CASCADE"), nullable=False, index=True)
    note_content = Column(Text, nullable=False)
    note_type = Column(String(30), default="general")  # general, performance, disciplinary, achievement, training, medical, administrative
    is_confidential = Column(Boolean, default=False)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    employee = relationship("Employee", back_populates="notes")

"""
Database models
"""
from convertia.models.user import User, Role
from convertia.models.job import Job
from convertia.models.campaign import Campaign
from convertia.models.candidate import Candidate, Application
from convertia.models.training import TrainingCode, TrainingSession, TrainingMessage, TrainingEvaluation
from convertia.models.audit import AuditLog
from convertia.models.rrhh import (
    Department,
    WorkCenter,
    Team,
    Employee,
    AttendanceRecord,
    AbsenceRequest,
    EmployeeNote,
)

__all__ = [
    "User",
    "Role",
    "Job",
    "Campaign",
    "Candidate",
    "Application",
    "TrainingCode",
    "TrainingSession",
    "TrainingMessage",
    "TrainingEvaluation",
    "AuditLog",
    "Department",
    "WorkCenter",
    "Team",
    "Employee",
    "AttendanceRecord",
    "AbsenceRequest",
    "EmployeeNote",
]

"""
Application pipeline statuses and the transitions allowed between them
"""
from enum import Enum
from typing import Dict, FrozenSet, List

from convertia.core.exceptions import InvalidTransitionError, ValidationError


class ApplicationStatus(str, Enum):
    NEW = "new"
    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    HR_INTERVIEW = "entrevista-rc"
    TECHNICAL_INTERVIEW = "entrevista-et"
    TECHNICAL_TEST = "prueba-tecnica"
    CAMPAIGN_ASSIGNMENT = "asignar-campana"
    TRAINING = "training"
    HIRING = "contratar"
    HIRED = "contratado"
    REJECTED = "rejected"
    DISCARDED = "discarded"
    BLOCKED = "blocked"


STATUS_LABELS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.NEW: "Nuevo Candidato",
    ApplicationStatus.APPLIED: "Aplicado",
    ApplicationStatus.UNDER_REVIEW: "Bajo Revisión",
    ApplicationStatus.HR_INTERVIEW: "Entrevista Inicial",
    ApplicationStatus.TECHNICAL_INTERVIEW: "Entrevista Técnica",
    ApplicationStatus.TECHNICAL_TEST: "Prueba Técnica",
    ApplicationStatus.CAMPAIGN_ASSIGNMENT: "En Campaña",
    ApplicationStatus.TRAINING: "En Formación",
    ApplicationStatus.HIRING: "Proceso de Contratación",
    ApplicationStatus.HIRED: "Contratado",
    ApplicationStatus.REJECTED: "Rechazado",
    ApplicationStatus.DISCARDED: "Descartado",
    ApplicationStatus.BLOCKED: "Bloqueado",
}

# Values written by older versions of the console
LEGACY_STATUSES: Dict[str, ApplicationStatus] = {
    "reviewing": ApplicationStatus.UNDER_REVIEW,
    "interview": ApplicationStatus.HR_INTERVIEW,
    "selected": ApplicationStatus.HIRING,
    "hired": ApplicationStatus.HIRING,
    "pending": ApplicationStatus.NEW,
}

INTERVIEW_STATUSES = (ApplicationStatus.HR_INTERVIEW, ApplicationStatus.TECHNICAL_INTERVIEW)

_CLOSING = frozenset({ApplicationStatus.REJECTED, ApplicationStatus.DISCARDED, ApplicationStatus.BLOCKED})

ALLOWED_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.NEW: frozenset({
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.HR_INTERVIEW,
    }) | _CLOSING,
    ApplicationStatus.APPLIED: frozenset({
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.HR_INTERVIEW,
    }) | _CLOSING,
    ApplicationStatus.UNDER_REVIEW: frozenset({
        ApplicationStatus.HR_INTERVIEW,
        ApplicationStatus.TECHNICAL_TEST,
    }) | _CLOSING,
    ApplicationStatus.HR_INTERVIEW: frozenset({
        ApplicationStatus.TECHNICAL_INTERVIEW,
        ApplicationStatus.TECHNICAL_TEST,
        ApplicationStatus.CAMPAIGN_ASSIGNMENT,
        ApplicationStatus.HIRING,
    }) | _CLOSING,
    ApplicationStatus.TECHNICAL_INTERVIEW: frozenset({
        ApplicationStatus.TECHNICAL_TEST,
        ApplicationStatus.CAMPAIGN_ASSIGNMENT,
        ApplicationStatus.HIRING,
    }) | _CLOSING,
    ApplicationStatus.TECHNICAL_TEST: frozenset({
        ApplicationStatus.TECHNICAL_INTERVIEW,
        ApplicationStatus.CAMPAIGN_ASSIGNMENT,
        ApplicationStatus.HIRING,
    }) | _CLOSING,
    ApplicationStatus.CAMPAIGN_ASSIGNMENT: frozenset({
        ApplicationStatus.TRAINING,
        ApplicationStatus.HIRING,
    }) | _CLOSING,
    ApplicationStatus.TRAINING: frozenset({
        ApplicationStatus.HIRING,
    }) | _CLOSING,
    ApplicationStatus.HIRING: frozenset({
        ApplicationStatus.HIRED,
    }) | _CLOSING,
    ApplicationStatus.HIRED: frozenset(),
    # Closed applications can only be reopened
    ApplicationStatus.REJECTED: frozenset({ApplicationStatus.NEW}),
    ApplicationStatus.DISCARDED: frozenset({ApplicationStatus.NEW}),
    ApplicationStatus.BLOCKED: frozenset({ApplicationStatus.NEW}),
}


def parse_status(value: str) -> ApplicationStatus:
    """Canonical status for a stored or submitted value"""
    if value in LEGACY_STATUSES:
        return LEGACY_STATUSES[value]
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown application status: {value}",
            details={"allowed": [s.value for s in ApplicationStatus]},
        )


def status_label(value: str) -> str:
    try:
        return STATUS_LABELS[parse_status(value)]
    except ValidationError:
        return value


def allowed_next(current: str) -> List[str]:
    return sorted(s.value for s in ALLOWED_TRANSITIONS[parse_status(current)])


def check_transition(current: str, requested: str) -> ApplicationStatus:
    """Return the target status or raise InvalidTransitionError"""
    source = parse_status(current)
    target = parse_status(requested)
    if target not in ALLOWED_TRANSITIONS[source]:
        raise InvalidTransitionError(source.value, target.value, allowed_next(source.value))
    return target

"""
Leave application ledger.

Owns every ``LeaveApplication`` and is the only code that changes one.
Status moves forward from ``pending`` to exactly one of ``approved``,
``rejected`` or ``cancelled`` and never leaves those states. Records are
never deleted.
"""
import logging
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional

from api.v1.services.hr.leave_errors import Rejection, invalid_transition, not_found
from api.v1.services.hr.leave_services import TERMINAL_STATUSES, LeaveApplication, LeaveStatus, utcnow

logger = logging.getLogger(__name__)

DECISION_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


def parse_status(status) -> Optional[LeaveStatus]:
    try:
        return LeaveStatus(status)
    except ValueError:
        return None


class LeaveLedger:

    def __init__(self, applications: Optional[Iterable[LeaveApplication]] = None):
        self._applications: Dict[str, LeaveApplication] = {}
        for application in applications or []:
            self._applications[application.id] = application

    def __len__(self):
        return len(self._applications)

    def get(self, application_id: str) -> "LeaveApplication | Rejection":
        application = self._applications.get(str(application_id))
        if application is None:
            return not_found('leave request', application_id)
        return application

    def append(self, application: LeaveApplication) -> LeaveApplication:
        if application.id in self._applications:
            raise ValueError(f"Leave request {application.id} already exists")
        self._applications[application.id] = application
        return application

    def check_transition(self, application_id: str, status) -> "LeaveApplication | Rejection":
        """Return the application if it may move to ``status``, else the rejection."""
        application = self.get(application_id)
        if isinstance(application, Rejection):
            return application
        if application.status in TERMINAL_STATUSES or parse_status(status) not in TERMINAL_STATUSES:
            return invalid_transition(application.status, status)
        return application

    def set_status(self, application_id: str, status, approver_notes: Optional[str] = None,
                   approved_by: Optional[str] = None) -> "LeaveApplication | Rejection":
        if parse_status(status) not in DECISION_STATUSES:
            current = self.get(application_id)
            if isinstance(current, Rejection):
                return current
            return invalid_transition(current.status, status)

        application = self.check_transition(application_id, status)
        if isinstance(application, Rejection):
            return application

        update = {'status': LeaveStatus(status), 'updated_at': utcnow()}
        if approver_notes:
            update['approver_notes'] = approver_notes
        if approved_by:
            update['approved_by'] = approved_by
        return self._replace(application, update)

    def cancel(self, application_id: str) -> "LeaveApplication | Rejection":
        application = self.check_transition(application_id, LeaveStatus.CANCELLED)
        if isinstance(application, Rejection):
            return application
        return self._replace(application, {'status': LeaveStatus.CANCELLED, 'updated_at': utcnow()})

    def _replace(self, application: LeaveApplication, update: dict) -> LeaveApplication:
        updated = application.model_copy(update=update)
        self._applications[updated.id] = updated
        logger.info("Leave request %s: %s -> %s", updated.id, application.status.value, updated.status.value)
        return updated

    # --- read-only views ---

    def all(self) -> List[LeaveApplication]:
        return sorted(self._applications.values(), key=lambda a: a.created_at)

    def for_employee(self, employee_id: str) -> List[LeaveApplication]:
        return [a for a in self.all() if a.employee_id == str(employee_id)]

    def with_status(self, status, department: Optional[str] = None) -> List[LeaveApplication]:
        return [
            a for a in self.all()
            if a.status == status and (department is None or a.department == department)
        ]

    def pending_approvals(self, department: Optional[str] = None) -> List[LeaveApplication]:
        return self.with_status(LeaveStatus.PENDING, department)

    def overlapping(self, start: date, end: Optional[date] = None,
                    status=LeaveStatus.APPROVED) -> List[LeaveApplication]:
        """Applications whose date range touches ``start``..``end`` (a single day when ``end`` is omitted)."""
        end = end or start
        return [
            a for a in self.all()
            if a.overlaps(start, end) and (status is None or a.status == status)
        ]

    def status_counts(self, employee_id: Optional[str] = None) -> Dict[str, int]:
        applications = self.for_employee(employee_id) if employee_id else self.all()
        counts = Counter(a.status.value for a in applications)
        return {status.value: counts.get(status.value, 0) for status in LeaveStatus}

    def to_records(self) -> List[dict]:
        return [a.model_dump(mode='json') for a in self.all()]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "LeaveLedger":
        return cls(LeaveApplication.model_validate(record) for record in records)

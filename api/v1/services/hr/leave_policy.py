"""
Leave policy rules.

``submit_application`` validates a draft and admits it to the ledger as a
pending request. ``decide_application`` approves or rejects a pending
request; approval debits the request's duration from the employee's
balance, and a debit that cannot be covered leaves the request pending.

Validation order on submission, first failure wins:

1. start date on or before end date
2. reason / document required by the leave type
3. enough ``annual`` balance (annual leave only)
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional
from uuid import uuid4

from api.v1.services.hr.leave_balances import LeaveBalanceStore
from api.v1.services.hr.leave_calendar import calculate_duration
from api.v1.services.hr.leave_errors import (
    Rejection,
    insufficient_balance,
    invalid_range,
    missing_required_field,
    not_found,
)
from api.v1.services.hr.leave_ledger import LeaveLedger
from api.v1.services.hr.leave_services import (
    LEAVE_TYPE_POLICIES,
    UNFUNDED_LEAVE_TYPES,
    Holiday,
    LeaveApplication,
    LeaveApplicationCreateSchema,
    LeaveStatus,
    LeaveType,
    utcnow,
)

logger = logging.getLogger(__name__)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def check_required_fields(draft: LeaveApplicationCreateSchema) -> Optional[Rejection]:
    policy = LEAVE_TYPE_POLICIES[draft.leave_type]
    if policy.requires_reason and not _has_text(draft.reason):
        return missing_required_field('reason', draft.leave_type)
    if policy.requires_document and not draft.documents:
        return missing_required_field('document', draft.leave_type)
    return None


def submit_application(draft: LeaveApplicationCreateSchema,
                       balances: LeaveBalanceStore,
                       ledger: LeaveLedger,
                       holidays: Iterable[Holiday],
                       now: Optional[datetime] = None,
                       id_factory: Callable[[], str] = lambda: str(uuid4())) -> "LeaveApplication | Rejection":
    if not draft.employee_id:
        return missing_required_field('employee_id')

    if draft.start_date > draft.end_date:
        return invalid_range(draft.start_date, draft.end_date)

    rejection = check_required_fields(draft)
    if rejection is not None:
        return rejection

    duration = calculate_duration(draft.start_date, draft.end_date, draft.is_half_day, holidays)
    if isinstance(duration, Rejection):
        return duration

    if draft.leave_type == LeaveType.ANNUAL:
        balance = balances.get(draft.employee_id)
        if balance is None:
            return not_found('leave balance', draft.employee_id)
        if duration > balance.annual:
            return insufficient_balance(LeaveType.ANNUAL, balance.annual, duration)

    now = now or utcnow()
    application = LeaveApplication(
        id=id_factory(),
        employee_id=draft.employee_id,
        employee_name=draft.employee_name,
        leave_type=draft.leave_type,
        start_date=draft.start_date,
        end_date=draft.end_date,
        is_half_day=draft.is_half_day,
        reason=draft.reason,
        documents=list(draft.documents),
        status=LeaveStatus.PENDING,
        duration=duration,
        department=draft.department,
        created_at=now,
        updated_at=now,
        applied_date=now,
    )
    ledger.append(application)
    logger.info("Leave request %s submitted by %s: %s, %s day(s)",
                application.id, application.employee_id, application.leave_type.value, duration)
    return application


def decide_application(application_id: str,
                       status,
                       balances: LeaveBalanceStore,
                       ledger: LeaveLedger,
                       approver_notes: Optional[str] = None,
                       approved_by: Optional[str] = None) -> "LeaveApplication | Rejection":
    application = ledger.check_transition(application_id, status)
    if isinstance(application, Rejection):
        return application
    status = LeaveStatus(status)
    if status == LeaveStatus.CANCELLED:
        return ledger.cancel(application_id)

    if status == LeaveStatus.APPROVED and application.leave_type not in UNFUNDED_LEAVE_TYPES:
        debited = balances.adjust(application.employee_id, application.leave_type, -application.duration)
        if isinstance(debited, Rejection):
            logger.warning("Approval of leave request %s refused: %s", application_id, debited.message)
            return debited

    return ledger.set_status(application_id, status, approver_notes=approver_notes, approved_by=approved_by)

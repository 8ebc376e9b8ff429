"""
Leave data store.

``LeaveDataStore`` is built once per application and handed to whoever
needs it (the Flask app keeps it in ``app.extensions['leave_data']``).
It holds the holiday calendar, balances, ledger and team directory in
memory, serialises mutations behind one lock, and writes the touched
collections to a ``RecordStore`` with an explicit ``commit`` after each
successful mutation. A commit that fails rolls memory back and re-raises.

A ``RecordStore`` is a get-all / replace-all surface over JSON-ready rows,
one list per collection.
"""
import copy
import logging
import math
import threading
from datetime import date
from typing import Dict, Iterable, List, Optional

from supabase import create_client, Client

from api.v1.services.hr.leave_balances import BALANCE_FIELDS, LeaveBalanceStore
from api.v1.services.hr.leave_calendar import HolidayCalendar, month_bounds
from api.v1.services.hr.leave_errors import (
    Rejection,
    invalid_value,
    missing_required_field,
    not_found,
)
from api.v1.services.hr.leave_ledger import LeaveLedger
from api.v1.services.hr.leave_policy import decide_application, submit_application
from api.v1.services.hr.leave_services import (
    Holiday,
    LeaveApplication,
    LeaveApplicationCreateSchema,
    LeaveBalance,
    LeaveStatus,
    TeamMember,
)

logger = logging.getLogger(__name__)

APPLICATIONS = 'leave_applications'
BALANCES = 'leave_balances'
HOLIDAYS = 'holidays'
TEAM_MEMBERS = 'team_members'

COLLECTION_KEYS = {
    APPLICATIONS: 'id',
    BALANCES: 'employee_id',
    HOLIDAYS: 'id',
    TEAM_MEMBERS: 'id',
}


class RecordStore:
    """Persistence collaborator: load and replace whole collections."""

    def load(self, collection: str) -> List[dict]:
        raise NotImplementedError

    def save(self, collection: str, records: List[dict]) -> None:
        raise NotImplementedError


class MemoryRecordStore(RecordStore):

    def __init__(self, initial: Optional[Dict[str, List[dict]]] = None):
        self._collections: Dict[str, List[dict]] = copy.deepcopy(initial or {})

    def load(self, collection):
        return copy.deepcopy(self._collections.get(collection, []))

    def save(self, collection, records):
        self._collections[collection] = copy.deepcopy(list(records))


class SupabaseRecordStore(RecordStore):
    """Collections map to Supabase tables of the same name."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_config(cls, config) -> "SupabaseRecordStore":
        return cls(create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY))

    def load(self, collection):
        response = self.client.from_(collection).select('*').execute()
        return response.data or []

    def save(self, collection, records):
        key = COLLECTION_KEYS[collection]
        records = list(records)
        if not records:
            self.client.from_(collection).delete().neq(key, '').execute()
            return
        self.client.from_(collection).upsert(records, on_conflict=key).execute()
        keys = [str(record[key]) for record in records]
        self.client.from_(collection).delete().not_.in_(key, keys).execute()


class TeamDirectory:
    """Read-only employee directory used by team views."""

    def __init__(self, members: Optional[Iterable[TeamMember]] = None):
        self._members = {m.id: m for m in members or []}

    def all(self, department: Optional[str] = None) -> List[TeamMember]:
        return [m for m in self._members.values() if department is None or m.department == department]

    def get(self, member_id: str) -> Optional[TeamMember]:
        return self._members.get(str(member_id))

    def to_records(self) -> List[dict]:
        return [m.model_dump(mode='json') for m in self._members.values()]


class LeaveDataStore:

    def __init__(self, records: RecordStore, id_factory=None, clock=None):
        self.records = records
        self.id_factory = id_factory
        self.clock = clock
        self.holidays = HolidayCalendar()
        self.balances = LeaveBalanceStore()
        self.ledger = LeaveLedger()
        self.team = TeamDirectory()
        self._lock = threading.RLock()

    def load(self, seed: Optional[dict] = None) -> "LeaveDataStore":
        """Read every collection; if storage is empty and ``seed`` is given, start from it."""
        with self._lock:
            loaded = {name: self.records.load(name) for name in COLLECTION_KEYS}
            if seed and not any(loaded.values()):
                logger.info("Storage is empty, loading seed data")
                loaded = {name: seed.get(name, []) for name in COLLECTION_KEYS}
                for name, rows in loaded.items():
                    self.records.save(name, rows)

            self.holidays = HolidayCalendar.from_records(loaded[HOLIDAYS])
            self.balances = LeaveBalanceStore.from_records(loaded[BALANCES])
            self.ledger = LeaveLedger.from_records(loaded[APPLICATIONS])
            self.team = TeamDirectory(TeamMember.model_validate(r) for r in loaded[TEAM_MEMBERS])
            logger.info("Loaded %d leave requests, %d balances, %d holidays",
                        len(self.ledger), len(self.balances), len(self.holidays))
        return self

    def _serializers(self):
        return {
            APPLICATIONS: self.ledger.to_records,
            BALANCES: self.balances.to_records,
            HOLIDAYS: self.holidays.to_records,
            TEAM_MEMBERS: self.team.to_records,
        }

    def commit(self, *collections: str) -> None:
        serializers = self._serializers()
        for name in collections or tuple(serializers):
            self.records.save(name, serializers[name]())
            logger.debug("Committed %s", name)

    def _restore(self, snapshot: Dict[str, List[dict]]) -> None:
        if HOLIDAYS in snapshot:
            self.holidays = HolidayCalendar.from_records(snapshot[HOLIDAYS])
        if BALANCES in snapshot:
            self.balances = LeaveBalanceStore.from_records(snapshot[BALANCES])
        if APPLICATIONS in snapshot:
            self.ledger = LeaveLedger.from_records(snapshot[APPLICATIONS])

    def _apply(self, operation, *collections: str):
        """
        Run ``operation`` under the lock and commit ``collections`` if it succeeds.

        Collections are saved in the order given. If a save fails, memory and
        the collections already saved are put back to their state before the
        operation, and the error is raised.
        """
        with self._lock:
            snapshot = {name: self._serializers()[name]() for name in collections}
            result = operation()
            if isinstance(result, Rejection):
                return result

            saved = []
            try:
                for name in collections:
                    self.commit(name)
                    saved.append(name)
            except Exception:
                logger.exception("Commit of %s failed, rolling back", ", ".join(collections))
                self._restore(snapshot)
                for name in saved:
                    self.records.save(name, snapshot[name])
                raise
            return result

    # --- mutations ---

    def submit_application(self, draft) -> "LeaveApplication | Rejection":
        if isinstance(draft, dict):
            draft = LeaveApplicationCreateSchema(**draft)
        kwargs = {}
        if self.id_factory:
            kwargs['id_factory'] = self.id_factory
        return self._apply(
            lambda: submit_application(draft, self.balances, self.ledger, self.holidays,
                                       now=self.clock() if self.clock else None, **kwargs),
            APPLICATIONS,
        )

    def set_status(self, application_id: str, status, approver_notes: Optional[str] = None,
                   approved_by: Optional[str] = None) -> "LeaveApplication | Rejection":
        # an approval is never stored without its debit
        return self._apply(
            lambda: decide_application(application_id, status, self.balances, self.ledger,
                                       approver_notes=approver_notes, approved_by=approved_by),
            BALANCES, APPLICATIONS,
        )

    def cancel(self, application_id: str) -> "LeaveApplication | Rejection":
        return self._apply(lambda: self.ledger.cancel(application_id), APPLICATIONS)

    def adjust_balance(self, employee_id: str, field: str, delta: float) -> "LeaveBalance | Rejection":
        return self._apply(lambda: self.balances.adjust(employee_id, field, delta), BALANCES)

    def set_balance(self, employee_id: str, values: dict) -> "LeaveBalance | Rejection":
        fields = {name: values.get(name, 0) for name in BALANCE_FIELDS}
        for name, amount in fields.items():
            if not math.isfinite(amount) or amount < 0:
                return invalid_value(name, amount)
        return self._apply(
            lambda: self.balances.put(LeaveBalance(employee_id=str(employee_id), **fields)),
            BALANCES,
        )

    def add_holiday(self, name: str, day: date, is_national: bool = True) -> "Holiday | Rejection":
        return self._apply(lambda: self.holidays.add(name, day, is_national), HOLIDAYS)

    # --- queries ---

    def calculate_duration(self, start_date: date, end_date: date, is_half_day: bool = False):
        return self.holidays.duration(start_date, end_date, is_half_day)

    def get_application(self, application_id: str) -> "LeaveApplication | Rejection":
        return self.ledger.get(application_id)

    def get_balance(self, employee_id: str) -> "LeaveBalance | Rejection":
        balance = self.balances.get(employee_id)
        if balance is None:
            return not_found('leave balance', employee_id)
        return balance

    def applications(self, employee_id: Optional[str] = None, status=None,
                     department: Optional[str] = None) -> List[LeaveApplication]:
        applications = self.ledger.for_employee(employee_id) if employee_id else self.ledger.all()
        if status:
            applications = [a for a in applications if a.status == status]
        if department:
            applications = [a for a in applications if a.department == department]
        return applications

    def pending_approvals(self, department: Optional[str] = None) -> List[LeaveApplication]:
        return self.ledger.pending_approvals(department)

    def applications_on_date(self, day: date, status=LeaveStatus.APPROVED) -> List[LeaveApplication]:
        return self.ledger.overlapping(day, status=status)

    def applications_in_range(self, start: date, end: date, status=LeaveStatus.APPROVED):
        if start > end:
            return []
        return self.ledger.overlapping(start, end, status=status)

    def applications_in_month(self, year: int, month: int, status=LeaveStatus.APPROVED):
        return self.applications_in_range(*month_bounds(year, month), status=status)

    def holidays_in_range(self, start: date, end: date) -> List[Holiday]:
        return self.holidays.in_range(start, end)

    def upcoming_holidays(self, from_date: date, limit: Optional[int] = None) -> List[Holiday]:
        return self.holidays.upcoming(from_date, limit)

    def team_members(self, department: Optional[str] = None) -> List[TeamMember]:
        return self.team.all(department)

    def leave_summary(self, employee_id: str) -> "dict | Rejection":
        if not employee_id:
            return missing_required_field('employee_id')
        balance = self.balances.get(employee_id)
        return {
            'employee_id': str(employee_id),
            'counts': self.ledger.status_counts(employee_id),
            'balance': balance.model_dump(mode='json') if balance else None,
        }

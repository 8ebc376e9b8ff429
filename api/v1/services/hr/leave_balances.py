import logging
import math
from typing import Dict, Iterable, List, Optional

from api.v1.services.hr.leave_errors import Rejection, insufficient_balance, invalid_value, not_found
from api.v1.services.hr.leave_services import LeaveBalance

logger = logging.getLogger(__name__)

BALANCE_FIELDS = ('annual', 'sick', 'compassionate', 'maternity', 'paternity', 'study', 'unpaid', 'carry_over')


class LeaveBalanceStore:
    """
    Per-employee leave balances, keyed by employee id.

    The store is the only place balances change. Adjustments are
    all-or-nothing: a delta that would take a field below zero is refused
    and the stored balance is left as it was.
    """

    def __init__(self, balances: Optional[Iterable[LeaveBalance]] = None):
        self._balances: Dict[str, LeaveBalance] = {}
        for balance in balances or []:
            self._balances[balance.employee_id] = balance

    def __len__(self):
        return len(self._balances)

    def get(self, employee_id: str) -> Optional[LeaveBalance]:
        return self._balances.get(str(employee_id))

    def all(self) -> List[LeaveBalance]:
        return list(self._balances.values())

    def put(self, balance: LeaveBalance) -> LeaveBalance:
        self._balances[balance.employee_id] = balance
        logger.info("Leave balance replaced for employee %s", balance.employee_id)
        return balance

    def adjust(self, employee_id: str, leave_type, delta: float) -> "LeaveBalance | Rejection":
        """Apply ``delta`` (negative consumes, positive restores) to one field."""
        field = getattr(leave_type, 'value', leave_type)
        if field not in BALANCE_FIELDS:
            return invalid_value('leave_type', field)
        if not math.isfinite(delta):
            return invalid_value('delta', delta)

        current = self.get(employee_id)
        if current is None:
            return not_found('leave balance', employee_id)

        available = current.amount(field)
        new_amount = available + delta
        if not math.isfinite(new_amount):
            return invalid_value('delta', delta)
        if new_amount < 0:
            return insufficient_balance(field, available, -delta)

        updated = LeaveBalance.model_validate({**current.model_dump(exclude={'total'}), field: new_amount})
        self._balances[updated.employee_id] = updated
        logger.info("Adjusted %s balance for employee %s by %s (now %s)", field, employee_id, delta, new_amount)
        return updated

    def to_records(self) -> List[dict]:
        return [b.model_dump(mode='json', exclude={'total'}) for b in self.all()]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "LeaveBalanceStore":
        return cls(LeaveBalance.model_validate(record) for record in records)

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple
from uuid import uuid4

from dateutil.relativedelta import relativedelta

from api.v1.services.hr.leave_errors import Rejection, invalid_range, missing_required_field
from api.v1.services.hr.leave_services import Holiday

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


def calculate_duration(start_date: date, end_date: date, is_half_day: bool,
                       holidays: Iterable[Holiday]) -> "float | Rejection":
    """
    Chargeable days between ``start_date`` and ``end_date`` inclusive.

    A half-day request is always 0.5. Otherwise weekend days are removed and
    so is every holiday strictly between the two dates; a holiday on the
    first or last day is still charged. Never returns less than 0.
    """
    if start_date > end_date:
        return invalid_range(start_date, end_date)
    if is_half_day:
        return 0.5

    days = (end_date - start_date).days + 1

    current = start_date
    while current <= end_date:
        if current.weekday() in (SATURDAY, SUNDAY):
            days -= 1
        current += timedelta(days=1)

    holiday_dates = {holiday.date for holiday in holidays}
    days -= sum(1 for day in holiday_dates if start_date < day < end_date)

    return max(0, days)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a calendar month."""
    first = date(year, month, 1)
    return first, first + relativedelta(months=1, days=-1)


class HolidayCalendar:
    """Dated public/company holidays. Holidays are immutable once added."""

    def __init__(self, holidays: Optional[Iterable[Holiday]] = None):
        self._holidays = {}
        for holiday in holidays or []:
            self._holidays[holiday.id] = holiday

    def __iter__(self):
        return iter(self.all())

    def __len__(self):
        return len(self._holidays)

    def all(self) -> List[Holiday]:
        return sorted(self._holidays.values(), key=lambda h: (h.date, h.name))

    def on(self, day: date) -> Optional[Holiday]:
        for holiday in self.all():
            if holiday.date == day:
                return holiday
        return None

    def in_range(self, start: date, end: date) -> List[Holiday]:
        return [h for h in self.all() if start <= h.date <= end]

    def upcoming(self, from_date: date, limit: Optional[int] = None) -> List[Holiday]:
        holidays = [h for h in self.all() if h.date >= from_date]
        return holidays[:limit] if limit is not None else holidays

    def add(self, name: str, day: date, is_national: bool = True) -> "Holiday | Rejection":
        if not name or not name.strip():
            return missing_required_field('name')
        holiday = Holiday(id=str(uuid4()), name=name.strip(), date=day, is_national=is_national)
        self._holidays[holiday.id] = holiday
        logger.info("Holiday added: %s on %s", holiday.name, holiday.date.isoformat())
        return holiday

    def duration(self, start_date: date, end_date: date, is_half_day: bool = False) -> "float | Rejection":
        return calculate_duration(start_date, end_date, is_half_day, self._holidays.values())

    def to_records(self) -> List[dict]:
        return [h.model_dump(mode='json') for h in self.all()]

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "HolidayCalendar":
        return cls(Holiday.model_validate(record) for record in records)

"""Demo records loaded into empty storage when LMS_SEED_DEMO_DATA is on."""
from datetime import date, datetime, timezone

from api.v1.services.hr.leave_calendar import calculate_duration
from api.v1.services.hr.leave_services import Holiday, LeaveApplication, LeaveBalance, TeamMember


def _ts(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


HOLIDAYS = [
    Holiday(id='1', name="New Year's Day", date=date(2025, 1, 1)),
    Holiday(id='2', name='National Heroes Day', date=date(2025, 2, 1)),
    Holiday(id='3', name='Good Friday', date=date(2025, 4, 18)),
    Holiday(id='4', name='Easter Monday', date=date(2025, 4, 21)),
    Holiday(id='5', name='Labor Day', date=date(2025, 5, 1)),
    Holiday(id='6', name='Liberation Day', date=date(2025, 7, 4)),
    Holiday(id='7', name='Umuganura Day', date=date(2025, 8, 2)),
    Holiday(id='8', name='Independence Day', date=date(2025, 7, 1)),
    Holiday(id='9', name='Christmas Day', date=date(2025, 12, 25)),
    Holiday(id='10', name='Boxing Day', date=date(2025, 12, 26)),
]

BALANCES = [
    LeaveBalance(employee_id='1', annual=18, sick=10, compassionate=5, maternity=0,
                 paternity=10, study=5, unpaid=0, carry_over=2),
    LeaveBalance(employee_id='2', annual=15, sick=10, compassionate=5, maternity=90,
                 paternity=0, study=5, unpaid=0, carry_over=5),
    LeaveBalance(employee_id='3', annual=20, sick=10, compassionate=5, maternity=0,
                 paternity=10, study=5, unpaid=0, carry_over=0),
]

TEAM_MEMBERS = [
    TeamMember(id='1', name='John Doe', email='john@ist.com', department='Engineering',
               role='Developer', position='Senior Developer'),
    TeamMember(id='2', name='Jane Smith', email='jane@ist.com', department='Engineering',
               role='Manager', position='Team Lead'),
    TeamMember(id='3', name='Bob Johnson', email='bob@ist.com', department='HR',
               role='HR Specialist', position='HR Manager'),
]


def _application(id, employee_id, employee_name, leave_type, start, end, reason, status,
                 created, updated, approved_by=None):
    return LeaveApplication(
        id=id,
        employee_id=employee_id,
        employee_name=employee_name,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        reason=reason,
        status=status,
        duration=calculate_duration(start, end, False, HOLIDAYS),
        approved_by=approved_by,
        department='Engineering',
        created_at=created,
        updated_at=updated,
        applied_date=created,
    )


APPLICATIONS = [
    _application('1', '1', 'John Doe', 'annual', date(2025, 5, 25), date(2025, 5, 30),
                 'Family vacation', 'approved', _ts(2025, 4, 15), _ts(2025, 4, 16), approved_by='2'),
    _application('2', '1', 'John Doe', 'sick', date(2025, 6, 1), date(2025, 6, 2),
                 'Not feeling well', 'pending', _ts(2025, 5, 30), _ts(2025, 5, 30)),
    _application('3', '2', 'Jane Smith', 'annual', date(2025, 6, 10), date(2025, 6, 20),
                 'Summer holiday', 'pending', _ts(2025, 5, 25), _ts(2025, 5, 25)),
]


def demo_records() -> dict:
    return {
        'leave_applications': [a.model_dump(mode='json') for a in APPLICATIONS],
        'leave_balances': [b.model_dump(mode='json', exclude={'total'}) for b in BALANCES],
        'holidays': [h.model_dump(mode='json') for h in HOLIDAYS],
        'team_members': [m.model_dump(mode='json') for m in TEAM_MEMBERS],
    }

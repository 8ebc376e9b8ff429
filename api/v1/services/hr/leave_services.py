from pydantic import BaseModel, Field, computed_field, field_validator
from datetime import date, datetime, timezone
import datetime as dt
from enum import Enum
from typing import Optional, List, Literal


class LeaveType(str, Enum):
    ANNUAL = 'annual'
    SICK = 'sick'
    MATERNITY = 'maternity'
    PATERNITY = 'paternity'
    UNPAID = 'unpaid'
    COMPASSIONATE = 'compassionate'
    STUDY = 'study'


class LeaveStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'


TERMINAL_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED})

# Leave types that are not funded from a balance and are never debited
UNFUNDED_LEAVE_TYPES = frozenset({LeaveType.UNPAID})


class LeaveTypePolicy(BaseModel):
    leave_type: LeaveType
    label: str
    requires_reason: bool = False
    requires_document: bool = False


LEAVE_TYPE_POLICIES = {
    LeaveType.ANNUAL: LeaveTypePolicy(leave_type=LeaveType.ANNUAL, label='Annual Leave'),
    LeaveType.SICK: LeaveTypePolicy(leave_type=LeaveType.SICK, label='Sick Leave',
                                    requires_reason=True, requires_document=True),
    LeaveType.COMPASSIONATE: LeaveTypePolicy(leave_type=LeaveType.COMPASSIONATE, label='Compassionate Leave',
                                             requires_reason=True),
    LeaveType.MATERNITY: LeaveTypePolicy(leave_type=LeaveType.MATERNITY, label='Maternity Leave',
                                         requires_document=True),
    LeaveType.PATERNITY: LeaveTypePolicy(leave_type=LeaveType.PATERNITY, label='Paternity Leave'),
    LeaveType.STUDY: LeaveTypePolicy(leave_type=LeaveType.STUDY, label='Study Leave',
                                     requires_reason=True, requires_document=True),
    LeaveType.UNPAID: LeaveTypePolicy(leave_type=LeaveType.UNPAID, label='Unpaid Leave',
                                      requires_reason=True),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Holiday(BaseModel):
    id: str
    name: str
    date: dt.date
    is_national: bool = True

    class Config:
        frozen = True


class LeaveBalance(BaseModel):
    employee_id: str
    annual: float = Field(0, ge=0, allow_inf_nan=False)
    sick: float = Field(0, ge=0, allow_inf_nan=False)
    compassionate: float = Field(0, ge=0, allow_inf_nan=False)
    maternity: float = Field(0, ge=0, allow_inf_nan=False)
    paternity: float = Field(0, ge=0, allow_inf_nan=False)
    study: float = Field(0, ge=0, allow_inf_nan=False)
    unpaid: float = Field(0, ge=0, allow_inf_nan=False)
    carry_over: float = Field(0, ge=0, allow_inf_nan=False)

    @computed_field
    @property
    def total(self) -> float:
        return sum(getattr(self, leave_type.value) for leave_type in LeaveType) + self.carry_over

    def amount(self, field) -> float:
        return getattr(self, getattr(field, "value", field))


class LeaveApplication(BaseModel):
    id: str
    employee_id: str
    employee_name: Optional[str] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    is_half_day: bool = False
    reason: Optional[str] = None
    documents: List[str] = Field(default_factory=list)
    status: LeaveStatus = LeaveStatus.PENDING
    duration: float = Field(0, ge=0, allow_inf_nan=False)
    approver_notes: Optional[str] = None
    approved_by: Optional[str] = None
    department: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    applied_date: datetime = Field(default_factory=utcnow)

    @field_validator('created_at', 'updated_at', 'applied_date')
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # timestamp columns without a zone are stored in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date


class TeamMember(BaseModel):
    id: str
    name: str
    email: str
    department: str
    role: str
    position: Optional[str] = None
    avatar: Optional[str] = None


# --- request schemas ---

class LeaveApplicationCreateSchema(BaseModel):
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    is_half_day: bool = False
    reason: Optional[str] = None
    documents: List[str] = Field(default_factory=list)
    department: Optional[str] = None

    class Config:
        extra = "forbid"


class LeaveDurationSchema(BaseModel):
    start_date: date
    end_date: date
    is_half_day: bool = False


class LeaveStatusUpdateSchema(BaseModel):
    status: Literal['approved', 'rejected', 'cancelled']
    approver_notes: Optional[str] = None

    class Config:
        extra = "forbid"


class LeaveBalanceAdjustSchema(BaseModel):
    leave_type: Literal['annual', 'sick', 'compassionate', 'maternity', 'paternity', 'study', 'unpaid', 'carry_over']
    delta: float = Field(..., allow_inf_nan=False)

    class Config:
        extra = "forbid"


class LeaveBalanceSetSchema(BaseModel):
    annual: float = Field(0, ge=0, allow_inf_nan=False)
    sick: float = Field(0, ge=0, allow_inf_nan=False)
    compassionate: float = Field(0, ge=0, allow_inf_nan=False)
    maternity: float = Field(0, ge=0, allow_inf_nan=False)
    paternity: float = Field(0, ge=0, allow_inf_nan=False)
    study: float = Field(0, ge=0, allow_inf_nan=False)
    unpaid: float = Field(0, ge=0, allow_inf_nan=False)
    carry_over: float = Field(0, ge=0, allow_inf_nan=False)

    class Config:
        extra = "forbid"


class HolidayCreateSchema(BaseModel):
    name: str
    date: dt.date
    is_national: bool = True

    class Config:
        extra = "forbid"

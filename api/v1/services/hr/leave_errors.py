"""
Failure values returned by the leave core.

Core operations never raise for business-rule failures. They return either
the resulting record or one of the ``Rejection`` models below, and callers
branch with ``isinstance(result, Rejection)``.
"""
from pydantic import BaseModel
from datetime import date
from typing import Literal, Optional


class Rejection(BaseModel):
    code: str
    message: str

    def details(self) -> dict:
        """Payload fields other than code/message, JSON-ready."""
        return self.model_dump(mode='json', exclude={'code', 'message'})


class InvalidRange(Rejection):
    code: Literal['invalid_range'] = 'invalid_range'
    message: str = "End date must be on or after start date"
    start_date: date
    end_date: date


class MissingRequiredField(Rejection):
    code: Literal['missing_required_field'] = 'missing_required_field'
    message: str = "Required field missing"
    field: str
    leave_type: Optional[str] = None


class InsufficientBalance(Rejection):
    code: Literal['insufficient_balance'] = 'insufficient_balance'
    message: str = "Insufficient leave balance"
    leave_type: str
    available: float
    requested: float


class InvalidTransition(Rejection):
    code: Literal['invalid_transition'] = 'invalid_transition'
    message: str = "Invalid status transition"
    current: str
    attempted: str


class InvalidValue(Rejection):
    code: Literal['invalid_value'] = 'invalid_value'
    message: str = "Invalid value"
    field: str
    value: str


class NotFound(Rejection):
    code: Literal['not_found'] = 'not_found'
    message: str = "Not found"
    entity: str
    id: str


def invalid_range(start_date, end_date) -> InvalidRange:
    return InvalidRange(start_date=start_date, end_date=end_date)


def missing_required_field(field, leave_type=None) -> MissingRequiredField:
    leave_type = getattr(leave_type, 'value', leave_type)
    if leave_type:
        message = f"A {field} is required for {leave_type} leave"
    else:
        message = f"A {field} is required"
    return MissingRequiredField(message=message, field=field, leave_type=leave_type)


def insufficient_balance(leave_type, available, requested) -> InsufficientBalance:
    leave_type = getattr(leave_type, 'value', leave_type)
    return InsufficientBalance(
        message=f"Insufficient {leave_type} leave balance. Available: {available} days, Requested: {requested} days",
        leave_type=leave_type,
        available=available,
        requested=requested,
    )


def invalid_transition(current, attempted) -> InvalidTransition:
    current = getattr(current, 'value', current)
    attempted = str(getattr(attempted, 'value', attempted))
    return InvalidTransition(
        message=f"Cannot change leave request from '{current}' to '{attempted}'",
        current=current,
        attempted=attempted,
    )


def invalid_value(field: str, value) -> InvalidValue:
    value = getattr(value, 'value', value)
    return InvalidValue(message=f"Invalid value for {field}: {value}", field=field, value=str(value))


def not_found(entity: str, id) -> NotFound:
    return NotFound(message=f"{entity.capitalize()} {id} not found", entity=entity, id=str(id))

from datetime import date
from flask import jsonify, request
from api.v1.services.hr.leave_errors import Rejection

REJECTION_STATUS_CODES = {
    'not_found': 404,
}


def rejection_response(rejection: Rejection):
    """Translate a core rejection into a JSON error response."""
    body = {"error": rejection.message, "code": rejection.code, **rejection.details()}
    return jsonify(body), REJECTION_STATUS_CODES.get(rejection.code, 400)


def dump(records):
    if isinstance(records, list):
        return [record.model_dump(mode='json') for record in records]
    return records.model_dump(mode='json')


def date_arg(name, required=False):
    """
    Read an ISO date from the query string.
    Raises ValueError with a readable message for bad or missing values.
    """
    raw = request.args.get(name)
    if not raw:
        if required:
            raise ValueError(f"Query parameter '{name}' is required")
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"Query parameter '{name}' must be an ISO date (YYYY-MM-DD)")

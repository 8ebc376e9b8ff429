from datetime import date
from flask import request, jsonify, g, current_app
from api.v1.views import app_views
from api.v1.auth import login_required, role_required, ALLOWED_ROLES, ADMIN_ROLES
from pydantic import ValidationError
from api.v1.services.hr.leave_errors import Rejection
from api.v1.services.hr.leave_services import HolidayCreateSchema
from api.v1.utils.responses import rejection_response, dump, date_arg


# GET holidays, optionally limited to ?start=&end=
@app_views.route('/holidays', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_holidays():
    try:
        start = date_arg('start')
        end = date_arg('end')
        if start or end:
            holidays = g.leave_data.holidays_in_range(start or date.min, end or date.max)
        else:
            holidays = g.leave_data.holidays.all()
        return jsonify(dump(holidays)), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error fetching holidays: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET upcoming holidays for the dashboard
@app_views.route('/holidays/upcoming', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_upcoming_holidays():
    try:
        from_date = date_arg('from') or date.today()
        limit = request.args.get('limit', type=int)
        return jsonify(dump(g.leave_data.upcoming_holidays(from_date, limit))), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error fetching upcoming holidays: {str(e)}")
        return jsonify({"error": str(e)}), 500


# POST add a public or company holiday
@app_views.route('/holidays', methods=['POST'])
@login_required
@role_required(ADMIN_ROLES)
def create_holiday():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400
    try:
        holiday_data = HolidayCreateSchema(**data)
        result = g.leave_data.add_holiday(holiday_data.name, holiday_data.date, holiday_data.is_national)
        if isinstance(result, Rejection):
            return rejection_response(result)
        return jsonify(dump(result)), 201
    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error creating holiday: {str(e)}")
        return jsonify({"error": str(e)}), 500

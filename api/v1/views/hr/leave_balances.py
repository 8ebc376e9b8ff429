from flask import request, jsonify, g, current_app
from api.v1.views import app_views
from api.v1.auth import login_required, role_required, ALLOWED_ROLES, ADMIN_ROLES, APPROVER_ROLES
from pydantic import ValidationError
from api.v1.services.hr.leave_errors import Rejection
from api.v1.services.hr.leave_services import LeaveBalanceAdjustSchema, LeaveBalanceSetSchema
from api.v1.utils.responses import rejection_response, dump


# GET current user's leave balance
@app_views.route('/leave_balances/me', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_my_leave_balance():
    try:
        balance = g.leave_data.get_balance(g.employee_id)
        if isinstance(balance, Rejection):
            return rejection_response(balance)
        return jsonify(dump(balance)), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching leave balance for {g.employee_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET an employee's leave balance
@app_views.route('/leave_balances/<string:employee_id>', methods=['GET'])
@login_required
@role_required(APPROVER_ROLES)
def get_leave_balance(employee_id):
    try:
        balance = g.leave_data.get_balance(employee_id)
        if isinstance(balance, Rejection):
            return rejection_response(balance)
        return jsonify(dump(balance)), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching leave balance for {employee_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500


# PATCH apply a signed adjustment to one balance field
@app_views.route('/leave_balances/<string:employee_id>', methods=['PATCH'])
@login_required
@role_required(ADMIN_ROLES)
def adjust_leave_balance(employee_id):
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400
    try:
        adjustment = LeaveBalanceAdjustSchema(**data)
        result = g.leave_data.adjust_balance(employee_id, adjustment.leave_type, adjustment.delta)
        if isinstance(result, Rejection):
            return rejection_response(result)
        current_app.logger.info(
            f"{g.current_user} adjusted {adjustment.leave_type} balance of {employee_id} by {adjustment.delta}"
        )
        return jsonify(dump(result)), 200
    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error adjusting leave balance for {employee_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500


# PUT replace an employee's leave balance (super_admin only)
@app_views.route('/leave_balances/<string:employee_id>', methods=['PUT'])
@login_required
@role_required(['super_admin'])
def set_leave_balance(employee_id):
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400
    try:
        values = LeaveBalanceSetSchema(**data)
        balance = g.leave_data.set_balance(employee_id, values.model_dump())
        if isinstance(balance, Rejection):
            return rejection_response(balance)
        return jsonify(dump(balance)), 200
    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error setting leave balance for {employee_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

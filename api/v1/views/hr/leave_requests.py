# api/v1/views/hr/leave_requests.py

from flask import request, jsonify, g, current_app
from api.v1.views import app_views
from api.v1.auth import login_required, role_required, ALLOWED_ROLES, APPROVER_ROLES, is_admin
from pydantic import ValidationError
from api.v1.services.hr.leave_errors import Rejection
from api.v1.services.hr.leave_calendar import month_bounds
from api.v1.services.hr.leave_services import (
    LEAVE_TYPE_POLICIES,
    LeaveApplicationCreateSchema,
    LeaveDurationSchema,
    LeaveStatus,
    LeaveStatusUpdateSchema,
)
from api.v1.utils.responses import rejection_response, dump, date_arg

STATUS_VALUES = [status.value for status in LeaveStatus]


def _forbidden(message):
    return jsonify({"error": message}), 403


def _can_view(application):
    if g.user_role == 'user':
        return application.employee_id == g.employee_id
    if g.user_role == 'manager':
        return application.employee_id == g.employee_id or application.department == g.department
    return True


# GET leave type catalogue
@app_views.route('/leave_types', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_leave_types():
    return jsonify([policy.model_dump(mode='json') for policy in LEAVE_TYPE_POLICIES.values()]), 200


# GET all leave requests (role-based filtering)
@app_views.route('/leave_requests', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_leave_requests():
    """
    Get leave requests with role-based access:
    - super_admin, hr_manager: All requests, optional employee_id/department filters
    - manager: Requests from employees in their department
    - user: Only their own requests
    """
    status = request.args.get('status')
    if status and status not in STATUS_VALUES:
        return jsonify({"error": f"Invalid status '{status}'. Must be one of {', '.join(STATUS_VALUES)}"}), 400

    try:
        employee_id = request.args.get('employee_id')
        department = request.args.get('department')

        if g.user_role == 'user':
            employee_id, department = g.employee_id, None
        elif g.user_role == 'manager':
            if not g.department:
                return _forbidden("Manager has no department assigned")
            department = g.department

        applications = g.leave_data.applications(employee_id=employee_id, status=status, department=department)
        return jsonify(dump(applications)), 200  # Always 200, even if empty

    except Exception as e:
        current_app.logger.error(f"Error fetching leave requests: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET pending approvals
@app_views.route('/leave_requests/pending', methods=['GET'])
@login_required
@role_required(APPROVER_ROLES)
def get_pending_approvals():
    try:
        department = request.args.get('department') if is_admin() else g.department
        if g.user_role == 'manager' and not department:
            return _forbidden("Manager has no department assigned")
        return jsonify(dump(g.leave_data.pending_approvals(department))), 200
    except Exception as e:
        current_app.logger.error(f"Error fetching pending approvals: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET approved leave for the team calendar
@app_views.route('/leave_requests/calendar', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_leave_calendar():
    """
    One of:
    - ?date=YYYY-MM-DD           leave covering that day, plus the holiday on it
    - ?start=...&end=...         leave overlapping the range, plus holidays in it
    - ?month=YYYY-MM             the same for a calendar month
    """
    try:
        status = request.args.get('status', LeaveStatus.APPROVED.value)
        if status not in STATUS_VALUES:
            return jsonify({"error": f"Invalid status '{status}'"}), 400

        store = g.leave_data
        day = date_arg('date')
        if day:
            holiday = store.holidays.on(day)
            return jsonify({
                "date": day.isoformat(),
                "leave_requests": dump(store.applications_on_date(day, status=status)),
                "holiday": dump(holiday) if holiday else None,
            }), 200

        month = request.args.get('month')
        if month:
            try:
                year, month_number = (int(part) for part in month.split('-'))
                start, end = month_bounds(year, month_number)
                applications = store.applications_in_month(year, month_number, status=status)
            except ValueError:
                return jsonify({"error": "Query parameter 'month' must look like YYYY-MM"}), 400
            return jsonify({
                "start": start.isoformat(),
                "end": end.isoformat(),
                "leave_requests": dump(applications),
                "holidays": dump(store.holidays_in_range(start, end)),
            }), 200

        start = date_arg('start', required=True)
        end = date_arg('end', required=True)
        if start > end:
            return jsonify({"error": "End date must be on or after start date"}), 400
        return jsonify({
            "start": start.isoformat(),
            "end": end.isoformat(),
            "leave_requests": dump(store.applications_in_range(start, end, status=status)),
            "holidays": dump(store.holidays_in_range(start, end)),
        }), 200

    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error building leave calendar: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET dashboard summary for one employee
@app_views.route('/leave_requests/summary', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_leave_summary():
    employee_id = request.args.get('employee_id') or g.employee_id
    if g.user_role == 'user' and employee_id != g.employee_id:
        return _forbidden("Users can only view their own summary")
    try:
        summary = g.leave_data.leave_summary(employee_id)
        if isinstance(summary, Rejection):
            return rejection_response(summary)
        return jsonify(summary), 200
    except Exception as e:
        current_app.logger.error(f"Error building leave summary for {employee_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500


# POST duration preview
@app_views.route('/leave_requests/duration', methods=['POST'])
@login_required
@role_required(ALLOWED_ROLES)
def preview_leave_duration():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400
    try:
        draft = LeaveDurationSchema(**data)
        duration = g.leave_data.calculate_duration(draft.start_date, draft.end_date, draft.is_half_day)
        if isinstance(duration, Rejection):
            return rejection_response(duration)
        return jsonify({
            "start_date": draft.start_date.isoformat(),
            "end_date": draft.end_date.isoformat(),
            "is_half_day": draft.is_half_day,
            "duration": duration,
        }), 200
    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error calculating leave duration: {str(e)}")
        return jsonify({"error": str(e)}), 500


# GET single leave request by ID
@app_views.route('/leave_requests/<string:request_id>', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_leave_request(request_id):
    try:
        application = g.leave_data.get_application(request_id)
        if isinstance(application, Rejection):
            return rejection_response(application)
        if not _can_view(application):
            return _forbidden("You cannot view this leave request")
        return jsonify(dump(application)), 200

    except Exception as e:
        current_app.logger.error(f"Error fetching leave request {request_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500


# CREATE leave request
@app_views.route('/leave_requests', methods=['POST'])
@login_required
@role_required(ALLOWED_ROLES)
def create_leave_request():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400

    try:
        # Users always apply for themselves
        if g.user_role == 'user' or not data.get('employee_id'):
            data['employee_id'] = g.employee_id
            data.setdefault('department', g.department)

        member = g.leave_data.team.get(data['employee_id'])
        if member:
            data['employee_name'] = data.get('employee_name') or member.name
            data['department'] = data.get('department') or member.department

        leave_data = LeaveApplicationCreateSchema(**data)

        result = g.leave_data.submit_application(leave_data)
        if isinstance(result, Rejection):
            current_app.logger.info(f"Leave request rejected for {leave_data.employee_id}: {result.message}")
            return rejection_response(result)
        return jsonify(dump(result)), 201

    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error creating leave request: {str(e)}")
        return jsonify({"error": str(e)}), 500


# UPDATE leave request (approve/reject/cancel)
@app_views.route('/leave_requests/<string:request_id>', methods=['PUT'])
@login_required
@role_required(ALLOWED_ROLES)
def update_leave_request(request_id):
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided, request body must be a JSON object"}), 400

    try:
        update_data = LeaveStatusUpdateSchema(**data)

        application = g.leave_data.get_application(request_id)
        if isinstance(application, Rejection):
            return rejection_response(application)

        if update_data.status == LeaveStatus.CANCELLED.value:
            # Applicants cancel their own requests; admins may cancel any
            if application.employee_id != g.employee_id and not is_admin():
                return _forbidden("You can only cancel your own requests")
            result = g.leave_data.cancel(request_id)
        else:
            if g.user_role == 'user':
                return _forbidden("Users can only cancel their own requests")
            if application.employee_id == g.employee_id:
                return _forbidden("You cannot approve or reject your own leave request")
            if g.user_role == 'manager' and application.department != g.department:
                return _forbidden("Managers can only decide requests from their department")
            result = g.leave_data.set_status(
                request_id,
                update_data.status,
                approver_notes=update_data.approver_notes,
                approved_by=g.employee_id,
            )

        if isinstance(result, Rejection):
            return rejection_response(result)
        return jsonify(dump(result)), 200

    except ValidationError as e:
        return jsonify({"error": "Validation failed", "details": e.errors(include_url=False)}), 400
    except Exception as e:
        current_app.logger.error(f"Error updating leave request {request_id}: {str(e)}")
        return jsonify({"error": str(e)}), 500

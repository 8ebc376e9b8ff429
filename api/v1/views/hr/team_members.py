from flask import request, jsonify, g, current_app
from api.v1.views import app_views
from api.v1.auth import login_required, role_required, ALLOWED_ROLES
from api.v1.utils.responses import dump


@app_views.route('/team_members', methods=['GET'])
@login_required
@role_required(ALLOWED_ROLES)
def get_team_members():
    try:
        members = g.leave_data.team_members(request.args.get('department'))
        return jsonify(dump(members)), 200  # Always 200, empty list if none
    except Exception as e:
        current_app.logger.error(f"Error fetching team members: {str(e)}")
        return jsonify({"error": str(e)}), 500

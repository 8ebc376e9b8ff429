from flask import Blueprint

# Initialize the Blueprint for API v1 views
app_views = Blueprint('base', __name__, url_prefix='/api/v1')

from api.v1.views.hr import leave_requests
from api.v1.views.hr import leave_balances
from api.v1.views.hr import holidays
from api.v1.views.hr import team_members

# medreminder/routes/dashboard_routes.py
from flask import Blueprint
from medreminder.controllers import dashboard_controller

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")

dashboard_bp.route("", methods=["GET"])(dashboard_controller.get_dashboard)
dashboard_bp.route("/doses/taken", methods=["POST"])(dashboard_controller.mark_dose_taken)
dashboard_bp.route("/stream", methods=["GET"])(dashboard_controller.stream_dashboard)

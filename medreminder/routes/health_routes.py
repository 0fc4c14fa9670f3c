# medreminder/routes/health_routes.py
from flask import Blueprint
from medreminder.helpers import api_response

health_bp = Blueprint("health", __name__, url_prefix="/api/v1")


@health_bp.route("/health")
def health():
    return api_response(True, "ok", {"version": "1.0.0"})

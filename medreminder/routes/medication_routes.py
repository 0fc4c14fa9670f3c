# medreminder/routes/medication_routes.py
from flask import Blueprint
from medreminder.controllers import medication_controller

medication_bp = Blueprint("medications", __name__, url_prefix="/api/v1/medications")

medication_bp.route("", methods=["GET"])(medication_controller.list_medications)
medication_bp.route("", methods=["POST"])(medication_controller.create_medication)
medication_bp.route("/<medication_id>", methods=["PUT"])(medication_controller.update_medication)
medication_bp.route("/<medication_id>/toggle", methods=["PATCH"])(medication_controller.toggle_medication)
medication_bp.route("/<medication_id>", methods=["DELETE"])(medication_controller.delete_medication)
medication_bp.route("/sweep-orphans", methods=["POST"])(medication_controller.sweep_orphan_doses)

# medreminder/controllers/medication_controller.py
from flask import current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from medreminder.errors import NotFoundError, StoreError, ValidationError
from medreminder.helpers import api_response, get_store
from medreminder.messages import message
from medreminder.models import Medication
from medreminder.services import medication_service


def _not_found():
    return api_response(False, message("medication/not-found"), status_code=404)


def _store_failure(key, log_text):
    current_app.logger.exception(log_text)
    return api_response(False, message(key), status_code=500)


@jwt_required()
def list_medications():
    user_id = get_jwt_identity()
    try:
        medications = medication_service.list_medications(get_store(), user_id)
    except StoreError:
        return _store_failure("medication/load-failed", f"Error loading medications for {user_id}")

    medications.sort(key=lambda m: (m.name.casefold(), m.id))
    return api_response(True, "", [m.to_dict() for m in medications])


@jwt_required()
def create_medication():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    try:
        medication = medication_service.create_medication(get_store(), user_id, data)
    except ValidationError as e:
        return api_response(False, message(e.key), status_code=422)
    except StoreError:
        return _store_failure("medication/save-failed", "Error saving medication")

    return api_response(True, message("medication/saved"), medication.to_dict(), 201)


@jwt_required()
def update_medication(medication_id):
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    store = get_store()
    try:
        current = medication_service.get_medication(store, user_id, medication_id)
        updates = medication_service.clean_updates(data, current)
        written = medication_service.update_medication(store, medication_id, updates)
    except NotFoundError:
        return _not_found()
    except ValidationError as e:
        return api_response(False, message(e.key), status_code=422)
    except StoreError:
        return _store_failure("medication/save-failed", f"Error updating medication {medication_id}")

    merged = current.to_dict()
    merged.update(written)
    merged = Medication.from_document(medication_id, merged)
    return api_response(True, message("medication/updated"), merged.to_dict())


@jwt_required()
def toggle_medication(medication_id):
    user_id = get_jwt_identity()
    store = get_store()
    try:
        current = medication_service.get_medication(store, user_id, medication_id)
        written = medication_service.toggle_active(store, current)
    except NotFoundError:
        return _not_found()
    except StoreError:
        return _store_failure("medication/toggle-failed", f"Error toggling medication {medication_id}")

    return api_response(True, message("medication/updated"), {
        "id": medication_id,
        "isActive": written["isActive"],
        "updatedAt": written["updatedAt"],
    })


@jwt_required()
def delete_medication(medication_id):
    user_id = get_jwt_identity()
    store = get_store()
    try:
        medication_service.get_medication(store, user_id, medication_id)
        removed = medication_service.delete_medication(store, medication_id)
    except NotFoundError:
        return _not_found()
    except StoreError:
        return _store_failure("medication/delete-failed", f"Error deleting medication {medication_id}")

    return api_response(True, message("medication/deleted"), {"id": medication_id, "dosesDeleted": removed})


@jwt_required()
def sweep_orphan_doses():
    user_id = get_jwt_identity()
    try:
        removed = medication_service.sweep_orphan_doses(get_store(), user_id)
    except StoreError:
        return _store_failure("medication/delete-failed", f"Error sweeping doses for {user_id}")

    return api_response(True, message("medication/swept"), {"dosesDeleted": removed})

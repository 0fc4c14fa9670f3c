import logging

from medreminder.errors import NotFoundError, ValidationError
from medreminder.helpers import now_millis
from medreminder.models import Medication
from medreminder.models.medication import COLLECTION as MEDICATIONS
from medreminder.models.medication_dose import COLLECTION as DOSES
from medreminder.schedule import is_valid_date, is_valid_time, today_string

logger = logging.getLogger(__name__)

# fields a client may write; owner, id and createdAt are server-controlled
EDITABLE_FIELDS = ("name", "dosage", "frequencyPerDay", "times", "startDate", "endDate", "notes", "isActive")


def _text(value):
    return value.strip() if isinstance(value, str) else ""


def _clean_times(raw):
    if raw is None:
        raw = []
    elif isinstance(raw, str):
        raw = [raw]
    elif not isinstance(raw, (list, tuple)):
        raise ValidationError("medication/time-format")
    # blank entries are dropped, anything else that is not text is an error
    if any(t is not None and not isinstance(t, str) for t in raw):
        raise ValidationError("medication/time-format")
    times = [_text(t) for t in raw]
    times = [t for t in times if t]
    if not times:
        raise ValidationError("medication/time-required")
    if any(not is_valid_time(t) for t in times):
        raise ValidationError("medication/time-format")
    return times


def _clean_active(value):
    if value is None:
        return True
    if not isinstance(value, bool):
        raise ValidationError("medication/active-format")
    return value


def _clean_dates(start_date, end_date):
    if not is_valid_date(start_date):
        raise ValidationError("medication/date-format")
    if end_date:
        if not is_valid_date(end_date):
            raise ValidationError("medication/date-format")
        if end_date < start_date:
            raise ValidationError("medication/date-range")


def validate_medication_form(form, today=None):
    """
    Clean a create/edit form into document fields.

    ``frequencyPerDay`` is always the number of valid times submitted, whatever
    number the form carried. Raises ``ValidationError`` before anything is sent
    to the store.
    """
    form = form or {}
    name = _text(form.get("name"))
    dosage = _text(form.get("dosage"))
    if not name or not dosage:
        raise ValidationError("medication/name-dosage-required")

    times = _clean_times(form.get("times"))

    start_date = _text(form.get("startDate")) or today or today_string()
    end_date = _text(form.get("endDate")) or None
    _clean_dates(start_date, end_date)

    data = {
        "name": name,
        "dosage": dosage,
        "frequencyPerDay": len(times),
        "times": times,
        "startDate": start_date,
        "isActive": _clean_active(form.get("isActive")),
    }
    if end_date:
        data["endDate"] = end_date
    notes = _text(form.get("notes"))
    if notes:
        data["notes"] = notes
    return data


def list_medications(store, user_id):
    rows = store.find(MEDICATIONS, {"userId": user_id})
    return [Medication.from_document(doc_id, data) for doc_id, data in rows]


def get_medication(store, user_id, medication_id):
    data = store.get(MEDICATIONS, medication_id)
    if data is None or data.get("userId") != user_id:
        raise NotFoundError(medication_id)
    return Medication.from_document(medication_id, data)


def create_medication(store, user_id, form, now_ms=None):
    data = validate_medication_form(form)
    now = now_ms if now_ms is not None else now_millis()
    data.update({"userId": user_id, "createdAt": now, "updatedAt": now})
    medication_id = store.add(MEDICATIONS, data)
    logger.info("Medication %s created for user %s", medication_id, user_id)
    return Medication.from_document(medication_id, data)


def clean_updates(updates, current=None):
    """Validate a partial update; only the supplied fields are checked."""
    updates = {k: v for k, v in (updates or {}).items() if k in EDITABLE_FIELDS}
    clean = {}

    for key in ("name", "dosage"):
        if key in updates:
            value = _text(updates[key])
            if not value:
                raise ValidationError("medication/name-dosage-required")
            clean[key] = value

    if "times" in updates:
        clean["times"] = _clean_times(updates["times"])
        clean["frequencyPerDay"] = len(clean["times"])

    if "startDate" in updates or "endDate" in updates:
        start_date = _text(updates.get("startDate")) or (current.start_date if current else "")
        if "endDate" in updates:
            end_date = _text(updates.get("endDate")) or None
        else:
            end_date = current.end_date if current else None
        _clean_dates(start_date, end_date)
        if "startDate" in updates:
            clean["startDate"] = start_date
        if "endDate" in updates:
            # an empty end date clears the bound; None removes the field
            clean["endDate"] = end_date

    if "notes" in updates:
        clean["notes"] = _text(updates["notes"]) or None

    if "isActive" in updates:
        clean["isActive"] = _clean_active(updates["isActive"])

    return clean


def update_medication(store, medication_id, updates, now_ms=None):
    data = dict(updates)
    data["updatedAt"] = now_ms if now_ms is not None else now_millis()
    store.update(MEDICATIONS, medication_id, data)
    logger.info("Medication %s updated (%s)", medication_id, ", ".join(sorted(updates)))
    return data


def toggle_active(store, medication, now_ms=None):
    return update_medication(store, medication.id, {"isActive": not medication.is_active}, now_ms=now_ms)


def delete_medication(store, medication_id):
    """
    Delete the medication, then its dose records.

    The two steps are separate writes. If the process dies in between, the
    doses stay behind until ``sweep_orphan_doses`` runs.
    """
    store.delete(MEDICATIONS, medication_id)
    dose_ids = [doc_id for doc_id, _ in store.find(DOSES, {"medicationId": medication_id})]
    if dose_ids:
        store.delete_many(DOSES, dose_ids)
    logger.info("Medication %s deleted with %d dose records", medication_id, len(dose_ids))
    return len(dose_ids)


def sweep_orphan_doses(store, user_id):
    medication_ids = {doc_id for doc_id, _ in store.find(MEDICATIONS, {"userId": user_id})}
    orphans = [
        doc_id for doc_id, data in store.find(DOSES, {"userId": user_id})
        if data.get("medicationId") not in medication_ids
    ]
    if orphans:
        store.delete_many(DOSES, orphans)
        logger.warning("Removed %d orphaned dose records for user %s", len(orphans), user_id)
    return len(orphans)

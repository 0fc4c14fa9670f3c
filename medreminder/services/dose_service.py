import logging

from medreminder.helpers import now_millis
from medreminder.models import MedicationDose
from medreminder.models.medication_dose import COLLECTION as DOSES

logger = logging.getLogger(__name__)


def is_slot_taken(doses, medication_id, scheduled_time, date):
    return any(
        d.medication_id == medication_id
        and d.scheduled_time == scheduled_time
        and d.date == date
        and d.taken_at
        for d in doses
    )


def today_doses(store, user_id, date):
    rows = store.find(DOSES, {"userId": user_id, "date": date})
    return [MedicationDose.from_document(doc_id, data) for doc_id, data in rows]


def mark_taken(store, user_id, medication_id, scheduled_time, date, now_ms=None):
    """
    Record that a dose slot was taken, refreshing ``takenAt`` if a record
    already exists. Returns the dose id.

    This is a read-then-write with no lock: two concurrent calls for the same
    slot can both see no record and both insert.
    """
    taken_at = now_ms if now_ms is not None else now_millis()
    existing = store.find(DOSES, {
        "userId": user_id,
        "medicationId": medication_id,
        "scheduledTime": scheduled_time,
        "date": date,
    })

    if not existing:
        dose_id = store.add(DOSES, {
            "userId": user_id,
            "medicationId": medication_id,
            "scheduledTime": scheduled_time,
            "date": date,
            "takenAt": taken_at,
        })
        logger.info("Dose %s created for medication=%s %s %s", dose_id, medication_id, date, scheduled_time)
        return dose_id

    dose_id = existing[0][0]
    store.update(DOSES, dose_id, {"takenAt": taken_at})
    logger.info("Dose %s re-marked for medication=%s %s %s", dose_id, medication_id, date, scheduled_time)
    return dose_id

"""Dose reconciliation tests."""

from medreminder.models import MedicationDose
from medreminder.services.dose_service import is_slot_taken, mark_taken, today_doses

DOSES = "medicationDoses"


def test_is_slot_taken_requires_all_fields_and_timestamp():
    doses = [
        MedicationDose(id="d1", user_id="u1", medication_id="m1", scheduled_time="08:00", date="2024-06-15", taken_at=1),
        MedicationDose(id="d2", user_id="u1", medication_id="m1", scheduled_time="20:00", date="2024-06-15"),
    ]
    assert is_slot_taken(doses, "m1", "08:00", "2024-06-15")
    assert not is_slot_taken(doses, "m1", "20:00", "2024-06-15")
    assert not is_slot_taken(doses, "m1", "08:00", "2024-06-16")
    assert not is_slot_taken(doses, "m2", "08:00", "2024-06-15")


def test_mark_taken_creates_record(store):
    dose_id = mark_taken(store, "u1", "m1", "08:00", "2024-06-15", now_ms=1000)
    assert store.collections[DOSES][dose_id] == {
        "userId": "u1",
        "medicationId": "m1",
        "scheduledTime": "08:00",
        "date": "2024-06-15",
        "takenAt": 1000,
    }


def test_mark_taken_twice_refreshes_timestamp_without_duplicate(store):
    first = mark_taken(store, "u1", "m1", "08:00", "2024-06-15", now_ms=1000)
    second = mark_taken(store, "u1", "m1", "08:00", "2024-06-15", now_ms=2000)

    assert first == second
    records = store.find(DOSES, {"medicationId": "m1", "date": "2024-06-15", "scheduledTime": "08:00"})
    assert len(records) == 1
    assert records[0][1]["takenAt"] == 2000


def test_mark_taken_keeps_slots_and_days_apart(store):
    mark_taken(store, "u1", "m1", "08:00", "2024-06-15", now_ms=1)
    mark_taken(store, "u1", "m1", "20:00", "2024-06-15", now_ms=2)
    mark_taken(store, "u1", "m1", "08:00", "2024-06-16", now_ms=3)

    assert len(store.collections[DOSES]) == 3
    assert [d.scheduled_time for d in sorted(today_doses(store, "u1", "2024-06-15"), key=lambda d: d.scheduled_time)] == [
        "08:00",
        "20:00",
    ]

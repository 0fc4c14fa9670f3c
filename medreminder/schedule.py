# medreminder/schedule.py
"""
Which doses are due today and which fall in the upcoming window.

Everything here is pure computation over already-fetched lists; callers pass
``today`` and ``now`` explicitly so results are reproducible. All times are
server-local wall clock times.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from medreminder.models import Medication, MedicationDose
from medreminder.services.dose_service import is_slot_taken

TIME_RE = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")
DATE_FORMAT = "%Y-%m-%d"

# Look-ahead used by the dashboard's "upcoming doses" list
UPCOMING_WINDOW = timedelta(hours=3)


@dataclass
class DoseSlot:
    medication: Medication
    time: str


@dataclass
class UpcomingDose:
    medication: Medication
    time: str
    scheduled_at: datetime
    is_taken: bool

    def to_dict(self):
        return {
            "medication": self.medication.to_dict(),
            "time": self.time,
            "scheduledAt": self.scheduled_at.isoformat(),
            "isTaken": self.is_taken,
        }


def local_now() -> datetime:
    return datetime.now()


def today_string(now: Optional[datetime] = None) -> str:
    return (now or local_now()).strftime(DATE_FORMAT)


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(TIME_RE.fullmatch(value))


def is_valid_date(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return datetime.strptime(value, DATE_FORMAT).strftime(DATE_FORMAT) == value
    except ValueError:
        return False


def is_date_in_range(date: str, start_date: str, end_date: Optional[str] = None) -> bool:
    # ISO dates compare correctly as strings
    if date < start_date:
        return False
    if end_date and date > end_date:
        return False
    return True


def due_medications(medications: List[Medication], today: str) -> List[Medication]:
    return [
        m for m in medications
        if m.is_active and is_date_in_range(today, m.start_date, m.end_date)
    ]


def due_slots_today(medications: List[Medication], today: str) -> List[DoseSlot]:
    return [DoseSlot(medication=m, time=t) for m in due_medications(medications, today) for t in m.times]


def slot_datetime(today: str, time_str: str) -> datetime:
    day = datetime.strptime(today, DATE_FORMAT)
    hours, minutes = (int(part) for part in time_str.split(":"))
    return day.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def upcoming_slots(
    medications: List[Medication],
    doses: List[MedicationDose],
    today: str,
    now: datetime,
    horizon: timedelta = UPCOMING_WINDOW,
) -> List[UpcomingDose]:
    """
    Due slots whose time today lies in ``[now, now + horizon]``, both ends
    inclusive, sorted by time then medication id.

    The window never crosses into tomorrow: a horizon running past midnight
    only sees what is left of today's slots.
    """
    # drop tzinfo so the comparison is against naive wall-clock slot times
    now = now.replace(tzinfo=None)
    until = now + horizon
    upcoming = []
    for slot in due_slots_today(medications, today):
        if not is_valid_time(slot.time):
            continue
        scheduled_at = slot_datetime(today, slot.time)
        if now <= scheduled_at <= until:
            upcoming.append(UpcomingDose(
                medication=slot.medication,
                time=slot.time,
                scheduled_at=scheduled_at,
                is_taken=is_slot_taken(doses, slot.medication.id, slot.time, today),
            ))
    upcoming.sort(key=lambda u: (u.scheduled_at, u.medication.id))
    return upcoming


def dashboard_summary(medications: List[Medication], doses: List[MedicationDose], today: str) -> dict:
    scheduled = len(due_slots_today(medications, today))
    taken = sum(1 for d in doses if d.date == today and d.taken_at)
    return {
        "activeMedications": sum(1 for m in medications if m.is_active),
        "scheduledToday": scheduled,
        "takenToday": taken,
        "remaining": scheduled - taken,
    }

# medreminder/models/medication_dose.py
from dataclasses import dataclass
from typing import Optional

COLLECTION = "medicationDoses"


@dataclass
class MedicationDose:
    id: str
    user_id: str
    medication_id: str
    scheduled_time: str     # HH:MM
    date: str               # YYYY-MM-DD
    taken_at: Optional[int] = None  # ms since epoch

    @classmethod
    def from_document(cls, doc_id, data):
        taken_at = data.get("takenAt")
        return cls(
            id=doc_id,
            user_id=data.get("userId", ""),
            medication_id=data.get("medicationId", ""),
            scheduled_time=data.get("scheduledTime", ""),
            date=data.get("date", ""),
            taken_at=int(taken_at) if taken_at else None,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "medicationId": self.medication_id,
            "scheduledTime": self.scheduled_time,
            "date": self.date,
            "takenAt": self.taken_at,
        }

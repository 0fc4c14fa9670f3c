# medreminder/models/medication.py
from dataclasses import dataclass, field
from typing import List, Optional

COLLECTION = "medications"


@dataclass
class Medication:
    id: str
    user_id: str
    name: str
    dosage: str
    frequency_per_day: int
    times: List[str] = field(default_factory=list)
    start_date: str = ""
    end_date: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def from_document(cls, doc_id, data):
        times = list(data.get("times") or [])
        return cls(
            id=doc_id,
            user_id=data.get("userId", ""),
            name=data.get("name", ""),
            dosage=data.get("dosage", ""),
            frequency_per_day=int(data.get("frequencyPerDay") or len(times)),
            times=times,
            start_date=data.get("startDate", ""),
            end_date=data.get("endDate") or None,
            notes=data.get("notes") or None,
            is_active=bool(data.get("isActive", True)),
            created_at=int(data.get("createdAt") or 0),
            updated_at=int(data.get("updatedAt") or 0),
        )

    def to_dict(self):
        out = {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "dosage": self.dosage,
            "frequencyPerDay": self.frequency_per_day,
            "times": list(self.times),
            "startDate": self.start_date,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.end_date:
            out["endDate"] = self.end_date
        if self.notes:
            out["notes"] = self.notes
        return out

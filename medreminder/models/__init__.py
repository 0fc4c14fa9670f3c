# medreminder/models/__init__.py
from .medication import Medication
from .medication_dose import MedicationDose

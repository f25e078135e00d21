from .caregiver import Caregiver
from .patient import Patient
from .availability import AvailabilitySlot
from .vaccine import VaccineStock
from .appointment import Appointment

__all__ = ["Caregiver", "Patient", "AvailabilitySlot", "VaccineStock", "Appointment"]

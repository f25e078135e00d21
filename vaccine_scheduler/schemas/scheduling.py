from datetime import date as Date
from typing import List

from pydantic import BaseModel, ConfigDict, Field

class AvailabilityUpload(BaseModel):
    date: Date

class AvailabilityUploadResponse(BaseModel):
    caregiver_username: str
    date: Date
    created: bool

class VaccineStockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    doses: int

class ScheduleResponse(BaseModel):
    """Caregivers free on a date plus the vaccines that still have doses."""
    date: Date
    caregivers: List[str]
    vaccines: List[VaccineStockResponse]

class DoseAddition(BaseModel):
    doses: int = Field(..., ge=0)

class ReservationRequest(BaseModel):
    date: Date
    vaccine_name: str = Field(..., min_length=1, max_length=255)

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: Date
    vaccine_name: str
    caregiver_username: str
    patient_username: str

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import UserContext, UserRole
from ...api.deps import get_current_user, get_patient_user
from ...services.appointment_ledger import AppointmentLedger
from ...services.reservation_service import ReservationCoordinator
from ...schemas.scheduling import AppointmentResponse, ReservationRequest

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def reserve(
    reservation: ReservationRequest,
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_patient_user)
):
    """Reserve a vaccination appointment for the calling patient."""
    appointment = ReservationCoordinator(db).reserve(
        current_user.username, reservation.date, reservation.vaccine_name
    )
    return AppointmentResponse.model_validate(appointment)

@router.get("", response_model=List[AppointmentResponse])
def show_appointments(
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_current_user)
):
    """Appointments of the calling patient or caregiver, oldest first."""
    ledger = AppointmentLedger(db)
    if current_user.role == UserRole.PATIENT:
        appointments = ledger.list_by_patient(current_user.username)
    else:
        appointments = ledger.list_by_caregiver(current_user.username)

    return [AppointmentResponse.model_validate(a) for a in appointments]

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from datetime import date

from ...core.database import get_db
from ...core.security import UserContext
from ...api.deps import get_caregiver_user, get_current_user
from ...services.availability_store import AvailabilityStore
from ...services.dose_ledger import DoseLedger
from ...schemas.scheduling import (
    AvailabilityUpload, AvailabilityUploadResponse, ScheduleResponse, VaccineStockResponse
)

router = APIRouter(prefix="/availability", tags=["Availability"])

# Plain ``def`` handlers: FastAPI runs them in its threadpool.

@router.post("", response_model=AvailabilityUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_availability(
    upload: AvailabilityUpload,
    response: Response,
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_caregiver_user)
):
    """Declare the calling caregiver available on a date."""
    created = AvailabilityStore(db).upload(current_user.username, upload.date)
    if not created:
        response.status_code = status.HTTP_200_OK

    return AvailabilityUploadResponse(
        caregiver_username=current_user.username,
        date=upload.date,
        created=created
    )

@router.get("", response_model=ScheduleResponse)
def search_caregiver_schedule(
    date: date = Query(..., description="Date to search, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_current_user)
):
    """Caregivers available on a date and vaccines with doses left."""
    caregivers = AvailabilityStore(db).list_available(date)
    vaccines = DoseLedger(db).list_stock(only_available=True)

    return ScheduleResponse(
        date=date,
        caregivers=caregivers,
        vaccines=[VaccineStockResponse.model_validate(v) for v in vaccines]
    )

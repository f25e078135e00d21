from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import UserContext
from ...api.deps import get_caregiver_user, get_current_user
from ...services.dose_ledger import DoseLedger
from ...schemas.scheduling import DoseAddition, VaccineStockResponse

router = APIRouter(prefix="/vaccines", tags=["Vaccines"])

@router.post("/{vaccine_name}/doses", response_model=VaccineStockResponse)
def add_doses(
    addition: DoseAddition,
    vaccine_name: str = Path(..., min_length=1, max_length=255),
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_caregiver_user)
):
    """Add doses to a vaccine, creating it on first addition."""
    doses = DoseLedger(db).add_doses(vaccine_name, addition.doses)
    return VaccineStockResponse(name=vaccine_name.strip(), doses=doses)

@router.get("", response_model=List[VaccineStockResponse])
def list_vaccines(
    db: Session = Depends(get_db),
    current_user: UserContext = Depends(get_current_user)
):
    """Current stock of every vaccine."""
    return [VaccineStockResponse.model_validate(v) for v in DoseLedger(db).list_stock()]

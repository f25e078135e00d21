from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import StorageError
from ..models.appointment import Appointment

class AppointmentLedger:
    """Append-only record of completed reservations."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        appointment_date: date,
        vaccine_name: str,
        caregiver_username: str,
        patient_username: str,
    ) -> Appointment:
        """Append an appointment inside the caller's transaction; the flush assigns its id."""
        appointment = Appointment(
            date=appointment_date,
            vaccine_name=vaccine_name,
            caregiver_username=caregiver_username,
            patient_username=patient_username,
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def find(self, appointment_id: int) -> Optional[Appointment]:
        try:
            return self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when reading appointment") from e

    def list_by_patient(self, patient_username: str) -> List[Appointment]:
        return self._list(Appointment.patient_username == patient_username)

    def list_by_caregiver(self, caregiver_username: str) -> List[Appointment]:
        return self._list(Appointment.caregiver_username == caregiver_username)

    def _list(self, criterion) -> List[Appointment]:
        try:
            return list(
                self.db.execute(
                    select(Appointment).where(criterion).order_by(Appointment.id)
                ).scalars()
            )
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when showing appointments") from e

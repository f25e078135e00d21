"""
Reservation coordinator.

Binds a patient, one caregiver slot and one vaccine dose into an
appointment. The slot deletion, the dose decrement and the appointment
insert share one database transaction: either all three commit or the
rollback undoes whichever of them already ran, so a consumed slot is
restored when the dose step fails.
"""
from datetime import date
from typing import List, Union
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    InsufficientDosesError, NoAvailabilityError, SchedulerError,
    StorageError, UnknownVaccineError
)
from ..core.validation import parse_date, require_name
from ..models.appointment import Appointment
from .appointment_ledger import AppointmentLedger
from .availability_store import AvailabilityStore
from .dose_ledger import ConsumeResult, DoseLedger

logger = logging.getLogger(__name__)

class ReservationCoordinator:
    def __init__(self, db: Session):
        self.db = db
        self.availability = AvailabilityStore(db)
        self.doses = DoseLedger(db)
        self.appointments = AppointmentLedger(db)

    def reserve(
        self,
        patient_username: str,
        appointment_date: Union[date, str],
        vaccine_name: str,
    ) -> Appointment:
        """
        Reserve the first free caregiver on the date and one dose of the vaccine.

        Raises ValidationError, NoAvailabilityError, UnknownVaccineError,
        InsufficientDosesError or StorageError. Nothing is left changed when
        an error is raised.
        """
        patient_username = require_name(patient_username, "patient")
        appointment_date = parse_date(appointment_date)
        vaccine_name = require_name(vaccine_name, "vaccine name")

        try:
            appointment = self._reserve(patient_username, appointment_date, vaccine_name)
            self.db.commit()
        except StorageError as e:
            self.db.rollback()
            logger.error(f"Error occurred when reserving appointment: {e.message}")
            raise
        except SchedulerError as e:
            self.db.rollback()
            logger.warning(
                f"Reservation failed for {patient_username} on {appointment_date} "
                f"({vaccine_name}): {e.message}"
            )
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error occurred when reserving appointment: {str(e)}")
            raise StorageError("Error occurred when reserving appointment") from e

        self.db.refresh(appointment)
        logger.info(
            f"Appointment {appointment.id} reserved: {patient_username} with "
            f"{appointment.caregiver_username} on {appointment_date} ({vaccine_name})"
        )
        return appointment

    def _reserve(self, patient_username: str, appointment_date: date, vaccine_name: str) -> Appointment:
        candidates = self.availability.list_available(appointment_date)
        if not candidates:
            raise NoAvailabilityError(f"No available caregivers for {appointment_date}")

        caregiver_username = self._claim_slot(candidates, appointment_date)

        outcome = self.doses.try_consume_one(vaccine_name)
        if outcome is ConsumeResult.UNKNOWN_VACCINE:
            raise UnknownVaccineError(f"Our vaccine storage does not have {vaccine_name}")
        if outcome is ConsumeResult.OUT_OF_STOCK:
            raise InsufficientDosesError(f"No available doses for {vaccine_name}")

        return self.appointments.record(
            appointment_date, vaccine_name, caregiver_username, patient_username
        )

    def _claim_slot(self, candidates: List[str], appointment_date: date) -> str:
        # Each lost race removes one candidate, so this ends after len(candidates) tries
        for caregiver_username in candidates:
            if self.availability.consume(caregiver_username, appointment_date):
                return caregiver_username
            logger.debug(
                f"Slot {caregiver_username}/{appointment_date} taken by a concurrent reservation"
            )
        raise NoAvailabilityError(f"No available caregivers for {appointment_date}")

from datetime import date
from typing import List, Union
import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import StorageError
from ..core.validation import parse_date, require_name
from ..models.appointment import Appointment
from ..models.availability import AvailabilitySlot

logger = logging.getLogger(__name__)

class AvailabilityStore:
    """Caregiver/date slots, each consumable at most once."""

    def __init__(self, db: Session):
        self.db = db

    def upload(self, caregiver_username: str, slot_date: Union[date, str]) -> bool:
        """
        Declare a caregiver available on a date and commit.

        Returns False without creating anything if the slot already exists
        or the caregiver is already booked on that date.
        """
        caregiver_username = require_name(caregiver_username, "caregiver")
        slot_date = parse_date(slot_date)

        try:
            if self.exists(caregiver_username, slot_date) or self._is_booked(
                caregiver_username, slot_date
            ):
                return False

            self.db.execute(
                insert(AvailabilitySlot).values(
                    date=slot_date, caregiver_username=caregiver_username
                )
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # Lost an insert race for the same pair
            if self.exists(caregiver_username, slot_date):
                return False
            logger.error(f"Rejected availability for {caregiver_username}: {str(e)}")
            raise StorageError(
                f"Error occurred when uploading availability for {caregiver_username}"
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to upload availability for {caregiver_username}: {str(e)}")
            raise StorageError("Error occurred when uploading availability") from e

        logger.info(f"Availability uploaded: {caregiver_username} on {slot_date}")
        return True

    def list_available(self, slot_date: Union[date, str]) -> List[str]:
        """Caregivers with an open slot on the date, in ascending username order."""
        slot_date = parse_date(slot_date)
        try:
            rows = self.db.execute(
                select(AvailabilitySlot.caregiver_username)
                .where(AvailabilitySlot.date == slot_date)
                .order_by(AvailabilitySlot.caregiver_username)
            )
            return list(rows.scalars())
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when searching caregiver schedule") from e

    def exists(self, caregiver_username: str, slot_date: date) -> bool:
        return self.db.execute(
            select(AvailabilitySlot.caregiver_username).where(
                AvailabilitySlot.date == slot_date,
                AvailabilitySlot.caregiver_username == caregiver_username,
            )
        ).first() is not None

    def consume(self, caregiver_username: str, slot_date: Union[date, str]) -> bool:
        """
        Delete the slot in a single statement and report whether it existed.

        The deletion joins the caller's open transaction; the caller commits
        or rolls back. Of two concurrent callers at most one sees a row count
        of one.
        """
        slot_date = parse_date(slot_date)
        result = self.db.execute(
            delete(AvailabilitySlot)
            .where(
                AvailabilitySlot.date == slot_date,
                AvailabilitySlot.caregiver_username == caregiver_username,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _is_booked(self, caregiver_username: str, slot_date: date) -> bool:
        return self.db.execute(
            select(Appointment.id).where(
                Appointment.date == slot_date,
                Appointment.caregiver_username == caregiver_username,
            )
        ).first() is not None

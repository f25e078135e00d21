from typing import List, Optional
import enum
import logging

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import StorageError, ValidationError
from ..core.validation import require_name
from ..models.vaccine import VaccineStock

logger = logging.getLogger(__name__)

class ConsumeResult(str, enum.Enum):
    CONSUMED = "consumed"
    UNKNOWN_VACCINE = "unknown_vaccine"
    OUT_OF_STOCK = "out_of_stock"

    def __bool__(self):
        return self is ConsumeResult.CONSUMED

class DoseLedger:
    """Per-vaccine dose counts that never drop below zero."""

    # Attempts at the update-or-insert before giving up on a contended first insert
    MAX_ADD_ATTEMPTS = 3

    def __init__(self, db: Session):
        self.db = db

    def add_doses(self, vaccine_name: str, doses: int) -> int:
        """Create the vaccine or increase its stock, commit, and return the new count."""
        vaccine_name = require_name(vaccine_name, "vaccine name")
        if isinstance(doses, bool) or not isinstance(doses, int):
            raise ValidationError("doses must be an integer")
        if doses < 0:
            raise ValidationError("doses must not be negative")

        for attempt in range(self.MAX_ADD_ATTEMPTS):
            try:
                # The count this caller produced, not a later read
                current = self.db.execute(
                    update(VaccineStock)
                    .where(VaccineStock.name == vaccine_name)
                    .values(doses=VaccineStock.doses + doses)
                    .returning(VaccineStock.doses)
                    .execution_options(synchronize_session=False)
                ).scalar_one_or_none()
                if current is None:
                    self.db.execute(insert(VaccineStock).values(name=vaccine_name, doses=doses))
                    current = doses
                self.db.commit()
                break
            except IntegrityError:
                # A concurrent caller created the row first; the update now applies
                self.db.rollback()
                logger.debug(f"Retrying dose addition for {vaccine_name} (attempt {attempt + 1})")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Failed to add doses for {vaccine_name}: {str(e)}")
                raise StorageError("Error occurred when adding doses") from e
        else:
            raise StorageError(f"Could not add doses for {vaccine_name}")

        logger.info(f"Doses updated: {vaccine_name} +{doses} (now {current})")
        return current

    def try_consume_one(self, vaccine_name: str) -> ConsumeResult:
        """
        Take one dose if any remain.

        The check and the decrement are one conditional UPDATE, so two
        callers racing for the last dose cannot both succeed. Runs inside
        the caller's transaction; the caller commits or rolls back.
        """
        result = self.db.execute(
            update(VaccineStock)
            .where(VaccineStock.name == vaccine_name, VaccineStock.doses > 0)
            .values(doses=VaccineStock.doses - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return ConsumeResult.CONSUMED
        if self.find(vaccine_name) is None:
            return ConsumeResult.UNKNOWN_VACCINE
        return ConsumeResult.OUT_OF_STOCK

    def find(self, vaccine_name: str) -> Optional[VaccineStock]:
        return self.db.execute(
            select(VaccineStock)
            .where(VaccineStock.name == vaccine_name)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def available_doses(self, vaccine_name: str) -> int:
        """Current dose count, 0 for an unknown vaccine."""
        try:
            doses = self.db.execute(
                select(VaccineStock.doses).where(VaccineStock.name == vaccine_name)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when reading doses") from e
        return doses or 0

    def list_stock(self, only_available: bool = False) -> List[VaccineStock]:
        """All vaccines by name, optionally only those with doses left."""
        query = select(VaccineStock).order_by(VaccineStock.name)
        if only_available:
            query = query.where(VaccineStock.doses > 0)
        try:
            return list(
                self.db.execute(query.execution_options(populate_existing=True)).scalars()
            )
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when listing vaccines") from e

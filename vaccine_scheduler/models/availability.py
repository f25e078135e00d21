from sqlalchemy import Column, String, Date, ForeignKey
from sqlalchemy.orm import relationship

from ..core.database import Base

class AvailabilitySlot(Base):
    """One caregiver's openness to take one appointment on one date."""
    __tablename__ = "availabilities"

    # The composite key makes (date, caregiver) unique
    date = Column(Date, primary_key=True)
    caregiver_username = Column(
        String(255), ForeignKey("caregivers.username"), primary_key=True
    )

    caregiver = relationship("Caregiver", back_populates="availabilities")

    def __repr__(self):
        return f"<AvailabilitySlot(date='{self.date}', caregiver='{self.caregiver_username}')>"

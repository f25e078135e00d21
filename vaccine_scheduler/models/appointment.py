from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # A slot is consumed at most once
        UniqueConstraint("date", "caregiver_username", name="uq_appointment_caregiver_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Appointment details
    date = Column(Date, nullable=False, index=True)
    vaccine_name = Column(String(255), ForeignKey("vaccines.name"), nullable=False)

    # Relationships
    caregiver_username = Column(
        String(255), ForeignKey("caregivers.username"), nullable=False, index=True
    )
    patient_username = Column(
        String(255), ForeignKey("patients.username"), nullable=False, index=True
    )

    # Tracking
    created_at = Column(DateTime, server_default=func.now())

    caregiver = relationship("Caregiver", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, date='{self.date}', vaccine='{self.vaccine_name}', "
            f"caregiver='{self.caregiver_username}', patient='{self.patient_username}')>"
        )

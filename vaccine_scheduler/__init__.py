"""
Vaccine Reservation Scheduler

A FastAPI-based service that matches vaccination-seeking patients to
caregiver availability while tracking per-vaccine dose inventory.
"""

__version__ = "1.0.0"

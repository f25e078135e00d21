"""
Test suite for the Vaccine Reservation Scheduler.

Contains unit tests for the stores and the reservation coordinator,
concurrency tests, and API tests for the session layer.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"

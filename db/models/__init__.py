from db.models.client import Client
from db.models.appointment import Appointment
from db.models.control import Control

__all__ = ["Client", "Appointment", "Control"]

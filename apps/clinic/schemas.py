from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel


def to_naive_utc(value: datetime) -> datetime:
    """Las fechas se guardan en UTC sin zona horaria."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class ClientCreate(BaseModel):
    name: str
    surname: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    # Primera cita opcional, con su control
    appointment: Optional[UtcDatetime] = None
    control: Optional[UtcDatetime] = None
    price: Optional[float] = None
    technician: Optional[str] = None
    treatment: Optional[str] = None


class AppointmentCreate(BaseModel):
    appointment: UtcDatetime
    control: Optional[UtcDatetime] = None
    price: Optional[float] = None
    technician: Optional[str] = None
    treatment: Optional[str] = None


class AppointmentUpdate(BaseModel):
    appointment: Optional[UtcDatetime] = None
    control: Optional[UtcDatetime] = None
    price: Optional[float] = None
    technician: Optional[str] = None
    treatment: Optional[str] = None


class ControlUpdate(BaseModel):
    date: Optional[UtcDatetime] = None
    # Fecha de revisión: si viene, se crea un control sucesor
    control: Optional[UtcDatetime] = None
    price: Optional[float] = None
    technician: Optional[str] = None
    treatment: Optional[str] = None

import uuid
from sqlalchemy import Column, String, DateTime, Float
from datetime import datetime, timezone
from db.database import Base

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    client_id = Column(String(32), nullable=False, index=True)
    appointment = Column(DateTime, nullable=False, index=True)
    price = Column(Float, nullable=True)
    technician = Column(String, nullable=True)
    treatment = Column(String, nullable=True)
    # Referencia al control vigente. Puede quedar colgando si el control se borra.
    control_id = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def __repr__(self):
        return f"<Appointment(id={self.id}, client_id={self.client_id}, appointment={self.appointment})>"

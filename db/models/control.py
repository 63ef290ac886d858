import uuid
from sqlalchemy import Column, String, DateTime, Float
from datetime import datetime, timezone
from db.database import Base

class Control(Base):
    __tablename__ = "controls"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    client_id = Column(String(32), nullable=False, index=True)
    appointment_id = Column(String(32), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    price = Column(Float, nullable=True)
    technician = Column(String, nullable=True)
    treatment = Column(String, nullable=True)
    # Sucesor en la cadena de revisiones (None en el último eslabón)
    control_id = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def __repr__(self):
        return f"<Control(id={self.id}, appointment_id={self.appointment_id}, date={self.date})>"

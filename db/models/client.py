import uuid
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone
from db.database import Base

class Client(Base):
    __tablename__ = "clients"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String, nullable=False, index=True)
    surname = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    # Lista ordenada de IDs de citas (copia desnormalizada, no es la fuente de verdad)
    appointments = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', surname='{self.surname}')>"

import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'clinic.db')}"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest

from apps.clinic.entity_linker import add_appointment_for_client
from db import document_store
from db.database import Base, engine
from db.models import Client, Appointment, Control  # noqa: F401


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def make_client():
    async def _make_client(name="Ana", surname="Pérez", phone="600111222", address="Calle 1"):
        return await document_store.clients.insert({
            "name": name,
            "surname": surname,
            "phone": phone,
            "address": address,
            "appointments": [],
        })
    return _make_client


@pytest.fixture
def make_appointment():
    async def _make_appointment(client_id, appointment, control=None, price=50.0, technician="Laura", treatment="Limpieza"):
        result = await add_appointment_for_client(
            client_id,
            appointment,
            control=control,
            price=price,
            technician=technician,
            treatment=treatment,
        )
        assert result.success, result.error
        return result.data
    return _make_appointment


def failing_call(error):
    async def _fail(*args, **kwargs):
        raise error
    return _fail

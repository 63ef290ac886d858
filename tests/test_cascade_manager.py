from datetime import datetime

from apps.clinic import cascade_manager, timeline_merger
from apps.clinic.errors import StoreFailure
from db import document_store

from conftest import failing_call


async def test_delete_client_removes_its_appointments_and_controls(make_client, make_appointment):
    client = await make_client()
    other = await make_client(name="Bea")
    await make_appointment(client["id"], datetime(2024, 1, 5, 10), control=datetime(2024, 2, 1, 9))
    await make_appointment(client["id"], datetime(2024, 3, 1, 10), control=datetime(2024, 4, 1, 9))
    kept = await make_appointment(other["id"], datetime(2024, 1, 7, 10), control=datetime(2024, 2, 7, 9))

    result = await cascade_manager.delete_client(client["id"])

    assert result.success
    assert result.data == {"clients": 1, "appointments": 2, "controls": 2}
    assert await document_store.clients.find_one({"id": client["id"]}) is None
    assert await document_store.appointments.find({"client_id": client["id"]}) == []
    assert await document_store.controls.find({"client_id": client["id"]}) == []
    assert await document_store.appointments.find_one({"id": kept["id"]}) is not None
    assert await document_store.controls.find_one({"id": kept["control_id"]}) is not None


async def test_delete_appointment_removes_controls_and_client_reference(make_client, make_appointment):
    client = await make_client()
    appointment = await make_appointment(client["id"], datetime(2024, 1, 5, 10), control=datetime(2024, 2, 1, 9))
    await document_store.controls.insert({
        "appointment_id": appointment["id"],
        "client_id": client["id"],
        "date": datetime(2024, 3, 1, 9),
    })

    result = await cascade_manager.delete_appointment(appointment["id"])

    assert result.success
    assert result.data == {"appointments": 1, "controls": 2}
    assert await document_store.controls.find({"appointment_id": appointment["id"]}) == []
    stored_client = await document_store.clients.find_one({"id": client["id"]})
    assert appointment["id"] not in stored_client["appointments"]


async def test_delete_client_after_appointment_cascade_is_idempotent(make_client, make_appointment):
    client = await make_client()
    appointment = await make_appointment(client["id"], datetime(2024, 1, 5, 10), control=datetime(2024, 2, 1, 9))
    await cascade_manager.delete_appointment(appointment["id"])

    result = await cascade_manager.delete_client(client["id"])

    assert result.success
    assert result.data == {"clients": 1, "appointments": 0, "controls": 0}
    again = await cascade_manager.delete_client(client["id"])
    assert again.success
    assert again.data == {"clients": 0, "appointments": 0, "controls": 0}


async def test_deleting_unknown_records_is_a_no_op():
    assert (await cascade_manager.delete_appointment("no-existe")).success
    assert (await cascade_manager.delete_control("no-existe")).data == {"controls": 0}


async def test_delete_control_leaves_appointment_with_unresolved_control(make_client, make_appointment):
    client = await make_client()
    appointment = await make_appointment(client["id"], datetime(2024, 1, 5, 10), control=datetime(2024, 2, 1, 9))

    result = await cascade_manager.delete_control(appointment["control_id"])

    assert result.success
    stored = await document_store.appointments.find_one({"id": appointment["id"]})
    assert stored["control_id"] == appointment["control_id"]
    rows = await timeline_merger.get_normalized_appointments_for_client(client["id"])
    assert len(rows) == 1
    assert rows[0]["control"] is None


async def test_cascade_failure_keeps_previous_steps(make_client, make_appointment, monkeypatch):
    client = await make_client()
    await make_appointment(client["id"], datetime(2024, 1, 5, 10), control=datetime(2024, 2, 1, 9))
    monkeypatch.setattr(document_store.controls, "delete_many", failing_call(StoreFailure("caída")))

    result = await cascade_manager.delete_client(client["id"])

    assert not result.success
    assert isinstance(result.error, StoreFailure)
    assert await document_store.clients.find_one({"id": client["id"]}) is None
    assert await document_store.appointments.find({"client_id": client["id"]}) == []
    assert len(await document_store.controls.find({"client_id": client["id"]})) == 1

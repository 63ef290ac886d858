from datetime import datetime

from apps.clinic import revision_chain, timeline_merger
from apps.clinic.errors import StoreFailure
from db import document_store


async def test_global_merge_orders_appointments_and_controls_by_date(make_client, make_appointment):
    client = await make_client()
    await make_appointment(client["id"], datetime(2024, 3, 1), control=None)
    await make_appointment(client["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))

    result = await timeline_merger.get_appointments_and_controls()

    assert result.success
    assert [(row["type"], timeline_merger.timeline_date(row)) for row in result.data] == [
        ("appointment", datetime(2024, 1, 5)),
        ("control", datetime(2024, 2, 1)),
        ("appointment", datetime(2024, 3, 1)),
    ]


async def test_global_rows_carry_client_identity_and_counterpart_date(make_client, make_appointment):
    client = await make_client(name="Ana", surname="Pérez", phone="600111222")
    await make_appointment(client["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))

    result = await timeline_merger.get_appointments_and_controls()

    appointment_row, control_row = result.data
    assert appointment_row["name"] == "Ana"
    assert appointment_row["surname"] == "Pérez"
    assert appointment_row["phone"] == "600111222"
    assert appointment_row["control"] == datetime(2024, 2, 1)
    assert control_row["name"] == "Ana"
    assert control_row["appointment"] == datetime(2024, 1, 5)
    assert "control_id" not in control_row


async def test_each_entity_contributes_one_row(make_client, make_appointment):
    client = await make_client()
    appointment = await make_appointment(client["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))
    await revision_chain.modify_control(appointment["control_id"], control=datetime(2024, 3, 1))

    result = await timeline_merger.get_appointments_and_controls()

    ids = [row["id"] for row in result.data]
    assert len(ids) == len(set(ids)) == 3


async def test_row_with_missing_client_keeps_empty_identity(make_appointment):
    await make_appointment("cliente-borrado", datetime(2024, 1, 5))

    result = await timeline_merger.get_appointments_and_controls()

    assert result.success
    assert result.data[0]["name"] is None
    assert result.data[0]["phone"] is None


async def test_failed_client_lookup_drops_only_that_row(make_client, make_appointment, monkeypatch):
    good = await make_client(name="Ana")
    bad = await make_client(name="Bea")
    await make_appointment(good["id"], datetime(2024, 1, 5))
    await make_appointment(bad["id"], datetime(2024, 1, 6))
    original_find_one = document_store.clients.find_one

    async def flaky_find_one(filters):
        if filters.get("id") == bad["id"]:
            raise StoreFailure("lectura interrumpida")
        return await original_find_one(filters)

    monkeypatch.setattr(document_store.clients, "find_one", flaky_find_one)

    result = await timeline_merger.get_appointments_and_controls()

    assert result.success
    assert [row["name"] for row in result.data] == ["Ana"]


async def test_failed_base_fetch_fails_whole_timeline(monkeypatch):
    async def broken_find(*args, **kwargs):
        raise StoreFailure("base no disponible")

    monkeypatch.setattr(document_store.controls, "find", broken_find)

    result = await timeline_merger.get_appointments_and_controls()

    assert not result.success
    assert isinstance(result.error, StoreFailure)


async def test_per_client_controls_resolve_appointment_and_strip_successor(make_client, make_appointment):
    client = await make_client()
    appointment = await make_appointment(client["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))
    await revision_chain.modify_control(appointment["control_id"], control=datetime(2024, 3, 1))

    controls = await timeline_merger.get_normalized_controls_for_client(client["id"])

    assert [control["date"] for control in controls] == [datetime(2024, 2, 1), datetime(2024, 3, 1)]
    for control in controls:
        assert "control_id" not in control
        assert control["appointment"] == datetime(2024, 1, 5)


async def test_per_client_views_only_include_that_client(make_client, make_appointment):
    client = await make_client(name="Ana")
    other = await make_client(name="Bea")
    await make_appointment(client["id"], datetime(2024, 3, 1))
    await make_appointment(client["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))
    await make_appointment(other["id"], datetime(2024, 1, 1), control=datetime(2024, 1, 20))

    appointments = await timeline_merger.get_normalized_appointments_for_client(client["id"])

    assert [row["appointment"] for row in appointments] == [datetime(2024, 1, 5), datetime(2024, 3, 1)]
    assert [row["control"] for row in appointments] == [datetime(2024, 2, 1), None]


async def test_clients_listing_is_sorted_and_nested(make_client, make_appointment):
    zoe = await make_client(name="Zoe", surname="Alba")
    ana_b = await make_client(name="Ana", surname="Bravo")
    ana_a = await make_client(name="Ana", surname="Arce")
    await make_appointment(ana_a["id"], datetime(2024, 1, 5), control=datetime(2024, 2, 1))

    result = await timeline_merger.get_clients()

    assert result.success
    assert [client["id"] for client in result.data] == [ana_a["id"], ana_b["id"], zoe["id"]]
    listed = result.data[0]
    assert listed["appointments"][0]["control"] == datetime(2024, 2, 1)
    assert listed["controls"][0]["appointment"] == datetime(2024, 1, 5)
    assert result.data[1]["appointments"] == []
    assert result.data[1]["controls"] == []

"""
Vistas de lectura: citas y controles desnormalizados y la línea de tiempo.

Las referencias entre citas y controles se resuelven al leer. Una referencia
que no resuelve se muestra como ``None``; nunca es un error.
"""
import asyncio
import heapq
import logging
from typing import Any, Dict, List, Optional

from apps.clinic.errors import ClinicError
from apps.clinic.results import OperationResult
from db import document_store

logger = logging.getLogger(__name__)

APPOINTMENT = "appointment"
CONTROL = "control"

CLIENT_FIELDS = ("name", "surname", "phone")


async def _resolve_date(collection, record_id: Optional[str], field: str):
    if record_id is None:
        return None
    document = await collection.find_one({"id": record_id})
    return document.get(field) if document else None


async def _gather_rows(coroutines) -> List[Dict[str, Any]]:
    """Ejecuta las búsquedas por fila en paralelo y descarta las filas que fallaron."""
    rows = await asyncio.gather(*coroutines, return_exceptions=True)
    normalized = []
    for row in rows:
        if isinstance(row, Exception):
            logger.error(f"TIMELINE: Fila descartada por error al desnormalizar: {row}", exc_info=row)
            continue
        normalized.append(row)
    return normalized


async def get_normalized_appointments_for_client(client_id: str) -> List[Dict[str, Any]]:
    appointments = await document_store.appointments.find({"client_id": client_id}, sort=["appointment"])

    async def normalize(appointment):
        appointment["control"] = await _resolve_date(document_store.controls, appointment.get("control_id"), "date")
        return appointment

    return await _gather_rows(normalize(appointment) for appointment in appointments)


async def get_normalized_controls_for_client(client_id: str) -> List[Dict[str, Any]]:
    controls = await document_store.controls.find({"client_id": client_id}, sort=["date"])

    async def normalize(control):
        control.pop("control_id", None)
        control["appointment"] = await _resolve_date(document_store.appointments, control.get("appointment_id"), "appointment")
        return control

    return await _gather_rows(normalize(control) for control in controls)


async def get_clients() -> OperationResult:
    """Clientes ordenados por nombre y apellido, cada uno con sus citas y controles normalizados."""
    try:
        clients = await document_store.clients.find(sort=["name", "surname"])
        for client in clients:
            client["appointments"] = await get_normalized_appointments_for_client(client["id"])
            client["controls"] = await get_normalized_controls_for_client(client["id"])
    except ClinicError as e:
        logger.error(f"TIMELINE: Error al obtener los clientes: {e}", exc_info=True)
        return OperationResult.fail(e)

    return OperationResult.ok(clients)


async def _attach_client(record: Dict[str, Any]) -> None:
    client = await document_store.clients.find_one({"id": record["client_id"]})
    for field in CLIENT_FIELDS:
        record[field] = client.get(field) if client else None


async def get_appointments() -> List[Dict[str, Any]]:
    appointments = await document_store.appointments.find(sort=["appointment"])

    async def denormalize(appointment):
        await _attach_client(appointment)
        appointment["control"] = await _resolve_date(document_store.controls, appointment.get("control_id"), "date")
        appointment["type"] = APPOINTMENT
        return appointment

    return await _gather_rows(denormalize(appointment) for appointment in appointments)


async def get_controls() -> List[Dict[str, Any]]:
    controls = await document_store.controls.find(sort=["date"])

    async def denormalize(control):
        await _attach_client(control)
        control.pop("control_id", None)
        control["appointment"] = await _resolve_date(document_store.appointments, control.get("appointment_id"), "appointment")
        control["type"] = CONTROL
        return control

    return await _gather_rows(denormalize(control) for control in controls)


def timeline_date(row: Dict[str, Any]):
    """Fecha efectiva de una fila: la de la cita o la del control según su tipo."""
    return row["appointment"] if row["type"] == APPOINTMENT else row["date"]


def merge_timeline(appointments: List[Dict[str, Any]], controls: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Ambas secuencias llegan ordenadas por fecha desde la base.
    return list(heapq.merge(appointments, controls, key=timeline_date))


async def get_appointments_and_controls() -> OperationResult:
    try:
        appointments = await get_appointments()
        controls = await get_controls()
    except ClinicError as e:
        logger.error(f"TIMELINE: Error al obtener citas y controles: {e}", exc_info=True)
        return OperationResult.fail(e)

    timeline = merge_timeline(appointments, controls)
    logger.info(f"TIMELINE: {len(appointments)} citas y {len(controls)} controles combinados")
    return OperationResult.ok(timeline)

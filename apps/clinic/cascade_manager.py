"""
Borrados en cascada.

No hay transacciones entre colecciones: cada paso es un borrado por filtro
independiente e idempotente. Si un paso falla, los anteriores quedan hechos y
el fallo se devuelve como un único resultado.
"""
import logging

from apps.clinic.errors import ClinicError
from apps.clinic.results import OperationResult
from db import document_store

logger = logging.getLogger(__name__)


async def delete_client(client_id: str) -> OperationResult:
    logger.info(f"CASCADE: Borrando cliente {client_id} con sus citas y controles")
    deleted = {"clients": 0, "appointments": 0, "controls": 0}
    try:
        deleted["clients"] = await document_store.clients.delete_one({"id": client_id})
        deleted["appointments"] = await document_store.appointments.delete_many({"client_id": client_id})
        deleted["controls"] = await document_store.controls.delete_many({"client_id": client_id})
    except ClinicError as e:
        logger.error(f"CASCADE: Borrado del cliente {client_id} incompleto ({deleted}): {e}", exc_info=True)
        return OperationResult.fail(e)

    logger.info(f"CASCADE: Cliente {client_id} borrado: {deleted}")
    return OperationResult.ok(deleted)


async def delete_appointment(appointment_id: str) -> OperationResult:
    logger.info(f"CASCADE: Borrando cita {appointment_id} y sus controles")
    deleted = {"appointments": 0, "controls": 0}
    try:
        appointment_document = await document_store.appointments.find_one({"id": appointment_id})
        deleted["appointments"] = await document_store.appointments.delete_one({"id": appointment_id})
        deleted["controls"] = await document_store.controls.delete_many({"appointment_id": appointment_id})
        if appointment_document is not None:
            await document_store.clients.pull(
                {"id": appointment_document["client_id"]}, "appointments", appointment_id
            )
    except ClinicError as e:
        logger.error(f"CASCADE: Borrado de la cita {appointment_id} incompleto ({deleted}): {e}", exc_info=True)
        return OperationResult.fail(e)

    logger.info(f"CASCADE: Cita {appointment_id} borrada: {deleted}")
    return OperationResult.ok(deleted)


async def delete_control(control_id: str) -> OperationResult:
    """Borra solo el control. La cita que lo referencia conserva el ID colgando."""
    logger.info(f"CASCADE: Borrando control {control_id}")
    try:
        deleted = await document_store.controls.delete_one({"id": control_id})
    except ClinicError as e:
        logger.error(f"CASCADE: Error al borrar el control {control_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    return OperationResult.ok({"controls": deleted})

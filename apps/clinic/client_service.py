"""
Operaciones de entrada: cada mutación termina re-derivando la vista de
lectura (listado de clientes o línea de tiempo global). No hay proyecciones
en caché.
"""
import logging
from datetime import datetime
from typing import Optional

from apps.clinic import cascade_manager, revision_chain, timeline_merger
from apps.clinic.entity_linker import add_appointment_for_client
from apps.clinic.errors import ClinicError, NotFoundError, PartialWriteInconsistency
from apps.clinic.results import OperationResult
from db import document_store

logger = logging.getLogger(__name__)


async def get_clients() -> OperationResult:
    return await timeline_merger.get_clients()


async def get_appointments_and_controls() -> OperationResult:
    return await timeline_merger.get_appointments_and_controls()


async def add_client(
    name: str,
    surname: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    appointment: Optional[datetime] = None,
    control: Optional[datetime] = None,
    price: Optional[float] = None,
    technician: Optional[str] = None,
    treatment: Optional[str] = None,
) -> OperationResult:
    """Registra un cliente y, si viene fecha de cita, su primera cita (y control)."""
    logger.info(f"CLIENT_SERVICE: Registrando cliente {name} {surname or ''}".rstrip())
    try:
        client_document = await document_store.clients.insert({
            "name": name,
            "surname": surname,
            "phone": phone,
            "address": address,
            "appointments": [],
        })
    except ClinicError as e:
        logger.error(f"CLIENT_SERVICE: Error al registrar el cliente: {e}", exc_info=True)
        return OperationResult.fail(e)

    if appointment is not None:
        result = await add_appointment_for_client(
            client_document["id"],
            appointment,
            control=control,
            price=price,
            technician=technician,
            treatment=treatment,
        )
        if not result.success:
            error = result.error
            if not isinstance(error, PartialWriteInconsistency):
                logger.error(f"CLIENT_SERVICE: Cliente {client_document['id']} registrado pero su cita no: {error}")
                error = PartialWriteInconsistency(
                    f"Cliente {client_document['id']} registrado pero su primera cita no se creó: {error}",
                    persisted={"client": client_document},
                )
                error.__cause__ = result.error
            return OperationResult.fail(error)

    return await get_clients()


async def add_appointment(
    client_id: str,
    appointment: datetime,
    control: Optional[datetime] = None,
    price: Optional[float] = None,
    technician: Optional[str] = None,
    treatment: Optional[str] = None,
) -> OperationResult:
    try:
        client_document = await document_store.clients.find_one({"id": client_id})
    except ClinicError as e:
        logger.error(f"CLIENT_SERVICE: Error al buscar el cliente {client_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    if client_document is None:
        return OperationResult.fail(NotFoundError("Cliente", client_id))

    result = await add_appointment_for_client(
        client_document["id"],
        appointment,
        control=control,
        price=price,
        technician=technician,
        treatment=treatment,
    )
    if not result.success:
        return result

    return await get_appointments_and_controls()


async def modify_appointment(appointment_id: str, **changes) -> OperationResult:
    result = await revision_chain.modify_appointment(appointment_id, **changes)
    if not result.success:
        return result
    return await get_appointments_and_controls()


async def modify_control(control_id: str, **changes) -> OperationResult:
    result = await revision_chain.modify_control(control_id, **changes)
    if not result.success:
        return result
    return await get_appointments_and_controls()


async def remove_client(client_id: str) -> OperationResult:
    result = await cascade_manager.delete_client(client_id)
    if not result.success:
        return result
    return await get_clients()


async def remove_appointment(appointment_id: str) -> OperationResult:
    result = await cascade_manager.delete_appointment(appointment_id)
    if not result.success:
        return result
    return await get_appointments_and_controls()


async def remove_control(control_id: str) -> OperationResult:
    result = await cascade_manager.delete_control(control_id)
    if not result.success:
        return result
    return await get_appointments_and_controls()

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from apps.clinic.errors import ClinicError, PartialWriteInconsistency
from apps.clinic.results import OperationResult
from db import document_store

logger = logging.getLogger(__name__)


async def link_appointment_and_control(
    appointment: Dict[str, Any],
    control_payload: Optional[Dict[str, Any]] = None,
) -> OperationResult:
    """
    Crea el control de una cita y deja la cita apuntando a él.

    Sin payload (o sin fecha) no escribe nada y devuelve ``None`` como dato.
    Con payload hace exactamente un insert de control y un update de la cita.
    Si el update falla después del insert, el control queda huérfano y el
    fallo se informa como PartialWriteInconsistency.
    """
    if not control_payload or control_payload.get("date") is None:
        return OperationResult.ok(None)

    appointment_id = appointment["id"]
    logger.info(f"ENTITY_LINKER: Vinculando control (fecha {control_payload['date']}) a la cita {appointment_id}")

    try:
        control_document = await document_store.controls.insert({
            "appointment_id": appointment_id,
            "client_id": appointment["client_id"],
            "date": control_payload["date"],
            "price": control_payload.get("price"),
            "technician": control_payload.get("technician"),
            "treatment": control_payload.get("treatment"),
        })
    except ClinicError as e:
        logger.error(f"ENTITY_LINKER: No se pudo crear el control para la cita {appointment_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    control_id = control_document["id"]

    try:
        await document_store.appointments.update_one({"id": appointment_id}, {"control_id": control_id})
    except ClinicError as e:
        logger.error(
            f"ENTITY_LINKER: Control {control_id} creado pero la cita {appointment_id} no quedó vinculada: {e}",
            exc_info=True,
        )
        inconsistency = PartialWriteInconsistency(
            f"Control {control_id} creado pero la cita {appointment_id} no se actualizó: {e}",
            persisted={"control": control_document},
        )
        inconsistency.__cause__ = e
        return OperationResult.fail(inconsistency)

    return OperationResult.ok(control_id)


async def add_appointment_for_client(
    client_id: str,
    appointment: datetime,
    control: Optional[datetime] = None,
    price: Optional[float] = None,
    technician: Optional[str] = None,
    treatment: Optional[str] = None,
) -> OperationResult:
    """Crea la cita, su control opcional y la agrega a la lista de citas del cliente."""
    logger.info(f"ENTITY_LINKER: Creando cita para el cliente {client_id} el {appointment}")

    try:
        appointment_document = await document_store.appointments.insert({
            "client_id": client_id,
            "appointment": appointment,
            "price": price,
            "technician": technician,
            "treatment": treatment,
        })
    except ClinicError as e:
        logger.error(f"ENTITY_LINKER: Error al crear la cita del cliente {client_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    link_result = await link_appointment_and_control(
        appointment_document,
        {"date": control, "price": price, "technician": technician, "treatment": treatment},
    )
    if not link_result.success:
        error = link_result.error
        if not isinstance(error, PartialWriteInconsistency):
            error = PartialWriteInconsistency(
                f"Cita {appointment_document['id']} creada pero su control no: {error}",
                persisted={"appointment": appointment_document},
            )
            error.__cause__ = link_result.error
        return OperationResult.fail(error)

    appointment_document["control_id"] = link_result.data

    try:
        await document_store.clients.push({"id": client_id}, "appointments", appointment_document["id"])
    except ClinicError as e:
        logger.error(
            f"ENTITY_LINKER: Cita {appointment_document['id']} creada pero no se agregó al cliente {client_id}: {e}",
            exc_info=True,
        )
        inconsistency = PartialWriteInconsistency(
            f"Cita {appointment_document['id']} creada pero el cliente {client_id} no se actualizó: {e}",
            persisted={"appointment": appointment_document},
        )
        inconsistency.__cause__ = e
        return OperationResult.fail(inconsistency)

    return OperationResult.ok(appointment_document)

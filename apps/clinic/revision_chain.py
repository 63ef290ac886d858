import logging
from datetime import datetime
from typing import Any, Dict, Optional

from apps.clinic.entity_linker import link_appointment_and_control
from apps.clinic.errors import ClinicError, NotFoundError, PartialWriteInconsistency
from apps.clinic.results import OperationResult
from apps.config.settings import settings
from db import document_store

logger = logging.getLogger(__name__)


def _supplied(**fields) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


async def modify_appointment(
    appointment_id: str,
    appointment: Optional[datetime] = None,
    control: Optional[datetime] = None,
    price: Optional[float] = None,
    technician: Optional[str] = None,
    treatment: Optional[str] = None,
) -> OperationResult:
    """
    Edita una cita y su control vigente.

    Si la cita apunta a un control existente, ese control se actualiza en su
    lugar (mismo ID). Si no hay control vigente, o la referencia quedó
    colgando, y se envía fecha de control, se crea uno nuevo y la cita pasa a
    apuntarlo. Solo se escriben los campos enviados.
    """
    logger.info(f"REVISION_CHAIN: Modificando cita {appointment_id}")
    try:
        appointment_document = await document_store.appointments.find_one({"id": appointment_id})
        if appointment_document is None:
            return OperationResult.fail(NotFoundError("Cita", appointment_id))

        control_id = appointment_document.get("control_id")
        current_control = None
        if control_id is not None:
            current_control = await document_store.controls.find_one({"id": control_id})
    except ClinicError as e:
        logger.error(f"REVISION_CHAIN: Error al leer la cita {appointment_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    writes = []
    try:
        if current_control is not None:
            control_patch = _supplied(date=control, price=price, technician=technician, treatment=treatment)
            if control_patch:
                await document_store.controls.update_one({"id": control_id}, control_patch)
                writes.append(f"control {control_id}")
        elif control is not None:
            if control_id is not None:
                logger.warning(f"REVISION_CHAIN: La cita {appointment_id} apunta a un control inexistente ({control_id}). Se crea uno nuevo.")
            link_result = await link_appointment_and_control(
                appointment_document,
                {
                    "date": control,
                    "price": price if price is not None else appointment_document.get("price"),
                    "technician": technician if technician is not None else appointment_document.get("technician"),
                    "treatment": treatment if treatment is not None else appointment_document.get("treatment"),
                },
            )
            if not link_result.success:
                return OperationResult.fail(link_result.error)
            control_id = link_result.data
            writes.append(f"control {control_id}")

        appointment_patch = _supplied(appointment=appointment, price=price, technician=technician, treatment=treatment)
        if appointment_patch:
            await document_store.appointments.update_one({"id": appointment_id}, appointment_patch)
    except ClinicError as e:
        logger.error(f"REVISION_CHAIN: Error al modificar la cita {appointment_id}: {e}", exc_info=True)
        if writes:
            inconsistency = PartialWriteInconsistency(
                f"Cita {appointment_id}: se escribió {', '.join(writes)} pero la cita no se actualizó: {e}"
            )
            inconsistency.__cause__ = e
            return OperationResult.fail(inconsistency)
        return OperationResult.fail(e)

    appointment_document.update(appointment_patch)
    appointment_document["control_id"] = control_id
    return OperationResult.ok(appointment_document)


async def modify_control(
    control_id: str,
    date: Optional[datetime] = None,
    control: Optional[datetime] = None,
    price: Optional[float] = None,
    treatment: Optional[str] = None,
    technician: Optional[str] = None,
) -> OperationResult:
    """
    Edita un control. Con ``control`` (fecha de revisión) se crea un sucesor
    que hereda cita y cliente, y el control original queda apuntándolo en
    ``control_id``. Sin fecha de revisión el control se actualiza en su lugar.
    """
    logger.info(f"REVISION_CHAIN: Modificando control {control_id} (revisión: {control})")
    try:
        control_document = await document_store.controls.find_one({"id": control_id})
    except ClinicError as e:
        logger.error(f"REVISION_CHAIN: Error al leer el control {control_id}: {e}", exc_info=True)
        return OperationResult.fail(e)

    if control_document is None:
        return OperationResult.fail(NotFoundError("Control", control_id))

    patch = _supplied(date=date, price=price, treatment=treatment, technician=technician)
    successor = None

    if control is not None:
        try:
            successor = await document_store.controls.insert({
                "appointment_id": control_document["appointment_id"],
                "client_id": control_document["client_id"],
                "date": control,
                "price": price if price is not None else control_document.get("price"),
                "treatment": treatment if treatment is not None else control_document.get("treatment"),
                "technician": technician if technician is not None else control_document.get("technician"),
            })
        except ClinicError as e:
            logger.error(f"REVISION_CHAIN: No se pudo crear el sucesor del control {control_id}: {e}", exc_info=True)
            return OperationResult.fail(e)
        patch["control_id"] = successor["id"]
        logger.info(f"REVISION_CHAIN: Control {control_id} revisado, sucesor {successor['id']}")

    try:
        if patch:
            await document_store.controls.update_one({"id": control_id}, patch)
    except ClinicError as e:
        logger.error(f"REVISION_CHAIN: Error al actualizar el control {control_id}: {e}", exc_info=True)
        if successor is not None:
            inconsistency = PartialWriteInconsistency(
                f"Sucesor {successor['id']} creado pero el control {control_id} no quedó encadenado: {e}",
                persisted={"control": successor},
            )
            inconsistency.__cause__ = e
            return OperationResult.fail(inconsistency)
        return OperationResult.fail(e)

    if successor is not None and settings.advance_appointment_on_revision:
        try:
            await document_store.appointments.update_one(
                {"id": control_document["appointment_id"], "control_id": control_id},
                {"control_id": successor["id"]},
            )
        except ClinicError as e:
            logger.error(
                f"REVISION_CHAIN: Control {control_id} encadenado a {successor['id']} pero la cita "
                f"{control_document['appointment_id']} no se re-apuntó: {e}",
                exc_info=True,
            )
            inconsistency = PartialWriteInconsistency(
                f"Control {control_id} encadenado al sucesor {successor['id']} pero la cita "
                f"{control_document['appointment_id']} sigue apuntando al control anterior: {e}",
                persisted={"control": successor},
            )
            inconsistency.__cause__ = e
            return OperationResult.fail(inconsistency)

    control_document.update(patch)
    return OperationResult.ok({"control": control_document, "successor": successor})

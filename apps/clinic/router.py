from fastapi import APIRouter

from apps.clinic import client_service
from apps.clinic.responses import to_response
from apps.clinic.schemas import AppointmentCreate, AppointmentUpdate, ClientCreate, ControlUpdate

clients_router = APIRouter()
appointments_router = APIRouter()
controls_router = APIRouter()


@clients_router.get("")
async def get_clients():
    result = await client_service.get_clients()
    return to_response(result, "GET_CLIENTS")


@clients_router.post("")
async def add_client(payload: ClientCreate):
    result = await client_service.add_client(**payload.model_dump())
    return to_response(result, "ADD_CLIENT")


@clients_router.delete("/{client_id}")
async def remove_client(client_id: str):
    result = await client_service.remove_client(client_id)
    return to_response(result, "REMOVE_CLIENT")


@appointments_router.get("")
async def get_appointments_and_controls():
    result = await client_service.get_appointments_and_controls()
    return to_response(result, "GET_APPOINTMENTS_AND_CONTROLS")


@appointments_router.post("")
async def add_appointment_with_client(payload: ClientCreate):
    # Sin cliente en la ruta se registra el cliente junto con la cita
    result = await client_service.add_client(**payload.model_dump())
    return to_response(result, "ADD_CLIENT")


@appointments_router.post("/{client_id}")
async def add_appointment(client_id: str, payload: AppointmentCreate):
    result = await client_service.add_appointment(client_id, **payload.model_dump())
    return to_response(result, "ADD_APPOINTMENT")


@appointments_router.put("/{appointment_id}")
async def modify_appointment(appointment_id: str, payload: AppointmentUpdate):
    result = await client_service.modify_appointment(appointment_id, **payload.model_dump())
    return to_response(result, "MODIFY_APPOINTMENT")


@appointments_router.delete("/{appointment_id}")
async def remove_appointment(appointment_id: str):
    result = await client_service.remove_appointment(appointment_id)
    return to_response(result, "REMOVE_APPOINTMENT")


@controls_router.put("/{control_id}")
async def modify_control(control_id: str, payload: ControlUpdate):
    result = await client_service.modify_control(control_id, **payload.model_dump())
    return to_response(result, "MODIFY_CONTROL")


@controls_router.delete("/{control_id}")
async def remove_control(control_id: str):
    result = await client_service.remove_control(control_id)
    return to_response(result, "REMOVE_CONTROL")

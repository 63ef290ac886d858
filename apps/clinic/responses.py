from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from apps.clinic.errors import NotFoundError
from apps.clinic.results import OperationResult

SUCCESS_MESSAGES = {
    "GET_CLIENTS": "Clientes obtenidos correctamente.",
    "ADD_CLIENT": "Cliente registrado correctamente.",
    "REMOVE_CLIENT": "Cliente eliminado correctamente.",
    "GET_APPOINTMENTS_AND_CONTROLS": "Citas y controles obtenidos correctamente.",
    "ADD_APPOINTMENT": "Cita agregada correctamente.",
    "MODIFY_APPOINTMENT": "Cita modificada correctamente.",
    "REMOVE_APPOINTMENT": "Cita eliminada correctamente.",
    "MODIFY_CONTROL": "Control modificado correctamente.",
    "REMOVE_CONTROL": "Control eliminado correctamente.",
}

ERROR_MESSAGES = {
    "GET_CLIENTS": "Error al obtener los clientes.",
    "ADD_CLIENT": "Error al registrar el cliente.",
    "REMOVE_CLIENT": "Error al eliminar el cliente.",
    "GET_APPOINTMENTS_AND_CONTROLS": "Error al obtener las citas y controles.",
    "ADD_APPOINTMENT": "Error al agregar la cita.",
    "MODIFY_APPOINTMENT": "Error al modificar la cita.",
    "REMOVE_APPOINTMENT": "Error al eliminar la cita.",
    "MODIFY_CONTROL": "Error al modificar el control.",
    "REMOVE_CONTROL": "Error al eliminar el control.",
}


def build_success_response(data, message: str) -> dict:
    return {"success": True, "message": message, "data": data}


def build_error_response(error: Exception, message: str) -> dict:
    return {"success": False, "message": message, "error": str(error)}


def to_response(result: OperationResult, operation: str) -> JSONResponse:
    """Traduce un resultado del núcleo a 200, 404 o 500 con el sobre estándar."""
    if result.success:
        return JSONResponse(
            status_code=200,
            content=jsonable_encoder(build_success_response(result.data, SUCCESS_MESSAGES[operation])),
        )

    status_code = 404 if isinstance(result.error, NotFoundError) else 500
    return JSONResponse(
        status_code=status_code,
        content=build_error_response(result.error, ERROR_MESSAGES[operation]),
    )

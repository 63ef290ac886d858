class ClinicError(Exception):
    """Error base de las operaciones sobre clientes, citas y controles."""


class NotFoundError(ClinicError):
    """El identificador referenciado no existe."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} no encontrado.")


class StoreFailure(ClinicError):
    """Fallo de E/S o del driver al hablar con la base de datos."""


class PartialWriteInconsistency(ClinicError):
    """
    Una escritura de una secuencia se completó y una posterior falló.
    La primera escritura persiste: no se hace rollback ni reintento.
    """

    def __init__(self, message: str, persisted: dict = None):
        self.persisted = persisted or {}
        super().__init__(message)

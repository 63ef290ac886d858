"""
Acceso tipo "documento" a las colecciones de la clínica.

Cada operación abre su propia sesión y su propia transacción: no hay
transacciones entre colecciones, así que una secuencia de escrituras no es
atómica. Los registros salen como diccionarios planos con su campo ``id``.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified

from apps.clinic.errors import StoreFailure
from db.database import get_db_session
from db.models import Appointment, Client, Control

logger = logging.getLogger(__name__)


class Collection:
    def __init__(self, model):
        self.model = model
        self.name = model.__tablename__

    def _to_document(self, row) -> Dict[str, Any]:
        document = {column.name: getattr(row, column.name) for column in self.model.__table__.columns}
        if isinstance(document.get("appointments"), list):
            document["appointments"] = list(document["appointments"])
        return document

    def _order_by(self, sort: Optional[Sequence[str]]):
        clauses = []
        for field in sort or ():
            if field.startswith("-"):
                clauses.append(getattr(self.model, field[1:]).desc())
            else:
                clauses.append(getattr(self.model, field).asc())
        return clauses

    async def find(self, filters: Optional[Dict[str, Any]] = None, sort: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        try:
            async with get_db_session() as session:
                stmt = select(self.model).filter_by(**(filters or {})).order_by(*self._order_by(sort))
                result = await session.execute(stmt)
                return [self._to_document(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error en find sobre '{self.name}' con filtro {filters}: {e}")
            raise StoreFailure(f"find en {self.name} falló: {e}") from e

    async def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            async with get_db_session() as session:
                result = await session.execute(select(self.model).filter_by(**filters).limit(1))
                row = result.scalar_one_or_none()
                return self._to_document(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error en find_one sobre '{self.name}' con filtro {filters}: {e}")
            raise StoreFailure(f"find_one en {self.name} falló: {e}") from e

    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with get_db_session() as session:
                async with session.begin():
                    row = self.model(**fields)
                    session.add(row)
                    await session.flush()
                    document = self._to_document(row)
            logger.info(f"STORE: Insertado en '{self.name}' (ID: {document['id']})")
            return document
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error al insertar en '{self.name}': {e}")
            raise StoreFailure(f"insert en {self.name} falló: {e}") from e

    async def update_one(self, filters: Dict[str, Any], patch: Dict[str, Any]) -> int:
        """Aplica ``patch`` al primer registro que cumpla el filtro. Devuelve cuántos se modificaron."""
        try:
            async with get_db_session() as session:
                async with session.begin():
                    target = await session.execute(select(self.model.id).filter_by(**filters).limit(1))
                    target_id = target.scalar_one_or_none()
                    if target_id is None:
                        return 0
                    await session.execute(update(self.model).where(self.model.id == target_id).values(**patch))
            return 1
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error en update_one sobre '{self.name}' con filtro {filters}: {e}")
            raise StoreFailure(f"update_one en {self.name} falló: {e}") from e

    async def delete_one(self, filters: Dict[str, Any]) -> int:
        try:
            async with get_db_session() as session:
                async with session.begin():
                    target = await session.execute(select(self.model.id).filter_by(**filters).limit(1))
                    target_id = target.scalar_one_or_none()
                    if target_id is None:
                        return 0
                    await session.execute(delete(self.model).where(self.model.id == target_id))
            return 1
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error en delete_one sobre '{self.name}' con filtro {filters}: {e}")
            raise StoreFailure(f"delete_one en {self.name} falló: {e}") from e

    async def delete_many(self, filters: Dict[str, Any]) -> int:
        try:
            async with get_db_session() as session:
                async with session.begin():
                    stmt = delete(self.model).where(
                        *[getattr(self.model, key) == value for key, value in filters.items()]
                    )
                    result = await session.execute(stmt)
                    return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error en delete_many sobre '{self.name}' con filtro {filters}: {e}")
            raise StoreFailure(f"delete_many en {self.name} falló: {e}") from e

    async def push(self, filters: Dict[str, Any], field: str, value: Any) -> int:
        """Agrega ``value`` al final de la lista ``field`` del primer registro que cumpla el filtro."""
        return await self._edit_list(filters, field, lambda items: items.append(value))

    async def pull(self, filters: Dict[str, Any], field: str, value: Any) -> int:
        """Quita todas las apariciones de ``value`` de la lista ``field``."""
        def remove(items):
            items[:] = [item for item in items if item != value]
        return await self._edit_list(filters, field, remove)

    async def _edit_list(self, filters, field, edit) -> int:
        try:
            async with get_db_session() as session:
                async with session.begin():
                    result = await session.execute(select(self.model).filter_by(**filters).limit(1))
                    row = result.scalar_one_or_none()
                    if row is None:
                        return 0
                    items = list(getattr(row, field) or [])
                    edit(items)
                    setattr(row, field, items)
                    flag_modified(row, field)
            return 1
        except SQLAlchemyError as e:
            logger.error(f"STORE: Error al editar la lista '{field}' en '{self.name}': {e}")
            raise StoreFailure(f"edición de {self.name}.{field} falló: {e}") from e


clients = Collection(Client)
appointments = Collection(Appointment)
controls = Collection(Control)

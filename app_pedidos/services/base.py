# ==============================================================================
# SERVICIO BASE - Operaciones comunes de entidades con baja lógica
# ==============================================================================
# Productos, combos, clientes y empleados comparten: consulta por ID,
# listado activo/inactivo, unicidad entre registros activos, baja lógica
# idempotente y reactivación.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from app_pedidos.errors import ConflictError, NotFoundError
from app_pedidos.models import AuditType, SoftDeleteResult, now_iso
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.interfaces import IEntityRepository
from app_pedidos.validation import require_bool, require_valid_id

logger = logging.getLogger(__name__)


class EntityService:
    """
    Base de los servicios de catálogo y de personas.

    Las subclases definen:
        entity_label: Nombre legible ('Producto', 'Cliente', ...)
        audit_type: Tipo de auditoría de la entidad
        unique_fields: Claves que deben ser únicas entre registros activos
    """

    entity_label = 'Registro'
    audit_type = AuditType.SISTEMA
    unique_fields: tuple = ()

    def __init__(self, repo: IEntityRepository, store: JsonStore, audit_service=None):
        """
        Args:
            repo: Repositorio de la entidad
            store: Almacén compartido (para transacciones)
            audit_service: Servicio de auditoría (opcional)
        """
        self.repo = repo
        self.store = store
        self.audit_service = audit_service

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list(self, active: Optional[bool] = True) -> List[Any]:
        """
        Lista registros.

        Args:
            active: True solo activos (por defecto), False solo inactivos, None todos
        """
        return self.repo.list(active)

    def get(self, record_id: Any):
        """
        Obtiene un registro (activo o inactivo) por ID.

        Raises:
            FormatError: ID mal formado
            NotFoundError: No existe
        """
        record_id = require_valid_id(record_id)
        entity = self.repo.get(record_id)
        if entity is None:
            raise NotFoundError(self.entity_label, record_id)
        return entity

    # =========================================================================
    # UNICIDAD
    # =========================================================================

    def _ensure_unique(self, values: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        """
        Verifica que ningún otro registro ACTIVO use los mismos valores únicos.
        Debe llamarse dentro de la misma transacción que la escritura.

        Raises:
            ConflictError: Nombra todos los campos en conflicto
        """
        values = {k: v for k, v in values.items() if k in self.unique_fields}
        conflicts = self.repo.find_active_conflicts(values, exclude_id=exclude_id)
        if conflicts:
            fields = ', '.join(f"'{f}'" for f in conflicts)
            raise ConflictError(
                f"Ya existe un {self.entity_label.lower()} activo con el mismo valor en {fields}.",
                fields=conflicts
            )

    def _insert_unique(self, entity) -> None:
        with self.store.transaction():
            self._ensure_unique(entity.to_dict())
            self.repo.add(entity)

    def _save_unique(self, entity, check_unique: bool) -> None:
        with self.store.transaction():
            if check_unique and entity.active:
                self._ensure_unique(entity.to_dict(), exclude_id=entity.id)
            self.repo.save(entity)

    # =========================================================================
    # BAJA LÓGICA
    # =========================================================================

    def soft_delete(self, record_id: Any, user: str = None) -> SoftDeleteResult:
        """
        Desactiva un registro. Idempotente.

        Returns:
            NOT_FOUND si no existe, NO_CHANGE si ya estaba inactivo,
            DEACTIVATED si pasó de activo a inactivo
        """
        record_id = require_valid_id(record_id)
        with self.store.transaction():
            entity = self.repo.get(record_id)
            if entity is None:
                return SoftDeleteResult.NOT_FOUND
            if not entity.active:
                return SoftDeleteResult.NO_CHANGE
            self.repo.update_fields(record_id, {'active': False, 'updatedAt': now_iso()})
            if self.audit_service:
                self.audit_service.log_deactivated(self.audit_type, user, record_id, self._label(entity))

        logger.info("%s %s desactivado", self.entity_label, record_id)
        return SoftDeleteResult.DEACTIVATED

    def set_active(self, record_id: Any, active: Any, user: str = None):
        """
        Activa o desactiva un registro explícitamente.
        La reactivación vuelve a verificar unicidad.

        Returns:
            Entidad actualizada
        """
        active = require_bool(active, 'active')
        with self.store.transaction():
            entity = self.get(record_id)
            if entity.active == active:
                return entity

            entity.active = active
            entity.updated_at = now_iso()
            self._save_unique(entity, check_unique=active)
            if self.audit_service:
                log = self.audit_service.log_reactivated if active else self.audit_service.log_deactivated
                log(self.audit_type, user, entity.id, self._label(entity))

        return entity

    def _label(self, entity) -> str:
        return entity.name

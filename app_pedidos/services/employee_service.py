# ==============================================================================
# SERVICIO DE EMPLEADOS
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from app_pedidos.models import AuditType, Employee, EmployeeRole, now_iso
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.customer_repository import EmployeeRepository
from app_pedidos.services.base import EntityService
from app_pedidos.validation import (
    new_id,
    optional_text,
    require_bool,
    require_non_empty,
    require_valid_email,
    require_valid_phone,
    require_valid_rut,
)

logger = logging.getLogger(__name__)


def _optional(validate, field: str):
    """Campo opcional: vacío o None se guarda como None; si viene, se valida."""
    def check(value: Any) -> Optional[str]:
        if optional_text(value, field) is None:
            return None
        return validate(value, field)
    return check


_FIELDS = {
    'name': ('name', lambda v: require_non_empty(v, 'name')),
    'surname': ('surname', lambda v: require_non_empty(v, 'surname')),
    'nationalId': ('national_id', lambda v: require_valid_rut(v, 'nationalId')),
    'role': ('role', EmployeeRole.parse),
    'phone': ('phone', _optional(require_valid_phone, 'phone')),
    'email': ('email', _optional(require_valid_email, 'email')),
    'address': ('address', lambda v: optional_text(v, 'address')),
    'active': ('active', lambda v: require_bool(v, 'active')),
}


class EmployeeService(EntityService):
    """
    Servicio para gestión de empleados.

    RUT único entre empleados activos; el correo también, cuando está presente.
    """

    entity_label = 'Empleado'
    audit_type = AuditType.EMPLEADO
    unique_fields = ('nationalId', 'email')

    def __init__(self, employee_repo: EmployeeRepository, store: JsonStore, audit_service=None):
        super().__init__(employee_repo, store, audit_service)
        self.employee_repo = employee_repo

    def create(self, data: Dict[str, Any], user: str = None) -> Employee:
        """
        Crea un empleado.

        Args:
            data: {name, surname, nationalId, role, phone?, email?, address?, active?}
            user: Usuario que crea (para auditoría)
        """
        values = {
            attr: validate(data.get(key, True) if key == 'active' else data.get(key))
            for key, (attr, validate) in _FIELDS.items()
        }
        employee = Employee(id=new_id(), **values)
        self._insert_unique(employee)

        logger.info("Empleado creado: %s (%s)", employee.id, employee.role.value)
        if self.audit_service:
            self.audit_service.log_created(self.audit_type, user, employee.id, self._label(employee))
        return employee

    def update(self, employee_id: Any, data: Dict[str, Any], user: str = None) -> Employee:
        changes = {
            attr: validate(data[key])
            for key, (attr, validate) in _FIELDS.items()
            if key in data
        }

        with self.store.transaction():
            employee = self.get(employee_id)
            check_unique = (
                (changes.get('active') is True and not employee.active)
                or changes.get('national_id', employee.national_id) != employee.national_id
                or changes.get('email', employee.email) != employee.email
            )
            for attr, value in changes.items():
                setattr(employee, attr, value)
            employee.updated_at = now_iso()
            self._save_unique(employee, check_unique=check_unique)

        if self.audit_service:
            audit_changes = {k: (v.value if isinstance(v, EmployeeRole) else v) for k, v in changes.items()}
            self.audit_service.log_updated(self.audit_type, user, employee.id, self._label(employee), audit_changes)
        return employee

    def _label(self, entity) -> str:
        return f"{entity.name} {entity.surname} ({entity.role.value})"

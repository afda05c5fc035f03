# ==============================================================================
# SERVICIO DE CLIENTES
# ==============================================================================
# RUT y correo son únicos entre clientes ACTIVOS: un cliente dado de baja
# puede coexistir con uno nuevo que use el mismo RUT.
# ==============================================================================

import logging
from typing import Any, Dict

from app_pedidos.models import AuditType, Customer, now_iso
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.customer_repository import CustomerRepository
from app_pedidos.services.base import EntityService
from app_pedidos.validation import (
    new_id,
    require_bool,
    require_non_empty,
    require_valid_email,
    require_valid_phone,
    require_valid_rut,
)

logger = logging.getLogger(__name__)

# Campo del JSON → (atributo, validador)
_FIELDS = {
    'name': ('name', lambda v: require_non_empty(v, 'name')),
    'surname': ('surname', lambda v: require_non_empty(v, 'surname')),
    'nationalId': ('national_id', lambda v: require_valid_rut(v, 'nationalId')),
    'email': ('email', lambda v: require_valid_email(v, 'email')),
    'phone': ('phone', lambda v: require_valid_phone(v, 'phone')),
    'address': ('address', lambda v: require_non_empty(v, 'address')),
    'active': ('active', lambda v: require_bool(v, 'active')),
}


class CustomerService(EntityService):
    """Servicio para gestión de clientes."""

    entity_label = 'Cliente'
    audit_type = AuditType.CLIENTE
    unique_fields = ('nationalId', 'email')

    def __init__(self, customer_repo: CustomerRepository, store: JsonStore, audit_service=None):
        super().__init__(customer_repo, store, audit_service)
        self.customer_repo = customer_repo

    def create(self, data: Dict[str, Any], user: str = None) -> Customer:
        """
        Crea un cliente.

        Args:
            data: {name, surname, nationalId, email, phone, address, active?}
            user: Usuario que crea (para auditoría)

        Raises:
            FormatError: Campo faltante o inválido
            ConflictError: RUT y/o correo ya usados por otro cliente activo
        """
        values = {
            attr: validate(data.get(key, True) if key == 'active' else data.get(key))
            for key, (attr, validate) in _FIELDS.items()
        }
        customer = Customer(id=new_id(), **values)
        self._insert_unique(customer)

        logger.info("Cliente creado: %s", customer.id)
        if self.audit_service:
            self.audit_service.log_created(self.audit_type, user, customer.id, self._label(customer))
        return customer

    def update(self, customer_id: Any, data: Dict[str, Any], user: str = None) -> Customer:
        """
        Actualización parcial. La unicidad se vuelve a verificar si cambia
        el RUT o el correo, o si el cliente se reactiva.
        """
        changes = {
            attr: validate(data[key])
            for key, (attr, validate) in _FIELDS.items()
            if key in data
        }

        with self.store.transaction():
            customer = self.get(customer_id)
            check_unique = (
                (changes.get('active') is True and not customer.active)
                or changes.get('national_id', customer.national_id) != customer.national_id
                or changes.get('email', customer.email) != customer.email
            )
            for attr, value in changes.items():
                setattr(customer, attr, value)
            customer.updated_at = now_iso()
            self._save_unique(customer, check_unique=check_unique)

        if self.audit_service:
            self.audit_service.log_updated(self.audit_type, user, customer.id, self._label(customer), changes)
        return customer

    def _label(self, entity) -> str:
        return f"{entity.name} {entity.surname} ({entity.national_id})"

# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (actualmente JSON).
#
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (contratos)
# ├── base.py                → JsonStore + DictRepository / ListRepository
# ├── product_repository.py  → productos.json
# ├── combo_repository.py    → combos.json
# ├── customer_repository.py → clientes.json / empleados.json
# ├── order_repository.py    → pedidos.json
# └── audit_repository.py    → audit.json
# ==============================================================================

from app_pedidos.repositories.interfaces import (
    IProductLookup,
    IEntityRepository,
    IStockRepository,
    IAuditRepository,
)

from app_pedidos.repositories.base import JsonStore, BaseRepository, DictRepository, ListRepository
from app_pedidos.repositories.product_repository import ProductRepository
from app_pedidos.repositories.combo_repository import ComboRepository
from app_pedidos.repositories.customer_repository import CustomerRepository, EmployeeRepository
from app_pedidos.repositories.order_repository import OrderRepository
from app_pedidos.repositories.audit_repository import AuditRepository

__all__ = [
    # Interfaces
    'IProductLookup',
    'IEntityRepository',
    'IStockRepository',
    'IAuditRepository',

    # Almacén y clases base
    'JsonStore',
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'ProductRepository',
    'ComboRepository',
    'CustomerRepository',
    'EmployeeRepository',
    'OrderRepository',
    'AuditRepository',
]

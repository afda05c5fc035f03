# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones, y lanzan errores del dominio
# 3. Los blueprints solo llaman a servicios (no capturan errores)
# 4. Combos y pedidos leen productos SOLO vía IProductLookup
#
# ESTRUCTURA:
# ├── base.py              → Consulta, unicidad y baja lógica comunes
# ├── product_service.py   → Catálogo de productos (IProductLookup)
# ├── combo_service.py     → Combos y su precio calculado
# ├── customer_service.py  → Clientes
# ├── employee_service.py  → Empleados
# ├── order_service.py     → Flujo de pedidos (núcleo)
# ├── pricing.py           → Precio de combos y tabla de descuentos
# └── audit_service.py     → Logs de actividad
# ==============================================================================

from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.pricing import DiscountPolicy, combo_price, COMBO_PRICE_RATE
from app_pedidos.services.base import EntityService
from app_pedidos.services.product_service import ProductService
from app_pedidos.services.combo_service import ComboService
from app_pedidos.services.customer_service import CustomerService
from app_pedidos.services.employee_service import EmployeeService
from app_pedidos.services.order_service import OrderService

__all__ = [
    'AuditService',
    'DiscountPolicy',
    'combo_price',
    'COMBO_PRICE_RATE',
    'EntityService',
    'ProductService',
    'ComboService',
    'CustomerService',
    'EmployeeService',
    'OrderService',
]

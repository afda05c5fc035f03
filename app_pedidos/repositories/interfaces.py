# ==============================================================================
# INTERFACES - Contratos entre servicios y persistencia
# ==============================================================================
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de interfaces, NO de implementaciones concretas
#    - Cambiar JSON → base de datos solo requiere nueva implementación
#
# 2. TESTING
#    - Fácil crear dobles que implementen estas interfaces
#
# IProductLookup es la ÚNICA dependencia de lectura que el flujo de pedidos
# y el catálogo de combos tienen sobre el catálogo de productos.
# ==============================================================================

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from app_pedidos.models import Product


@runtime_checkable
class IProductLookup(Protocol):
    """Consulta de solo lectura sobre el catálogo de productos."""

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """Producto por ID, o None si el ID es inválido o no existe."""
        ...

    def find_by_ids(self, product_ids: Iterable[str]) -> List[Product]:
        """Productos existentes entre los IDs dados."""
        ...


@runtime_checkable
class IEntityRepository(Protocol):
    """
    Interfaz para repositorios de entidades con eliminación lógica.
    Usado por: Productos, Combos, Clientes, Empleados, Pedidos.
    """

    def get(self, record_id: str) -> Optional[Any]:
        ...

    def list(self, active: Optional[bool] = True) -> List[Any]:
        ...

    def add(self, entity: Any) -> Any:
        ...

    def save(self, entity: Any) -> Any:
        ...

    def update_fields(self, record_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def find_active_conflicts(
        self,
        values: Dict[str, Any],
        exclude_id: Optional[str] = None
    ) -> List[str]:
        ...


@runtime_checkable
class IStockRepository(IEntityRepository, Protocol):
    """Repositorio de productos con descuento condicional de stock."""

    def decrement_stock(self, quantities: Dict[str, int]) -> Dict[str, int]:
        ...


@runtime_checkable
class IAuditRepository(Protocol):
    """Interfaz para el repositorio de auditoría."""

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        ...

    def search(self, log_type: Optional[str] = None, limit: int = 100) -> List[Any]:
        ...

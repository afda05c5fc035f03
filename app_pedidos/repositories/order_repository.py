# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Encapsula todo el acceso a pedidos.json
# ==============================================================================

from typing import List

from app_pedidos.models import Order
from app_pedidos.repositories.base import DictRepository


class OrderRepository(DictRepository[Order]):
    """
    Pedidos: {order_id: {customerId, lines, total, status, ...}}
    Las líneas se guardan como copia del producto al momento de la compra.
    """

    file_name = 'pedidos.json'
    entity_cls = Order

    def list_by_customer(self, customer_id: str) -> List[Order]:
        """Pedidos (activos e inactivos) de un cliente, del más antiguo al más reciente."""
        return [o for o in self.list(active=None) if o.customer_id == customer_id]

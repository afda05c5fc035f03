# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula todo el acceso a productos.json
# Los productos se almacenan como diccionario: {product_id: {datos_producto}}
# ==============================================================================

from typing import Dict, Iterable, List

from app_pedidos.errors import StockConflictError
from app_pedidos.models import Product, now_iso
from app_pedidos.repositories.base import DictRepository


class ProductRepository(DictRepository[Product]):
    """
    Repositorio del catálogo de productos.

    Formato de datos en productos.json:
    {
        "65a1f0c2e4b0a1b2c3d4e5f6": {
            "id": "65a1f0c2e4b0a1b2c3d4e5f6",
            "name": "Whopper",
            "price": 5990.0,
            "stock": 40,
            "category": "Hamburguesas",
            "active": true,
            ...
        }
    }
    """

    file_name = 'productos.json'
    entity_cls = Product

    def find_by_ids(self, ids: Iterable[str]) -> List[Product]:
        """
        Obtiene los productos existentes entre los IDs pedidos.
        Respeta el orden recibido y omite IDs repetidos o inexistentes.
        """
        data = self.get_all()
        result = []
        seen = set()
        for pid in ids:
            if pid in seen or pid not in data:
                continue
            seen.add(pid)
            result.append(Product.from_dict(data[pid]))
        return result

    def decrement_stock(self, quantities: Dict[str, int]) -> Dict[str, int]:
        """
        Descuenta stock de varios productos como una sola operación
        condicional: o se descuentan todos, o ninguno.

        Args:
            quantities: {product_id: cantidad a descontar}

        Returns:
            {product_id: stock resultante}

        Raises:
            StockConflictError: Si algún producto ya no existe, está inactivo
                o su stock actual es menor que la cantidad
        """
        with self.store.transaction():
            data = self.get_all()
            for pid, qty in quantities.items():
                record = data.get(pid)
                available = int(record.get('stock', 0)) if record else 0
                if record is None or not record.get('active', True) or available < qty:
                    raise StockConflictError(pid, available, qty)

            ts = now_iso()
            remaining = {}
            for pid, qty in quantities.items():
                record = data[pid]
                record['stock'] = int(record.get('stock', 0)) - qty
                record['updatedAt'] = ts
                remaining[pid] = record['stock']

            self._write_raw(data)
            return remaining

# ==============================================================================
# SERVICIO DE PRODUCTOS
# ==============================================================================
# Catálogo de productos: altas, modificaciones, bajas lógicas y consulta.
# Implementa IProductLookup, la única vía por la que combos y pedidos leen
# el catálogo.
# ==============================================================================

import logging
from typing import Any, Dict, Iterable, List, Optional

from app_pedidos.models import AuditType, Product, now_iso
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.product_repository import ProductRepository
from app_pedidos.services.base import EntityService
from app_pedidos.validation import (
    is_valid_id,
    new_id,
    optional_text,
    require_bool,
    require_non_empty,
    require_non_negative_int,
    require_price,
)

logger = logging.getLogger(__name__)


class ProductService(EntityService):
    """
    Servicio para gestión del catálogo de productos.

    Responsabilidades:
    - CRUD de productos con validación de campos
    - Nombre único entre productos activos
    - Búsqueda por ID / conjunto de IDs (IProductLookup)
    """

    entity_label = 'Producto'
    audit_type = AuditType.PRODUCTO
    unique_fields = ('name',)

    def __init__(
        self,
        product_repo: ProductRepository,
        store: JsonStore,
        audit_service=None
    ):
        super().__init__(product_repo, store, audit_service)
        self.product_repo = product_repo

    # =========================================================================
    # IProductLookup
    # =========================================================================

    def find_by_id(self, product_id: Any) -> Optional[Product]:
        """Producto por ID, o None si el ID es inválido o no existe."""
        if not is_valid_id(product_id):
            return None
        return self.product_repo.get(product_id)

    def find_by_ids(self, product_ids: Iterable[Any]) -> List[Product]:
        """
        Productos existentes entre los IDs dados.
        Se omiten IDs mal formados o inexistentes; respeta el orden de entrada.
        """
        return self.product_repo.find_by_ids([pid for pid in product_ids if is_valid_id(pid)])

    # =========================================================================
    # ALTAS Y MODIFICACIONES
    # =========================================================================

    def create(self, data: Dict[str, Any], user: str = None) -> Product:
        """
        Crea un producto.

        Args:
            data: {name, price, stock, category, description?, active?}
            user: Usuario que crea (para auditoría)

        Returns:
            Producto creado

        Raises:
            FormatError: Campo faltante o inválido
            ConflictError: Ya existe un producto activo con ese nombre
        """
        product = Product(
            id=new_id(),
            name=require_non_empty(data.get('name'), 'name'),
            price=require_price(data.get('price'), 'price'),
            stock=require_non_negative_int(data.get('stock'), 'stock'),
            category=require_non_empty(data.get('category'), 'category'),
            description=optional_text(data.get('description'), 'description'),
            active=require_bool(data.get('active', True), 'active'),
        )
        self._insert_unique(product)

        logger.info("Producto creado: %s (%s)", product.name, product.id)
        if self.audit_service:
            self.audit_service.log_created(self.audit_type, user, product.id, product.name)
        return product

    def update(self, product_id: Any, data: Dict[str, Any], user: str = None) -> Product:
        """
        Actualización parcial: solo se validan y aplican los campos presentes.

        Returns:
            Producto actualizado

        Raises:
            FormatError: ID o campo inválido
            NotFoundError: El producto no existe
            ConflictError: El nuevo nombre ya lo usa otro producto activo
        """
        changes: Dict[str, Any] = {}
        if 'name' in data:
            changes['name'] = require_non_empty(data['name'], 'name')
        if 'price' in data:
            changes['price'] = require_price(data['price'], 'price')
        if 'stock' in data:
            changes['stock'] = require_non_negative_int(data['stock'], 'stock')
        if 'category' in data:
            changes['category'] = require_non_empty(data['category'], 'category')
        if 'description' in data:
            changes['description'] = optional_text(data['description'], 'description')
        if 'active' in data:
            changes['active'] = require_bool(data['active'], 'active')

        with self.store.transaction():
            product = self.get(product_id)
            reactivated = changes.get('active') is True and not product.active
            renamed = 'name' in changes and changes['name'] != product.name
            for key, value in changes.items():
                setattr(product, key, value)
            product.updated_at = now_iso()
            self._save_unique(product, check_unique=renamed or reactivated)

        if self.audit_service:
            self.audit_service.log_updated(self.audit_type, user, product.id, product.name, changes)
        return product

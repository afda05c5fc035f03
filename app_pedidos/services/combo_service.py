# ==============================================================================
# SERVICIO DE COMBOS
# ==============================================================================
# Catálogo de combos. El precio de un combo SIEMPRE se calcula a partir de
# sus productos (90% de la suma); cualquier precio enviado por el cliente
# se ignora.
# ==============================================================================

import logging
from typing import Any, Dict, List, Tuple

from app_pedidos.errors import BusinessRuleError, InactiveProductError, NotFoundError
from app_pedidos.models import AuditType, Combo, now_iso
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.combo_repository import ComboRepository
from app_pedidos.repositories.interfaces import IProductLookup
from app_pedidos.services.base import EntityService
from app_pedidos.services.pricing import combo_price
from app_pedidos.validation import (
    new_id,
    optional_text,
    require_bool,
    require_non_empty,
    require_non_empty_list,
    require_valid_id,
)

logger = logging.getLogger(__name__)


class ComboService(EntityService):
    """
    Servicio para gestión de combos.

    Depende de IProductLookup para validar los productos que forman
    cada combo y obtener sus precios.
    """

    entity_label = 'Combo'
    audit_type = AuditType.COMBO
    unique_fields = ('name',)

    def __init__(
        self,
        combo_repo: ComboRepository,
        product_lookup: IProductLookup,
        store: JsonStore,
        audit_service=None
    ):
        """
        Args:
            combo_repo: Repositorio de combos
            product_lookup: Consulta de productos (normalmente ProductService)
            store: Almacén compartido
            audit_service: Servicio de auditoría (opcional)
        """
        super().__init__(combo_repo, store, audit_service)
        self.combo_repo = combo_repo
        self.product_lookup = product_lookup

    # =========================================================================
    # PRECIO
    # =========================================================================

    def price_products(self, product_ids: Any) -> Tuple[List[str], float]:
        """
        Resuelve los productos de un combo y calcula su precio.

        Args:
            product_ids: Lista de IDs recibida

        Returns:
            Tupla (IDs sin duplicados en el orden recibido, precio calculado)

        Raises:
            FormatError: Lista vacía o algún ID mal formado
            NotFoundError: Algún producto no existe (se nombran todos los faltantes)
            InactiveProductError: Algún producto está inactivo
            BusinessRuleError: El precio resultante no es positivo
        """
        ids = require_non_empty_list(product_ids, 'productIds')
        unique_ids: List[str] = []
        for pid in ids:
            pid = require_valid_id(pid, 'productIds')
            if pid not in unique_ids:
                unique_ids.append(pid)

        products = self.product_lookup.find_by_ids(unique_ids)
        found = {p.id for p in products}
        missing = [pid for pid in unique_ids if pid not in found]
        if missing:
            raise NotFoundError('Producto', ', '.join(missing), field='productIds')

        inactive = [p for p in products if not p.active]
        if inactive:
            raise InactiveProductError([p.id for p in inactive], [p.name for p in inactive])

        price = combo_price(p.price for p in products)
        if not price > 0:
            raise BusinessRuleError(
                f"El precio calculado del combo ({price}) es inválido.",
                field='price'
            )
        return unique_ids, price

    # =========================================================================
    # ALTAS Y MODIFICACIONES
    # =========================================================================

    def create(self, data: Dict[str, Any], user: str = None) -> Combo:
        """
        Crea un combo.

        Args:
            data: {name, productIds, description?, active?}
            user: Usuario que crea (para auditoría)

        Returns:
            Combo creado con su precio calculado
        """
        name = require_non_empty(data.get('name'), 'name')
        product_ids, price = self.price_products(data.get('productIds'))
        combo = Combo(
            id=new_id(),
            name=name,
            product_ids=product_ids,
            price=price,
            description=optional_text(data.get('description'), 'description'),
            active=require_bool(data.get('active', True), 'active'),
        )
        self._insert_unique(combo)

        logger.info("Combo creado: %s (%s) - precio %.2f", combo.name, combo.id, combo.price)
        if self.audit_service:
            self.audit_service.log_created(self.audit_type, user, combo.id, combo.name)
        return combo

    def update(self, combo_id: Any, data: Dict[str, Any], user: str = None) -> Combo:
        """
        Actualización parcial. Si cambia 'productIds' se recalcula el precio.
        """
        changes: Dict[str, Any] = {}
        if 'name' in data:
            changes['name'] = require_non_empty(data['name'], 'name')
        if 'description' in data:
            changes['description'] = optional_text(data['description'], 'description')
        if 'active' in data:
            changes['active'] = require_bool(data['active'], 'active')

        with self.store.transaction():
            combo = self.get(combo_id)
            if 'productIds' in data:
                product_ids, price = self.price_products(data['productIds'])
                if product_ids != combo.product_ids:
                    changes['product_ids'] = product_ids
                    changes['price'] = price

            reactivated = changes.get('active') is True and not combo.active
            renamed = 'name' in changes and changes['name'] != combo.name
            for key, value in changes.items():
                setattr(combo, key, value)
            combo.updated_at = now_iso()
            self._save_unique(combo, check_unique=renamed or reactivated)

        if self.audit_service:
            self.audit_service.log_updated(self.audit_type, user, combo.id, combo.name, _audit_changes(changes))
        return combo


def _audit_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    if 'product_ids' in changes:
        changes = dict(changes)
        changes['productIds'] = changes.pop('product_ids')
    return changes

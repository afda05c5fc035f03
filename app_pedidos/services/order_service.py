# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# Núcleo del sistema: valida un pedido multi-línea contra el catálogo,
# verifica stock, calcula subtotal/descuento/total y persiste el pedido
# junto con el descuento de stock como UNA unidad atómica.
#
# FLUJO DE CREACIÓN (falla en la primera violación):
#   1. Cliente (formato de ID, existe, activo)
#   2. Dirección de entrega
#   3. Método de pago
#   4. Banco (solo tarjeta)
#   5. Lista de líneas no vacía
#   6. Formato de cada línea (productId, cantidad)
#   7. Productos existen y están activos
#   8. Stock suficiente (sumando líneas repetidas del mismo producto)
#   → Unidad atómica: descuento condicional de stock + inserción del pedido
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from app_pedidos.errors import (
    BusinessRuleError,
    FormatError,
    InactiveProductError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    StockConflictError,
)
from app_pedidos.models import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    SoftDeleteResult,
    now_iso,
)
from app_pedidos.performance_logger import profile_function
from app_pedidos.repositories.base import JsonStore
from app_pedidos.repositories.interfaces import IEntityRepository, IProductLookup, IStockRepository
from app_pedidos.repositories.order_repository import OrderRepository
from app_pedidos.services.pricing import DiscountPolicy
from app_pedidos.validation import (
    VALID_BANKS,
    new_id,
    require_non_empty,
    require_positive_int,
    require_valid_id,
)

logger = logging.getLogger(__name__)


class OrderService:
    """
    Servicio del flujo de pedidos.

    Lee el catálogo SOLO a través de IProductLookup; escribe directamente
    en los repositorios de pedidos y productos para el paso atómico.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: IStockRepository,
        product_lookup: IProductLookup,
        customer_repo: IEntityRepository,
        store: JsonStore,
        discount_policy: Optional[DiscountPolicy] = None,
        audit_service=None
    ):
        """
        Args:
            order_repo: Repositorio de pedidos
            product_repo: Repositorio de productos (descuento de stock)
            product_lookup: Consulta de productos (normalmente ProductService)
            customer_repo: Repositorio de clientes
            store: Almacén compartido (transacciones)
            discount_policy: Tabla de descuentos (por defecto DiscountPolicy())
            audit_service: Servicio de auditoría (opcional)
        """
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.product_lookup = product_lookup
        self.customer_repo = customer_repo
        self.store = store
        self.discount_policy = discount_policy or DiscountPolicy()
        self.audit_service = audit_service

    # =========================================================================
    # CREACIÓN
    # =========================================================================

    @profile_function(name="Crear pedido")
    def create(self, data: Dict[str, Any], user: str = None) -> Order:
        """
        Crea un pedido.

        Args:
            data: {customerId, lines: [{productId, quantity}], paymentMethod,
                   bank?, deliveryAddress}
            user: Usuario que registra el pedido (para auditoría)

        Returns:
            Pedido persistido con ID, líneas congeladas y montos calculados

        Raises:
            FormatError: ID, método de pago, dirección o línea mal formados
            NotFoundError: Cliente o producto inexistente
            BusinessRuleError: Cliente inactivo, banco inválido, lista vacía,
                producto inactivo, stock insuficiente o total no positivo
            StockConflictError: El stock cambió antes del descuento atómico
                (se puede reintentar el pedido completo)
        """
        # 1. Cliente
        customer_id = require_valid_id(data.get('customerId'), 'customerId')
        customer = self.customer_repo.get(customer_id)
        if customer is None:
            raise NotFoundError('Cliente', customer_id, field='customerId')
        if not customer.active:
            raise BusinessRuleError(
                f"El cliente '{customer_id}' está inactivo y no puede realizar pedidos.",
                field='customerId'
            )

        # 2. Dirección
        delivery_address = require_non_empty(data.get('deliveryAddress'), 'deliveryAddress')

        # 3-4. Pago
        payment_method = PaymentMethod.parse(data.get('paymentMethod'))
        bank = self._validate_bank(payment_method, data.get('bank'))

        # 5-6. Líneas
        requested = self._parse_lines(data.get('lines'))

        # 7-8. Productos y stock
        lines, quantities = self._resolve_lines(requested)

        subtotal = round(sum(line.unit_price * line.quantity for line in lines), 2)
        discount = self.discount_policy.discount_for(subtotal, payment_method, bank)
        total = round(subtotal - discount, 2)
        if not total > 0:
            raise BusinessRuleError(
                f"El total del pedido ({total}) debe ser mayor que cero.",
                field='total'
            )

        order = Order(
            id=new_id(),
            customer_id=customer_id,
            lines=lines,
            payment_method=payment_method,
            bank=bank,
            delivery_address=delivery_address,
            subtotal=subtotal,
            discount=discount,
            total=total,
            status=OrderStatus.PENDING,
            active=True,
        )

        # Unidad atómica: stock, pedido y auditoría se escriben juntos o no se escribe nada
        try:
            with self.store.transaction():
                remaining = self.product_repo.decrement_stock(quantities)
                self.order_repo.add(order)
                if self.audit_service:
                    self.audit_service.log_order_created(
                        user, order.id, order.total, order.total_quantity, payment_method.value
                    )
                    self.audit_service.log_stock_decrement(user, order.id, quantities, remaining)
        except StockConflictError as e:
            logger.warning(
                "Conflicto de stock al crear pedido para cliente %s: producto %s disponible %s, solicitado %s",
                customer_id, e.product_id, e.available, e.requested
            )
            raise

        logger.info("Pedido %s creado - total %.2f", order.id, order.total)
        return order

    def _validate_bank(self, payment_method: PaymentMethod, bank: Any) -> Optional[str]:
        if payment_method == PaymentMethod.CASH:
            return None
        if not isinstance(bank, str) or not bank.strip():
            raise BusinessRuleError(
                f"El campo 'bank' es obligatorio para pagos con {payment_method.value}.",
                field='bank'
            )
        bank = bank.strip()
        if bank not in VALID_BANKS:
            raise BusinessRuleError(
                f"Banco inválido para el método de pago {payment_method.value}: '{bank}'. "
                f"Bancos permitidos: {', '.join(sorted(VALID_BANKS))}.",
                field='bank'
            )
        return bank

    def _parse_lines(self, raw_lines: Any) -> List[tuple]:
        """
        Valida el formato de las líneas.

        Returns:
            Lista de (productId, cantidad) en el orden recibido
        """
        if not isinstance(raw_lines, list) or not raw_lines:
            raise BusinessRuleError(
                "El pedido debe tener al menos una línea de producto.",
                field='lines'
            )
        parsed = []
        for raw in raw_lines:
            if not isinstance(raw, dict):
                raise FormatError("Cada línea debe ser un objeto {productId, quantity}.", field='lines')
            product_id = require_valid_id(raw.get('productId'), 'productId')
            quantity = require_positive_int(raw.get('quantity'), 'quantity')
            parsed.append((product_id, quantity))
        return parsed

    def _resolve_lines(self, requested: List[tuple]):
        """
        Congela cada línea con el producto actual y verifica stock.

        Returns:
            Tupla (líneas congeladas, {productId: cantidad total})
        """
        products = {p.id: p for p in self.product_lookup.find_by_ids(pid for pid, _ in requested)}

        lines: List[OrderLine] = []
        quantities: Dict[str, int] = {}
        for product_id, quantity in requested:
            product = products.get(product_id)
            if product is None:
                raise NotFoundError('Producto', product_id, field='productId')
            if not product.active:
                raise InactiveProductError([product.id], [product.name])
            lines.append(OrderLine(
                product_id=product.id,
                product_name=product.name,
                unit_price=product.price,
                quantity=quantity,
            ))
            quantities[product_id] = quantities.get(product_id, 0) + quantity

        for product_id, quantity in quantities.items():
            product = products[product_id]
            if quantity > product.stock:
                raise InsufficientStockError(product.id, product.name, product.stock, quantity)

        return lines, quantities

    # =========================================================================
    # ESTADO
    # =========================================================================

    def update_status(self, order_id: Any, status: Any, user: str = None) -> Order:
        """
        Cambia el estado de un pedido.

        Solo avanza: PENDING → PREPARING → READY → DELIVERED, o pasa a
        CANCELLED desde cualquier estado no terminal. Repetir el estado
        actual no cambia nada.

        Raises:
            FormatError: ID o estado inválido
            NotFoundError: El pedido no existe
            InvalidTransitionError: Retroceso o salida de un estado terminal
        """
        order_id = require_valid_id(order_id)
        target = OrderStatus.parse(status)

        with self.store.transaction():
            order = self.order_repo.get(order_id)
            if order is None:
                raise NotFoundError('Pedido', order_id)
            previous = order.status
            if previous == target:
                return order
            if not previous.can_move_to(target):
                raise InvalidTransitionError(previous.value, target.value)
            order.status = target
            order.updated_at = now_iso()
            self.order_repo.save(order)
            if self.audit_service:
                self.audit_service.log_order_status_change(user, order_id, previous.value, target.value)

        logger.info("Pedido %s: %s -> %s", order_id, previous.value, target.value)
        return order

    # =========================================================================
    # BAJA Y CONSULTAS
    # =========================================================================

    def soft_delete(self, order_id: Any, user: str = None) -> SoftDeleteResult:
        """
        Desactiva un pedido. Idempotente; no devuelve stock.

        Returns:
            NOT_FOUND, NO_CHANGE (ya inactivo) o DEACTIVATED
        """
        order_id = require_valid_id(order_id)
        with self.store.transaction():
            order = self.order_repo.get(order_id)
            if order is None:
                return SoftDeleteResult.NOT_FOUND
            if not order.active:
                return SoftDeleteResult.NO_CHANGE
            self.order_repo.update_fields(order_id, {'active': False, 'updatedAt': now_iso()})
            if self.audit_service:
                self.audit_service.log_order_deactivated(user, order_id)

        return SoftDeleteResult.DEACTIVATED

    def list(self, active: Optional[bool] = True) -> List[Order]:
        return self.order_repo.list(active)

    def get(self, order_id: Any) -> Order:
        order_id = require_valid_id(order_id)
        order = self.order_repo.get(order_id)
        if order is None:
            raise NotFoundError('Pedido', order_id)
        return order

    def list_by_customer(self, customer_id: Any) -> List[Order]:
        """Historial de pedidos de un cliente (incluye pedidos dados de baja)."""
        customer_id = require_valid_id(customer_id, 'customerId')
        if self.customer_repo.get(customer_id) is None:
            raise NotFoundError('Cliente', customer_id, field='customerId')
        return self.order_repo.list_by_customer(customer_id)

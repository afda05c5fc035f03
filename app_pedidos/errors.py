# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Jerarquía de excepciones que lanzan los servicios. Cada error lleva un
# "kind" distinguible por máquina y el código HTTP con el que se responde.
# Las rutas NO capturan estos errores: los renderiza el errorhandler de
# main.py.
# ==============================================================================

from typing import Any, Dict, List, Optional


class PedidosError(Exception):
    """Excepción base de todos los errores de app_pedidos."""

    kind = 'ERROR'
    http_status = 500

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Cuerpo JSON de la respuesta de error."""
        body = {'error': self.message, 'kind': self.kind}
        if self.field:
            body['field'] = self.field
        if self.details:
            body['details'] = self.details
        return body


class FormatError(PedidosError):
    """Identificador mal formado, enum inválido o campo obligatorio ausente."""

    kind = 'FORMAT'
    http_status = 400


class NotFoundError(PedidosError):
    """La entidad referenciada no existe."""

    kind = 'NOT_FOUND'
    http_status = 404

    def __init__(self, entity: str, record_id: Any, field: Optional[str] = None):
        self.entity = entity
        self.record_id = record_id
        super().__init__(
            f"{entity} con ID '{record_id}' no encontrado.",
            field=field,
            details={'id': record_id}
        )


class BusinessRuleError(PedidosError):
    """La petición es válida en forma pero viola una regla de negocio."""

    kind = 'BUSINESS_RULE'
    http_status = 400


class InactiveProductError(BusinessRuleError):
    """Se intentó usar un producto dado de baja."""

    def __init__(self, product_ids: List[str], names: Optional[List[str]] = None):
        self.product_ids = list(product_ids)
        label = ', '.join(f"'{n}'" for n in (names or product_ids))
        super().__init__(
            f"Producto(s) {label} inactivo(s): no se pueden usar.",
            field='productId',
            details={'productIds': self.product_ids}
        )


class InsufficientStockError(BusinessRuleError):
    """La cantidad solicitada supera el stock actual."""

    def __init__(self, product_id: str, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Stock insuficiente para el producto '{product_name}'. "
            f"Stock actual: {available}, solicitado: {requested}.",
            field='quantity',
            details={
                'productId': product_id,
                'productName': product_name,
                'stock': available,
                'requested': requested,
            }
        )


class InvalidTransitionError(BusinessRuleError):
    """Cambio de estado no permitido (retroceso o desde un estado terminal)."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"No se puede cambiar el estado de {current} a {target}.",
            field='status',
            details={'from': current, 'to': target}
        )


class ConflictError(PedidosError):
    """Choque con otro registro (campo único duplicado o carrera de stock)."""

    kind = 'CONFLICT'
    http_status = 409
    retryable = False

    def __init__(self, message: str, fields: Optional[List[str]] = None, details=None):
        self.fields = list(fields or [])
        super().__init__(
            message,
            field=self.fields[0] if len(self.fields) == 1 else None,
            details=details if details is not None else ({'fields': self.fields} if self.fields else None)
        )


class StockConflictError(ConflictError):
    """
    El stock cambió entre la validación y el descuento atómico.
    El pedido completo puede reenviarse.
    """

    retryable = True

    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Conflicto de stock en el producto '{product_id}': disponible {available}, "
            f"solicitado {requested}. Reintente el pedido.",
            details={
                'productId': product_id,
                'stock': available,
                'requested': requested,
                'retryable': True,
            }
        )

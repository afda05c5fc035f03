# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Centraliza toda la lógica de registro de auditoría.
# Formatea mensajes humanizados y categoriza eventos.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pedidos.errors import FormatError
from app_pedidos.models import AuditLog, AuditType
from app_pedidos.repositories.interfaces import IAuditRepository


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Centraliza:
    - Registro de eventos con mensajes humanizados
    - Categorización de eventos (PEDIDO, STOCK, PRODUCTO, COMBO, CLIENTE, EMPLEADO, SISTEMA)
    - Consulta de logs

    Regla: todo pedido creado deja un log de PEDIDO y uno de STOCK.
    """

    def __init__(self, audit_repo: IAuditRepository):
        """
        Inicializa el servicio de auditoría.

        Args:
            audit_repo: Repositorio de auditoría
        """
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: AuditType,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Registra un evento de auditoría genérico.

        Args:
            log_type: Tipo de evento
            user: Usuario que realizó la acción
            message: Mensaje descriptivo humanizado
            related_id: ID relacionado (pedido, producto, ...)
            details: Detalles adicionales
        """
        self.audit_repo.log(AuditType(log_type).value, user, message, related_id, details)

    # ---- Pedidos ----

    def log_order_created(
        self,
        user: str,
        order_id: str,
        total: float,
        items_count: int,
        payment_method: str
    ) -> None:
        """
        Registra la creación de un pedido.

        Args:
            user: Usuario que creó el pedido
            order_id: ID del pedido
            total: Total a pagar
            items_count: Unidades pedidas
            payment_method: Método de pago
        """
        message = (
            f"Pedido {order_id} creado por {user} - Total: $ {total:.2f} - "
            f"{items_count} unidades - Pago: {payment_method}"
        )
        self.log(
            AuditType.PEDIDO,
            user,
            message,
            order_id,
            {'total': total, 'items_count': items_count, 'payment_method': payment_method}
        )

    def log_order_status_change(
        self,
        user: str,
        order_id: str,
        old_status: str,
        new_status: str
    ) -> None:
        message = f"Pedido {order_id}: {old_status} → {new_status} por {user}"
        self.log(
            AuditType.PEDIDO,
            user,
            message,
            order_id,
            {'from': old_status, 'to': new_status}
        )

    def log_order_deactivated(self, user: str, order_id: str) -> None:
        message = f"Pedido {order_id} dado de baja por {user}"
        self.log(AuditType.PEDIDO, user, message, order_id)

    def log_stock_decrement(
        self,
        user: str,
        order_id: str,
        quantities: Dict[str, int],
        remaining: Dict[str, int]
    ) -> None:
        """
        Registra la salida de stock asociada a un pedido.

        Args:
            user: Usuario que creó el pedido
            order_id: ID del pedido
            quantities: {productId: unidades descontadas}
            remaining: {productId: stock restante}
        """
        units = sum(quantities.values())
        message = (
            f"Salida de stock: -{units} unidades en {len(quantities)} producto(s) "
            f"- Pedido {order_id} - Por {user}"
        )
        self.log(
            AuditType.STOCK,
            user,
            message,
            order_id,
            {'quantities': quantities, 'remaining': remaining}
        )

    # ---- Catálogo y personas ----

    def log_created(self, log_type: AuditType, user: str, record_id: str, label: str) -> None:
        """
        Registra el alta de un registro de catálogo o de una persona.

        Args:
            log_type: PRODUCTO, COMBO, CLIENTE o EMPLEADO
            user: Usuario que creó el registro
            record_id: ID del registro
            label: Nombre legible (ej: nombre del producto)
        """
        message = f"{_LABELS[log_type]} creado: {label} - Por {user}"
        self.log(log_type, user, message, record_id, {'name': label})

    def log_updated(
        self,
        log_type: AuditType,
        user: str,
        record_id: str,
        label: str,
        changes: Dict[str, Any]
    ) -> None:
        fields = ', '.join(sorted(changes)) or 'sin cambios'
        message = f"{_LABELS[log_type]} actualizado: {label} ({fields}) - Por {user}"
        self.log(log_type, user, message, record_id, {'changes': changes})

    def log_deactivated(self, log_type: AuditType, user: str, record_id: str, label: str) -> None:
        message = f"{_LABELS[log_type]} dado de baja: {label} - Por {user}"
        self.log(log_type, user, message, record_id, {'name': label})

    def log_reactivated(self, log_type: AuditType, user: str, record_id: str, label: str) -> None:
        message = f"{_LABELS[log_type]} reactivado: {label} - Por {user}"
        self.log(log_type, user, message, record_id, {'name': label})

    # =========================================================================
    # CONSULTA DE LOGS
    # =========================================================================

    def get_recent_logs(self, log_type: Optional[str] = None, limit: int = 100) -> List[AuditLog]:
        """
        Obtiene los logs más recientes, opcionalmente de un solo tipo.

        Args:
            log_type: Tipo de evento (None = todos)
            limit: Máximo de registros

        Returns:
            Logs ordenados del más reciente al más antiguo
        """
        if log_type:
            try:
                log_type = AuditType(log_type.strip().upper()).value
            except ValueError:
                valid = ', '.join(t.value for t in AuditType)
                raise FormatError(
                    f"Tipo de auditoría inválido: '{log_type}'. Valores permitidos: {valid}.",
                    field='type'
                ) from None
        return self.audit_repo.search(log_type, limit)


_LABELS = {
    AuditType.PRODUCTO: 'Producto',
    AuditType.COMBO: 'Combo',
    AuditType.CLIENTE: 'Cliente',
    AuditType.EMPLEADO: 'Empleado',
}

# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Independientes del mecanismo de persistencia (JSON ahora).
# ==============================================================================

from .entities import (
    # Enumeraciones
    PaymentMethod,
    OrderStatus,
    ORDER_FLOW,
    EmployeeRole,
    SoftDeleteResult,
    AuditType,

    # Catálogo
    Product,
    Combo,

    # Personas
    Customer,
    Employee,

    # Pedidos
    Order,
    OrderLine,

    # Auditoría
    AuditLog,

    now_iso,
)

__all__ = [
    'PaymentMethod',
    'OrderStatus',
    'ORDER_FLOW',
    'EmployeeRole',
    'SoftDeleteResult',
    'AuditType',
    'Product',
    'Combo',
    'Customer',
    'Employee',
    'Order',
    'OrderLine',
    'AuditLog',
    'now_iso',
]

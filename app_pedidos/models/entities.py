# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Diseñadas para ser independientes del mecanismo de persistencia:
# to_dict()/from_dict() usan las mismas claves camelCase que la API JSON.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from app_pedidos.errors import FormatError


def now_iso() -> str:
    """Timestamp del servidor en ISO-8601 UTC."""
    return datetime.now(timezone.utc).isoformat()


def _normalize_enum_name(value: str) -> str:
    return value.strip().upper().replace(' ', '_').replace('-', '_')


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class PaymentMethod(str, Enum):
    """Métodos de pago aceptados."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    CASH = "CASH"

    @classmethod
    def parse(cls, value: Any) -> 'PaymentMethod':
        """
        Convierte el texto recibido en un método de pago.

        Raises:
            FormatError: Si falta o no es un método conocido
        """
        if not isinstance(value, str) or not value.strip():
            raise FormatError("El campo 'paymentMethod' es obligatorio.", field='paymentMethod')
        name = _normalize_enum_name(value)
        name = _PAYMENT_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            valid = ', '.join(m.value for m in cls)
            raise FormatError(
                f"Método de pago inválido: '{value}'. Valores permitidos: {valid}.",
                field='paymentMethod'
            ) from None


_PAYMENT_ALIASES = {
    'DEBITO': 'DEBIT',
    'CREDITO': 'CREDIT',
    'EFECTIVO': 'CASH',
}


class OrderStatus(str, Enum):
    """Estados de un pedido. El flujo normal solo avanza; CANCELLED es terminal."""
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: Any) -> 'OrderStatus':
        if not isinstance(value, str) or not value.strip():
            raise FormatError("El campo 'status' es obligatorio.", field='status')
        name = _normalize_enum_name(value)
        name = _STATUS_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise FormatError(
                f"Estado de pedido inválido: '{value}'. Valores permitidos: {valid}.",
                field='status'
            ) from None

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_move_to(self, target: 'OrderStatus') -> bool:
        """True si target está más adelante en el flujo (o es CANCELLED)."""
        if self.is_terminal:
            return False
        if target == OrderStatus.CANCELLED:
            return True
        return ORDER_FLOW.index(target) > ORDER_FLOW.index(self)


ORDER_FLOW = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

_STATUS_ALIASES = {
    'PENDIENTE': 'PENDING',
    'PREPARACION': 'PREPARING',
    'EN_PREPARACION': 'PREPARING',
    'LISTO': 'READY',
    'LISTO_PARA_RETIRO': 'READY',
    'ENTREGADO': 'DELIVERED',
    'CANCELADO': 'CANCELLED',
}


class EmployeeRole(str, Enum):
    """Roles válidos de un empleado."""
    ADMINISTRATIVE = "ADMINISTRATIVE"
    CASHIER = "CASHIER"
    COOK = "COOK"
    DELIVERY = "DELIVERY"

    @classmethod
    def parse(cls, value: Any) -> 'EmployeeRole':
        if not isinstance(value, str) or not value.strip():
            raise FormatError("El campo 'role' es obligatorio y no puede estar vacío.", field='role')
        try:
            name = _normalize_enum_name(value)
            return cls(_ROLE_ALIASES.get(name, name))
        except ValueError:
            valid = ', '.join(r.value for r in cls)
            raise FormatError(
                f"El campo 'role' es inválido. Debe ser uno de: {valid}.",
                field='role'
            ) from None


_ROLE_ALIASES = {
    'ADMINISTRATIVO': 'ADMINISTRATIVE',
    'CAJERO': 'CASHIER',
    'COCINERO': 'COOK',
    'REPARTIDOR': 'DELIVERY',
}


class SoftDeleteResult(str, Enum):
    """Resultado de una eliminación lógica."""
    NOT_FOUND = "NOT_FOUND"
    NO_CHANGE = "NO_CHANGE"      # Ya estaba inactivo
    DEACTIVATED = "DEACTIVATED"


class AuditType(str, Enum):
    """Tipos de eventos de auditoría."""
    PEDIDO = "PEDIDO"
    STOCK = "STOCK"
    PRODUCTO = "PRODUCTO"
    COMBO = "COMBO"
    CLIENTE = "CLIENTE"
    EMPLEADO = "EMPLEADO"
    SISTEMA = "SISTEMA"


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador único
        name: Nombre (único entre productos activos)
        price: Precio unitario (positivo)
        stock: Unidades disponibles (nunca negativo)
        category: Categoría
        description: Descripción opcional
        active: False si fue dado de baja (eliminación lógica)
    """
    id: str
    name: str
    price: float
    stock: int
    category: str
    description: Optional[str] = None
    active: bool = True
    created_at: str = ''
    updated_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia y respuesta JSON."""
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'stock': self.stock,
            'category': self.category,
            'description': self.description,
            'active': self.active,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            price=float(data.get('price', 0.0)),
            stock=int(data.get('stock', 0)),
            category=data.get('category', ''),
            description=data.get('description'),
            active=data.get('active', True),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )


@dataclass
class Combo:
    """
    Combo de productos. El precio siempre es calculado
    (90% de la suma de los productos), nunca lo envía el cliente.
    """
    id: str
    name: str
    product_ids: List[str]
    price: float
    description: Optional[str] = None
    active: bool = True
    created_at: str = ''
    updated_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'productIds': list(self.product_ids),
            'price': self.price,
            'description': self.description,
            'active': self.active,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Combo':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            product_ids=list(data.get('productIds', [])),
            price=float(data.get('price', 0.0)),
            description=data.get('description'),
            active=data.get('active', True),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )


# ==============================================================================
# PERSONAS
# ==============================================================================

@dataclass
class Customer:
    """Cliente. RUT y correo son únicos entre clientes activos."""
    id: str
    name: str
    surname: str
    national_id: str
    email: str
    phone: str
    address: str
    active: bool = True
    created_at: str = ''
    updated_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'surname': self.surname,
            'nationalId': self.national_id,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'active': self.active,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            surname=data.get('surname', ''),
            national_id=data.get('nationalId', ''),
            email=data.get('email', ''),
            phone=data.get('phone', ''),
            address=data.get('address', ''),
            active=data.get('active', True),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )


@dataclass
class Employee:
    """
    Empleado. Teléfono, correo y dirección son opcionales.

    Attributes:
        role: Uno de EmployeeRole
    """
    id: str
    name: str
    surname: str
    national_id: str
    role: EmployeeRole
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    active: bool = True
    created_at: str = ''
    updated_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'surname': self.surname,
            'nationalId': self.national_id,
            'role': self.role.value if isinstance(self.role, Enum) else self.role,
            'phone': self.phone,
            'email': self.email,
            'address': self.address,
            'active': self.active,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            surname=data.get('surname', ''),
            national_id=data.get('nationalId', ''),
            role=EmployeeRole(data.get('role', EmployeeRole.CASHIER.value)),
            phone=data.get('phone'),
            email=data.get('email'),
            address=data.get('address'),
            active=data.get('active', True),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )


# ==============================================================================
# PEDIDOS
# ==============================================================================

@dataclass(frozen=True)
class OrderLine:
    """
    Línea de pedido: copia inmutable del producto al momento de la compra.
    No cambia aunque después se modifique el catálogo.
    """
    product_id: str
    product_name: str
    unit_price: float
    quantity: int

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'unitPrice': self.unit_price,
            'quantity': self.quantity,
            'lineTotal': self.line_total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderLine':
        return cls(
            product_id=data['productId'],
            product_name=data.get('productName', ''),
            unit_price=float(data.get('unitPrice', 0.0)),
            quantity=int(data.get('quantity', 0)),
        )


@dataclass
class Order:
    """
    Pedido completo.

    Attributes:
        id: Identificador asignado por el servidor
        customer_id: Cliente que realiza el pedido
        lines: Líneas congeladas (producto, precio, cantidad)
        payment_method: DEBIT, CREDIT o CASH
        bank: Banco (solo pagos con tarjeta)
        delivery_address: Dirección de entrega
        subtotal: Suma de las líneas
        discount: Descuento aplicado (0 <= discount <= subtotal)
        total: subtotal - discount (siempre > 0)
        status: Estado actual
        active: False si fue dado de baja
        created_at: Fecha de creación (inmutable)
    """
    id: str
    customer_id: str
    lines: List[OrderLine]
    payment_method: PaymentMethod
    delivery_address: str
    subtotal: float
    discount: float
    total: float
    bank: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    active: bool = True
    created_at: str = ''
    updated_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customerId': self.customer_id,
            'lines': [line.to_dict() for line in self.lines],
            'paymentMethod': self.payment_method.value,
            'bank': self.bank,
            'deliveryAddress': self.delivery_address,
            'subtotal': self.subtotal,
            'discount': self.discount,
            'total': self.total,
            'status': self.status.value,
            'active': self.active,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        return cls(
            id=data['id'],
            customer_id=data.get('customerId', ''),
            lines=[OrderLine.from_dict(line) for line in data.get('lines', [])],
            payment_method=PaymentMethod(data.get('paymentMethod', PaymentMethod.CASH.value)),
            bank=data.get('bank'),
            delivery_address=data.get('deliveryAddress', ''),
            subtotal=float(data.get('subtotal', 0.0)),
            discount=float(data.get('discount', 0.0)),
            total=float(data.get('total', 0.0)),
            status=OrderStatus(data.get('status', OrderStatus.PENDING.value)),
            active=data.get('active', True),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt', ''),
        )


# ==============================================================================
# AUDITORÍA
# ==============================================================================

@dataclass
class AuditLog:
    """
    Registro de auditoría.

    Attributes:
        type: Tipo de evento (PEDIDO, STOCK, PRODUCTO, ...)
        user: Usuario que realizó la acción
        message: Mensaje descriptivo humanizado
        timestamp: Fecha y hora del evento
        related_id: ID relacionado (pedido, producto, ...)
        details: Detalles adicionales
    """
    type: str
    user: str
    message: str
    timestamp: str = ''
    related_id: str = ''
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'user': self.user,
            'message': self.message,
            'timestamp': self.timestamp,
            'related_id': self.related_id,
            'details': self.details
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditLog':
        return cls(
            type=data.get('type', ''),
            user=data.get('user', ''),
            message=data.get('message', ''),
            timestamp=data.get('timestamp', ''),
            related_id=data.get('related_id', ''),
            details=data.get('details', {})
        )

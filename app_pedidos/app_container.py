# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto único donde se construyen repositorios y servicios. Facilita:
#   - Inyección de dependencias (cada servicio recibe lo que usa)
#   - Testing (un contenedor por test, sobre un directorio temporal)
#   - Cambiar JSON por otra persistencia sin tocar los servicios
#
# El contenedor es dueño del JsonStore: lo abre al crearse la app y lo
# cierra al apagarla. No hay singleton global.
# ==============================================================================

from typing import Optional

from app_pedidos.repositories import (
    JsonStore,
    ProductRepository,
    ComboRepository,
    CustomerRepository,
    EmployeeRepository,
    OrderRepository,
    AuditRepository,
)

from app_pedidos.services import (
    AuditService,
    DiscountPolicy,
    ProductService,
    ComboService,
    CustomerService,
    EmployeeService,
    OrderService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer('/ruta/data').open()
        order_service = container.order_service
        ...
        container.close()
    """

    def __init__(self, data_dir: str, discount_policy: Optional[DiscountPolicy] = None):
        """
        Args:
            data_dir: Directorio donde están los JSON
            discount_policy: Tabla de descuentos (None = por defecto)
        """
        self.store = JsonStore(data_dir)
        self._discount_policy = discount_policy

        # Repositorios (lazy loading)
        self._product_repo: Optional[ProductRepository] = None
        self._combo_repo: Optional[ComboRepository] = None
        self._customer_repo: Optional[CustomerRepository] = None
        self._employee_repo: Optional[EmployeeRepository] = None
        self._order_repo: Optional[OrderRepository] = None
        self._audit_repo: Optional[AuditRepository] = None

        # Servicios (lazy loading)
        self._audit_service: Optional[AuditService] = None
        self._product_service: Optional[ProductService] = None
        self._combo_service: Optional[ComboService] = None
        self._customer_service: Optional[CustomerService] = None
        self._employee_service: Optional[EmployeeService] = None
        self._order_service: Optional[OrderService] = None

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def open(self) -> 'AppContainer':
        self.store.open()
        return self

    def close(self) -> None:
        self.store.close()

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.store)
        return self._product_repo

    @property
    def combo_repo(self) -> ComboRepository:
        if self._combo_repo is None:
            self._combo_repo = ComboRepository(self.store)
        return self._combo_repo

    @property
    def customer_repo(self) -> CustomerRepository:
        if self._customer_repo is None:
            self._customer_repo = CustomerRepository(self.store)
        return self._customer_repo

    @property
    def employee_repo(self) -> EmployeeRepository:
        if self._employee_repo is None:
            self._employee_repo = EmployeeRepository(self.store)
        return self._employee_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self.store)
        return self._order_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self.store)
        return self._audit_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        """Servicio de auditoría."""
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def product_service(self) -> ProductService:
        """Servicio de productos (también es el IProductLookup de combos y pedidos)."""
        if self._product_service is None:
            self._product_service = ProductService(
                self.product_repo,
                self.store,
                self.audit_service
            )
        return self._product_service

    @property
    def combo_service(self) -> ComboService:
        if self._combo_service is None:
            self._combo_service = ComboService(
                self.combo_repo,
                self.product_service,
                self.store,
                self.audit_service
            )
        return self._combo_service

    @property
    def customer_service(self) -> CustomerService:
        if self._customer_service is None:
            self._customer_service = CustomerService(
                self.customer_repo,
                self.store,
                self.audit_service
            )
        return self._customer_service

    @property
    def employee_service(self) -> EmployeeService:
        if self._employee_service is None:
            self._employee_service = EmployeeService(
                self.employee_repo,
                self.store,
                self.audit_service
            )
        return self._employee_service

    @property
    def order_service(self) -> OrderService:
        """Servicio de pedidos (flujo principal)."""
        if self._order_service is None:
            self._order_service = OrderService(
                self.order_repo,
                self.product_repo,
                self.product_service,
                self.customer_repo,
                self.store,
                self._discount_policy,
                self.audit_service
            )
        return self._order_service

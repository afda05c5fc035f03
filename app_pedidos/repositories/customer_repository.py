# ==============================================================================
# REPOSITORIOS DE PERSONAS - Clientes y empleados
# ==============================================================================

from app_pedidos.models import Customer, Employee
from app_pedidos.repositories.base import DictRepository


class CustomerRepository(DictRepository[Customer]):
    """Clientes: {customer_id: {name, surname, nationalId, email, ...}}"""

    file_name = 'clientes.json'
    entity_cls = Customer


class EmployeeRepository(DictRepository[Employee]):
    """Empleados: {employee_id: {name, surname, nationalId, role, ...}}"""

    file_name = 'empleados.json'
    entity_cls = Employee

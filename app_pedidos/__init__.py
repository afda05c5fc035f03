"""Backend de pedidos para comida rápida: productos, combos, clientes, empleados y pedidos."""

__version__ = '1.0.0'

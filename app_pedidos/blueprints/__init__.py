# ==============================================================================
# BLUEPRINTS - Superficie HTTP (JSON)
# ==============================================================================
# Mapeo delgado petición → servicio → respuesta. Sin lógica de negocio.
# ==============================================================================

from app_pedidos.blueprints.catalog import clientes_bp, combos_bp, empleados_bp, productos_bp
from app_pedidos.blueprints.pedidos import pedidos_bp

ALL_BLUEPRINTS = (productos_bp, combos_bp, clientes_bp, empleados_bp, pedidos_bp)

__all__ = [
    'productos_bp',
    'combos_bp',
    'clientes_bp',
    'empleados_bp',
    'pedidos_bp',
    'ALL_BLUEPRINTS',
]

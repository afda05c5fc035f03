# ==============================================================================
# RUTAS DE PEDIDOS
# ==============================================================================

from flask import Blueprint, jsonify

from app_pedidos.blueprints.common import (
    active_filter,
    current_user,
    get_container,
    json_body,
    soft_delete_response,
)

pedidos_bp = Blueprint('pedidos', __name__)


def _orders():
    return get_container().order_service


@pedidos_bp.get('/api/pedidos')
def list_orders():
    return jsonify([o.to_dict() for o in _orders().list(active_filter())])


@pedidos_bp.post('/api/pedidos')
def create_order():
    order = _orders().create(json_body(), user=current_user())
    return order.to_dict(), 201


@pedidos_bp.get('/api/pedidos/<order_id>')
def get_order(order_id):
    return _orders().get(order_id).to_dict()


@pedidos_bp.put('/api/pedidos/<order_id>/estado')
def update_order_status(order_id):
    data = json_body()
    order = _orders().update_status(order_id, data.get('status'), user=current_user())
    return order.to_dict()


@pedidos_bp.delete('/api/pedidos/<order_id>')
def delete_order(order_id):
    result = _orders().soft_delete(order_id, user=current_user())
    return soft_delete_response(result, 'Pedido', order_id)


@pedidos_bp.get('/api/clientes/<customer_id>/pedidos')
def list_customer_orders(customer_id):
    return jsonify([o.to_dict() for o in _orders().list_by_customer(customer_id)])

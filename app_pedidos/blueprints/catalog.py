# ==============================================================================
# RUTAS CRUD - Productos, combos, clientes y empleados
# ==============================================================================
# Las cuatro entidades exponen las mismas operaciones; cada blueprint solo
# cambia el servicio que atiende las rutas. Los errores del dominio NO se
# capturan aquí (los renderiza el errorhandler de main.py).
# ==============================================================================

from flask import Blueprint, jsonify

from app_pedidos.blueprints.common import (
    active_filter,
    current_user,
    get_container,
    json_body,
    soft_delete_response,
)


def make_entity_blueprint(name: str, url_prefix: str, service_attr: str, entity: str, id_param: str) -> Blueprint:
    """
    Construye el blueprint CRUD de una entidad.

    Args:
        name: Nombre del blueprint ('productos')
        url_prefix: Prefijo de rutas ('/api/productos')
        service_attr: Propiedad del contenedor ('product_service')
        entity: Nombre legible para mensajes ('Producto')
        id_param: Nombre del parámetro de ruta ('product_id')
    """
    bp = Blueprint(name, __name__, url_prefix=url_prefix)

    def service():
        return getattr(get_container(), service_attr)

    @bp.get('')
    def list_records():
        return jsonify([r.to_dict() for r in service().list(active_filter())])

    @bp.post('')
    def create_record():
        record = service().create(json_body(), user=current_user())
        return record.to_dict(), 201

    @bp.get(f'/<{id_param}>')
    def get_record(**kwargs):
        return service().get(kwargs[id_param]).to_dict()

    @bp.put(f'/<{id_param}>')
    def update_record(**kwargs):
        record = service().update(kwargs[id_param], json_body(), user=current_user())
        return record.to_dict()

    @bp.put(f'/<{id_param}>/toggle-active')
    def toggle_active(**kwargs):
        data = json_body()
        record = service().set_active(kwargs[id_param], data.get('active'), user=current_user())
        return record.to_dict()

    @bp.delete(f'/<{id_param}>')
    def delete_record(**kwargs):
        record_id = kwargs[id_param]
        result = service().soft_delete(record_id, user=current_user())
        return soft_delete_response(result, entity, record_id)

    return bp


productos_bp = make_entity_blueprint('productos', '/api/productos', 'product_service', 'Producto', 'product_id')
combos_bp = make_entity_blueprint('combos', '/api/combos', 'combo_service', 'Combo', 'combo_id')
clientes_bp = make_entity_blueprint('clientes', '/api/clientes', 'customer_service', 'Cliente', 'customer_id')
empleados_bp = make_entity_blueprint('empleados', '/api/empleados', 'employee_service', 'Empleado', 'employee_id')

# ==============================================================================
# UTILIDADES COMPARTIDAS POR LOS BLUEPRINTS
# ==============================================================================

from typing import Any, Dict, Optional

from flask import current_app, request

from app_pedidos.errors import FormatError, NotFoundError
from app_pedidos.models import SoftDeleteResult

EXTENSION_KEY = 'app_pedidos'

DEFAULT_USER = 'sistema'


def get_container():
    """Contenedor de dependencias de la app actual."""
    return current_app.extensions[EXTENSION_KEY]


def json_body() -> Dict[str, Any]:
    """
    Cuerpo JSON de la petición.

    Raises:
        FormatError: Si no hay cuerpo o no es un objeto JSON
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise FormatError("El cuerpo de la petición debe ser un objeto JSON.")
    return data


def current_user() -> str:
    """Usuario que actúa (cabecera X-User); sin autenticación."""
    return (request.headers.get('X-User') or '').strip() or DEFAULT_USER


def active_filter() -> Optional[bool]:
    """?all=1 incluye inactivos; por defecto solo activos."""
    value = (request.args.get('all') or '').strip().lower()
    return None if value in ('1', 'true', 'yes', 'si') else True


def soft_delete_response(result: SoftDeleteResult, entity: str, record_id: str):
    """
    200 si se desactivó, 204 si ya estaba inactivo.

    Raises:
        NotFoundError: Si no existe (404)
    """
    if result == SoftDeleteResult.NOT_FOUND:
        raise NotFoundError(entity, record_id)
    if result == SoftDeleteResult.NO_CHANGE:
        return '', 204
    return {'message': f"{entity} desactivado correctamente.", 'id': record_id, 'result': result.value}, 200

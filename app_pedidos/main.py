# ==============================================================================
# APLICACIÓN FLASK - Backend de pedidos
# ==============================================================================
# create_app() construye la app: configuración, logging, profiling,
# contenedor de dependencias, CORS, manejo de errores y blueprints.
#
# USO:
#   from app_pedidos.main import create_app
#   app = create_app()                      # configuración desde entorno
#   app = create_app(Settings(data_dir=...)) # tests
# ==============================================================================

import atexit
import logging
import weakref

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from app_pedidos import performance_logger
from app_pedidos.app_container import AppContainer
from app_pedidos.blueprints import ALL_BLUEPRINTS
from app_pedidos.blueprints.common import EXTENSION_KEY
from app_pedidos.config import Settings, configure_logging
from app_pedidos.errors import FormatError, PedidosError

logger = logging.getLogger(__name__)

# Límite máximo de registros devueltos por /api/audit
MAX_AUDIT_LIMIT = 1000

# Contenedores abiertos por create_app(); se cierran al terminar el proceso
_OPEN_CONTAINERS = weakref.WeakSet()


@atexit.register
def _shutdown():
    performance_logger.write_function_stats_report()
    for container in list(_OPEN_CONTAINERS):
        container.close()


def create_app(settings: Settings = None) -> Flask:
    """
    Fábrica de la aplicación.

    Args:
        settings: Configuración explícita (None = Settings.from_env())

    Returns:
        App Flask lista para servir
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = Flask(__name__)
    app.secret_key = settings.effective_secret_key
    app.config['PEDIDOS_SETTINGS'] = settings
    if settings.production and not settings.secret_key:
        logger.warning("Modo producción activo sin PEDIDOS_SECRET_KEY definida")

    # ═══════════════════════════════════════════════════════════════════════
    # PROFILING
    # ═══════════════════════════════════════════════════════════════════════
    performance_logger.configure(settings.logs_dir, enabled=settings.profiling)
    performance_logger.init_profiling(app)

    # ═══════════════════════════════════════════════════════════════════════
    # DEPENDENCIAS (el almacén se abre aquí y se cierra al apagar)
    # ═══════════════════════════════════════════════════════════════════════
    container = AppContainer(settings.data_dir).open()
    app.extensions[EXTENSION_KEY] = container

    _OPEN_CONTAINERS.add(container)

    logger.info("Almacén de datos abierto en %s", settings.data_dir)

    _register_cors(app, settings)
    _register_error_handlers(app)

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    @app.get('/health')
    def health():
        return {'status': 'ok'}

    @app.get('/api/audit')
    def audit_logs():
        log_type = request.args.get('type') or None
        limit = _parse_limit(request.args.get('limit'))
        logs = container.audit_service.get_recent_logs(log_type, limit)
        return jsonify([log.to_dict() for log in logs])

    return app


def _parse_limit(raw) -> int:
    if raw is None or raw == '':
        return 100
    try:
        limit = int(raw)
    except ValueError:
        raise FormatError("El parámetro 'limit' debe ser un número entero.", field='limit') from None
    if limit < 1:
        raise FormatError("El parámetro 'limit' debe ser mayor que cero.", field='limit')
    return min(limit, MAX_AUDIT_LIMIT)


def _register_cors(app: Flask, settings: Settings) -> None:
    """CORS para la consola de administración (solo rutas /api)."""
    CORS(app, resources={
        r"/api/*": {
            "origins": settings.cors_origin_list,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "X-User"],
        }
    })


def _register_error_handlers(app: Flask) -> None:
    """Traduce excepciones a respuestas JSON {error, kind, ...}."""

    @app.errorhandler(PedidosError)
    def _handle_domain_error(e: PedidosError):
        if e.http_status >= 500:
            logger.error("Error de dominio no esperado: %s", e.message)
        return jsonify(e.to_dict()), e.http_status

    @app.errorhandler(HTTPException)
    def _handle_http_error(e: HTTPException):
        return jsonify({'error': e.description, 'kind': 'HTTP'}), e.code

    @app.errorhandler(Exception)
    def _handle_unexpected(e: Exception):
        logger.exception("Error interno en %s %s", request.method, request.path)
        return jsonify({'error': 'Error interno', 'kind': 'INTERNAL'}), 500

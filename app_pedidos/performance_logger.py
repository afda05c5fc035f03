# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide rendimiento de rutas y funciones sin afectar la experiencia del usuario.
# Guarda logs legibles en <logs_dir>/ para análisis humano.
#
# ACTIVAR/DESACTIVAR: configure(logs_dir, enabled) (ver Settings.profiling)
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms

# Nombres de archivo dentro del directorio de logs
PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

# Estado actual (lo fija configure())
_config = {
    'enabled': False,
    'logs_dir': os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs'),
}

# Mapeo de rutas a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    # Productos
    'GET /api/productos': 'Listar productos',
    'POST /api/productos': 'Crear producto',
    'GET /api/productos/<product_id>': 'Ver producto',
    'PUT /api/productos/<product_id>': 'Editar producto',
    'PUT /api/productos/<product_id>/toggle-active': 'Activar/desactivar producto',
    'DELETE /api/productos/<product_id>': 'Dar de baja producto',

    # Combos
    'GET /api/combos': 'Listar combos',
    'POST /api/combos': 'Crear combo',
    'GET /api/combos/<combo_id>': 'Ver combo',
    'PUT /api/combos/<combo_id>': 'Editar combo',
    'PUT /api/combos/<combo_id>/toggle-active': 'Activar/desactivar combo',
    'DELETE /api/combos/<combo_id>': 'Dar de baja combo',

    # Clientes
    'GET /api/clientes': 'Listar clientes',
    'POST /api/clientes': 'Crear cliente',
    'GET /api/clientes/<customer_id>': 'Ver cliente',
    'GET /api/clientes/<customer_id>/pedidos': 'Ver pedidos del cliente',
    'PUT /api/clientes/<customer_id>': 'Editar cliente',
    'PUT /api/clientes/<customer_id>/toggle-active': 'Activar/desactivar cliente',
    'DELETE /api/clientes/<customer_id>': 'Dar de baja cliente',

    # Empleados
    'GET /api/empleados': 'Listar empleados',
    'POST /api/empleados': 'Crear empleado',
    'GET /api/empleados/<employee_id>': 'Ver empleado',
    'PUT /api/empleados/<employee_id>': 'Editar empleado',
    'PUT /api/empleados/<employee_id>/toggle-active': 'Activar/desactivar empleado',
    'DELETE /api/empleados/<employee_id>': 'Dar de baja empleado',

    # Pedidos
    'GET /api/pedidos': 'Listar pedidos',
    'POST /api/pedidos': 'Crear pedido',
    'GET /api/pedidos/<order_id>': 'Ver pedido',
    'PUT /api/pedidos/<order_id>/estado': 'Cambiar estado pedido',
    'DELETE /api/pedidos/<order_id>': 'Dar de baja pedido',

    # Auditoría
    'GET /api/audit': 'Ver registro de actividad',
}


def configure(logs_dir=None, enabled=True):
    """
    Fija el directorio de logs y activa/desactiva el profiling.

    Args:
        logs_dir: Directorio donde escribir los .log (None = mantener el actual)
        enabled: False desactiva todo registro de rendimiento
    """
    if logs_dir:
        _config['logs_dir'] = logs_dir
    _config['enabled'] = bool(enabled)
    if _config['enabled']:
        os.makedirs(_config['logs_dir'], exist_ok=True)


def _log_path(name):
    return os.path.join(_config['logs_dir'], name)


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()
_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# FUNCIONES DE LOGGING
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    """Obtiene timestamp legible"""
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(name, content):
    """Escribe contenido a un archivo de log (thread-safe)"""
    try:
        with _write_lock:
            with open(_log_path(name), 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        # Un log de rendimiento que no se puede escribir no debe tumbar la petición
        logger.warning("No se pudo escribir %s", name, exc_info=True)


def _get_route_name(method, path, rule=None):
    """
    Obtiene nombre legible para una ruta.
    Usa la regla de Flask (con parámetros) si existe; si no, la ruta raw.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]

    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]

    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS (Middleware Flask)
# ═══════════════════════════════════════════════════════════════════════════

def _format_entry(tag, action, user, method, path, time_ms, extra=''):
    """Una línea por evento: fecha | etiqueta | acción | usuario | ruta | tiempo"""
    return (
        f"{_get_timestamp()} | {tag} | {action} | {user or 'anónimo'} | "
        f"{method} {path} | {time_ms:.0f} ms{extra}\n"
    )


def log_route_performance(method, path, rule, time_ms, user=None):
    """
    Registra el tiempo de una petición en performance.log

    Args:
        method: GET, POST, etc.
        path: Ruta solicitada (/api/pedidos)
        rule: Regla de Flask (/api/pedidos/<order_id>)
        time_ms: Tiempo en milisegundos
        user: Cabecera X-User de la petición
    """
    if not _config['enabled']:
        return
    action = _get_route_name(method, path, rule)
    _write_log(PERFORMANCE_LOG, _format_entry('PERF', action, user, method, path, time_ms))


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    """Registra en slow_routes.log una ruta que superó THRESHOLD_WARNING o THRESHOLD_CRITICAL."""
    if not _config['enabled']:
        return
    action = _get_route_name(method, path, rule)
    threshold = THRESHOLD_CRITICAL if level == 'CRITICAL' else THRESHOLD_WARNING
    _write_log(
        SLOW_ROUTES_LOG,
        _format_entry(level, action, user, method, path, time_ms, f" (umbral {threshold} ms)")
    )


# ═══════════════════════════════════════════════════════════════════════════
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Registra hooks before_request y after_request en la app Flask.
    Los hooks no hacen nada mientras el profiling esté desactivado.

    Uso:
        from app_pedidos.performance_logger import init_profiling
        init_profiling(app)
    """

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not _config['enabled'] or not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        user = request.headers.get('X-User')

        log_route_performance(method, path, rule, elapsed, user)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Crear pedido")
        def create():
            ...

    Registra:
        - Cantidad de llamadas
        - Tiempo promedio
        - Tiempo máximo
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not _config['enabled']:
                return fn(*args, **kwargs)

            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    level = 'CRITICAL' if time_ms >= THRESHOLD_CRITICAL else 'WARNING'
    _write_log(SLOW_FUNCTIONS_LOG, f"{_get_timestamp()} | {level} | {func_name} | {time_ms:.0f} ms\n")


# ═══════════════════════════════════════════════════════════════════════════
# 4️⃣ REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Obtiene estadísticas de todas las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def write_function_stats_report():
    """Agrega a slow_functions.log el resumen por función, de mayor a menor tiempo promedio."""
    if not _config['enabled']:
        return

    stats = get_function_stats()
    if not stats:
        return

    lines = [f"\n{_get_timestamp()} | REPORTE | funciones perfiladas: {len(stats)}\n"]
    for func_name, data in sorted(stats.items(), key=lambda x: x[1]['avg_time'], reverse=True):
        lines.append(
            f"  {func_name}: {data['calls']} llamadas, "
            f"promedio {data['avg_time']:.0f} ms, máximo {data['max_time']:.0f} ms\n"
        )
    _write_log(SLOW_FUNCTIONS_LOG, ''.join(lines))


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'configure',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'write_function_stats_report',
    'reset_stats',
]

# ==============================================================================
# CONFIGURACIÓN - Variables de entorno
# ==============================================================================
# Se lee UNA vez al construir la app (create_app). Los tests pasan un
# Settings explícito apuntando a un directorio temporal.
#
# PEDIDOS_DATA_DIR     Directorio de los JSON (default: app_pedidos/data)
# PEDIDOS_SECRET_KEY   Clave secreta de Flask (obligatoria en producción)
# PEDIDOS_PRODUCTION   1/0 (default: 1)
# PEDIDOS_PROFILING    1/0 (default: 1)
# PEDIDOS_LOGS_DIR     Directorio de logs de rendimiento (default: app_pedidos/logs)
# PEDIDOS_LOG_LEVEL    Nivel del logger app_pedidos (default: INFO)
# PEDIDOS_CORS_ORIGINS Orígenes permitidos en /api, separados por coma (default: *)
# FLASK_DEBUG / FLASK_HOST / FLASK_PORT  Servidor de desarrollo
# ==============================================================================

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

_DEFAULT_SECRET = "app_pedidos_dev_secret_key_change_in_production"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'si', 'on')


@dataclass
class Settings:
    """Configuración de la aplicación."""
    data_dir: str = os.path.join(_PACKAGE_DIR, 'data')
    logs_dir: str = os.path.join(_PACKAGE_DIR, 'logs')
    secret_key: Optional[str] = None
    production: bool = True
    profiling: bool = True
    log_level: str = 'INFO'
    cors_origins: str = '*'
    debug: bool = False
    host: str = '0.0.0.0'
    port: int = 5000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'Settings':
        """
        Construye la configuración desde variables de entorno.

        Args:
            environ: Diccionario de variables (None = os.environ)
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            data_dir=env.get('PEDIDOS_DATA_DIR') or defaults.data_dir,
            logs_dir=env.get('PEDIDOS_LOGS_DIR') or defaults.logs_dir,
            secret_key=env.get('PEDIDOS_SECRET_KEY') or None,
            production=_flag(env.get('PEDIDOS_PRODUCTION'), True),
            profiling=_flag(env.get('PEDIDOS_PROFILING'), True),
            log_level=(env.get('PEDIDOS_LOG_LEVEL') or 'INFO').upper(),
            cors_origins=env.get('PEDIDOS_CORS_ORIGINS') or '*',
            debug=env.get('FLASK_DEBUG', '0') == '1',
            host=env.get('FLASK_HOST', '0.0.0.0'),
            port=int(env.get('FLASK_PORT', 5000)),
        )

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(',') if o.strip()] or ['*']

    @property
    def effective_secret_key(self) -> str:
        return self.secret_key or _DEFAULT_SECRET


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configura el logger raíz del paquete (una sola vez).

    Returns:
        Logger 'app_pedidos'
    """
    logger = logging.getLogger('app_pedidos')
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        ))
        logger.addHandler(handler)
    return logger

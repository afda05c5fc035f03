# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── app_pedidos/     <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
# ==============================================================================

from app_pedidos.config import Settings
from app_pedidos.main import create_app

settings = Settings.from_env()
app = create_app(settings)

# Para desarrollo local:
#   python wsgi.py
if __name__ == '__main__':
    app.run(debug=settings.debug, host=settings.host, port=settings.port)

# ==============================================================================
# REPOSITORIO DE AUDITORÍA
# ==============================================================================
# Encapsula todo el acceso a audit.json
# La auditoría se almacena como lista: [{log1}, {log2}, ...]
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pedidos.models import AuditLog
from app_pedidos.repositories.base import ListRepository


class AuditRepository(ListRepository):
    """
    Repositorio del log de auditoría.

    Formato de datos en audit.json:
    [
        {
            "type": "PEDIDO",
            "user": "caja1",
            "message": "Pedido 65a1... creado por caja1 - Total: $ 2500.00",
            "timestamp": "2024-01-01 10:00:00",
            "related_id": "65a1...",
            "details": {...}
        }
    ]
    """

    file_name = 'audit.json'

    # Límite de registros para evitar archivos muy grandes
    MAX_LOGS = 10000

    def load(self) -> List[Dict[str, Any]]:
        """
        Carga todos los logs de auditoría.

        Returns:
            Lista de logs (más recientes primero)
        """
        logs = self.get_all()
        return sorted(logs, key=lambda x: x.get('timestamp', ''), reverse=True)

    def save(self, logs: List[Dict[str, Any]]) -> None:
        """Guarda todos los logs aplicando el límite MAX_LOGS."""
        if len(logs) > self.MAX_LOGS:
            logs = logs[:self.MAX_LOGS]
        self.save_all(logs)

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Registra un nuevo evento de auditoría.

        Args:
            log_type: Tipo de evento (PEDIDO, STOCK, PRODUCTO, ...)
            user: Usuario que realizó la acción
            message: Mensaje descriptivo humanizado
            related_id: ID relacionado (pedido, producto, ...)
            details: Detalles adicionales
        """
        entry = AuditLog(
            type=log_type,
            user=user or 'sistema',
            message=message,
            related_id=related_id,
            details=details or {}
        )
        with self.store.transaction():
            logs = self.get_all()  # Sin ordenar para insertar al inicio
            logs.insert(0, entry.to_dict())
            self.save(logs)

    def search(self, log_type: Optional[str] = None, limit: int = 100) -> List[AuditLog]:
        """
        Filtra logs por tipo.

        Args:
            log_type: Tipo de evento (None = todos)
            limit: Máximo de registros devueltos

        Returns:
            Logs más recientes primero
        """
        logs = self.load()
        if log_type:
            logs = [log for log in logs if log.get('type') == log_type]
        return [AuditLog.from_dict(log) for log in logs[:max(0, limit)]]

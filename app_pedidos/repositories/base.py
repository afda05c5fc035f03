# ==============================================================================
# REPOSITORIO BASE - Almacén JSON y funcionalidad común de repositorios
# ==============================================================================
# JsonStore es el handle explícito del almacenamiento: se abre al iniciar la
# app, se cierra al apagarla y se inyecta en cada repositorio (no hay estado
# global). Su lock exclusivo hace de "transacción": todo lo escrito dentro
# de transaction() se confirma completo o se revierte completo.
# ==============================================================================

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)


class JsonStore:
    """
    Almacén de colecciones JSON (un archivo por colección).

    Uso:
        store = JsonStore('/ruta/data').open()
        with store.transaction():
            ...  # lecturas y escrituras atómicas respecto a otros hilos
        store.close()
    """

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio donde viven los archivos JSON
        """
        self.base_path = base_path
        self._lock = threading.RLock()
        self._depth = 0
        # Contenido previo de cada archivo escrito dentro de la transacción
        self._snapshots: Dict[str, Optional[str]] = {}
        self._opened = False

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def open(self) -> 'JsonStore':
        """Crea el directorio de datos si no existe y habilita el acceso."""
        os.makedirs(self.base_path, exist_ok=True)
        self._opened = True
        return self

    def close(self) -> None:
        """Espera a que termine cualquier transacción en curso y deshabilita el acceso."""
        with self._lock:
            self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    def _check_open(self) -> None:
        if not self._opened:
            raise RuntimeError(f"El almacén en '{self.base_path}' está cerrado")

    def path_for(self, name: str) -> str:
        return os.path.join(self.base_path, name)

    # =========================================================================
    # LECTURA / ESCRITURA
    # =========================================================================

    def read(self, name: str, empty_factory: Callable[[], Any]) -> Any:
        """
        Lee una colección completa.

        Args:
            name: Nombre del archivo (ej: 'productos.json')
            empty_factory: Devuelve la estructura vacía si el archivo
                no existe o está corrupto

        Returns:
            Datos parseados del JSON
        """
        self._check_open()
        with self._lock:
            try:
                with open(self.path_for(name), 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                return empty_factory()
            except json.JSONDecodeError:
                logger.warning("Archivo %s corrupto; se trata como vacío", name)
                return empty_factory()

    def write(self, name: str, data: Any) -> None:
        """
        Escribe una colección completa (archivo temporal + reemplazo atómico).
        Dentro de una transacción guarda primero el contenido anterior.
        """
        self._check_open()
        with self._lock:
            if self._depth and name not in self._snapshots:
                self._snapshots[name] = self._read_text(name)
            self._write_text(name, json.dumps(data, indent=2, ensure_ascii=False))

    def _read_text(self, name: str) -> Optional[str]:
        try:
            with open(self.path_for(name), 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return None

    def _write_text(self, name: str, text: str) -> None:
        path = self.path_for(name)
        temp_path = path + '.tmp'
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(temp_path, path)
        except Exception:
            # Limpiar archivo temporal si algo falla
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    # =========================================================================
    # TRANSACCIONES
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator['JsonStore']:
        """
        Unidad atómica: mantiene el lock exclusivo durante todo el bloque.
        Si el bloque lanza una excepción, todos los archivos escritos dentro
        vuelven a su contenido anterior. Es reentrante: solo la transacción
        más externa confirma o revierte.
        """
        self._check_open()
        with self._lock:
            self._depth += 1
            try:
                yield self
            except Exception:
                if self._depth == 1:
                    self._rollback()
                raise
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._snapshots = {}

    def _rollback(self) -> None:
        for name, text in self._snapshots.items():
            if text is None:
                path = self.path_for(name)
                if os.path.exists(path):
                    os.remove(path)
            else:
                self._write_text(name, text)


E = TypeVar('E')


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Cada repositorio es dueño de un archivo JSON dentro del JsonStore.
    """

    file_name: str = ''

    def __init__(self, store: JsonStore):
        """
        Args:
            store: Almacén ya abierto
        """
        self.store = store

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura de datos vacía para este repositorio."""
        pass

    def _read_raw(self) -> Any:
        return self.store.read(self.file_name, self._empty_data)

    def _write_raw(self, data: Any) -> None:
        self.store.write(self.file_name, data)


def _same_value(a: Any, b: Any) -> bool:
    """Comparación para unicidad: textos sin distinguir mayúsculas ni espacios extremos."""
    if isinstance(a, str) and isinstance(b, str):
        return a.strip().casefold() == b.strip().casefold()
    return a == b


class DictRepository(BaseRepository, Generic[E]):
    """
    Repositorio base para datos almacenados como diccionario.
    El ID es la clave del diccionario.

    Ejemplo: productos.json -> {"65a1...": {...}, "65a2...": {...}}
    """

    entity_cls: Type[E]

    def _empty_data(self) -> Dict:
        return {}

    # ---- Acceso crudo (diccionarios) ----

    def get_all(self) -> Dict[str, Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.get_all().get(record_id)

    def insert(self, record: Dict[str, Any]) -> None:
        """
        Inserta un registro nuevo.

        Raises:
            KeyError: Si ya existe un registro con ese ID
        """
        with self.store.transaction():
            data = self.get_all()
            if record['id'] in data:
                raise KeyError(f"ID duplicado: {record['id']}")
            data[record['id']] = record
            self._write_raw(data)

    def replace(self, record_id: str, record: Dict[str, Any]) -> None:
        with self.store.transaction():
            data = self.get_all()
            data[record_id] = record
            self._write_raw(data)

    def update_fields(self, record_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Mezcla campos en un registro existente.

        Returns:
            Registro actualizado o None si no existía
        """
        with self.store.transaction():
            data = self.get_all()
            record = data.get(record_id)
            if record is None:
                return None
            record.update(updates)
            self._write_raw(data)
            return record

    def find_active_conflicts(
        self,
        values: Dict[str, Any],
        exclude_id: Optional[str] = None
    ) -> List[str]:
        """
        Busca registros ACTIVOS que ya usen alguno de los valores únicos.
        Los registros inactivos no cuentan.

        Args:
            values: {campo: valor} a verificar (se ignoran valores None)
            exclude_id: ID del registro que se está actualizando

        Returns:
            Nombres de los campos en conflicto (sin repetir)
        """
        conflicts: List[str] = []
        for record_id, record in self.get_all().items():
            if record_id == exclude_id or not record.get('active', True):
                continue
            for field, value in values.items():
                if value is None or field in conflicts:
                    continue
                if _same_value(record.get(field), value):
                    conflicts.append(field)
        return conflicts

    # ---- Acceso tipado (entidades) ----

    def get(self, record_id: str) -> Optional[E]:
        record = self.get_by_id(record_id)
        return self.entity_cls.from_dict(record) if record else None

    def list(self, active: Optional[bool] = True) -> List[E]:
        """
        Lista entidades ordenadas por fecha de creación.

        Args:
            active: True solo activos, False solo inactivos, None todos
        """
        records = [
            r for r in self.get_all().values()
            if active is None or r.get('active', True) == active
        ]
        records.sort(key=lambda r: r.get('createdAt', ''))
        return [self.entity_cls.from_dict(r) for r in records]

    def add(self, entity: E) -> E:
        self.insert(entity.to_dict())
        return entity

    def save(self, entity: E) -> E:
        self.replace(entity.id, entity.to_dict())
        return entity


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista.

    Ejemplo: audit.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

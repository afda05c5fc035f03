# ==============================================================================
# VALIDACIONES - Funciones puras de formato
# ==============================================================================
# Sin estado. Cada función lanza FormatError con el nombre del campo si el
# valor no cumple; si cumple, devuelve el valor normalizado.
# ==============================================================================

import math
import re
import uuid
from typing import Any, List, Optional

from app_pedidos.errors import FormatError


# Bancos aceptados para pagos con tarjeta
VALID_BANKS = frozenset(['Santander', 'Chile', 'BCI', 'Estado'])

_ID_RE = re.compile(r'^[0-9a-fA-F]{24}$')
_EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6}$')
_PHONE_RE = re.compile(r'^\d{9}$')
_RUT_RE = re.compile(r'^\d{1,2}\.\d{3}\.\d{3}-[0-9Kk]$')


def new_id() -> str:
    """Genera un identificador nuevo (24 caracteres hexadecimales)."""
    return uuid.uuid4().hex[:24]


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))


def require_valid_id(value: Any, field: str = 'id') -> str:
    """
    Asegura que el valor sea un identificador con formato válido.

    Args:
        value: Valor recibido
        field: Nombre del campo (para el mensaje de error)

    Returns:
        El identificador

    Raises:
        FormatError: Si está vacío o no tiene el formato esperado
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise FormatError(f"El campo '{field}' es obligatorio y no puede estar vacío.", field=field)
    if not is_valid_id(value):
        raise FormatError(
            f"El campo '{field}' ('{value}') no tiene un formato de identificador válido.",
            field=field
        )
    return value


def require_non_empty(value: Any, field: str) -> str:
    """Texto obligatorio: rechaza None, no-strings y cadenas en blanco. Devuelve el valor sin espacios extremos."""
    if not isinstance(value, str) or not value.strip():
        raise FormatError(f"El campo '{field}' es obligatorio y no puede estar vacío.", field=field)
    return value.strip()


def optional_text(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise FormatError(f"El campo '{field}' debe ser texto.", field=field)
    return value.strip() or None


def _is_number(value: Any) -> bool:
    # NaN e Infinity llegan como float desde el JSON de Flask
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def require_positive_number(value: Any, field: str) -> float:
    if value is None:
        raise FormatError(f"El campo '{field}' es obligatorio y no puede ser nulo.", field=field)
    if not _is_number(value):
        raise FormatError(f"El campo '{field}' debe ser numérico.", field=field)
    if not value > 0:
        raise FormatError(f"El campo '{field}' debe ser un valor positivo (mayor que cero).", field=field)
    return float(value)


def require_price(value: Any, field: str) -> float:
    """Monto positivo redondeado a 2 decimales; rechaza valores que redondean a cero."""
    price = round(require_positive_number(value, field), 2)
    if not price > 0:
        raise FormatError(
            f"El campo '{field}' debe ser de al menos 0.01 (se redondea a 2 decimales).",
            field=field
        )
    return price


def require_non_negative_int(value: Any, field: str) -> int:
    if value is None:
        raise FormatError(f"El campo '{field}' es obligatorio y no puede ser nulo.", field=field)
    if not isinstance(value, int) or isinstance(value, bool):
        raise FormatError(f"El campo '{field}' debe ser un número entero.", field=field)
    if value < 0:
        raise FormatError(
            f"El campo '{field}' debe ser un valor no negativo (mayor o igual a cero).",
            field=field
        )
    return value


def require_positive_int(value: Any, field: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise FormatError(f"El campo '{field}' debe ser un entero positivo.", field=field)
    return value


def require_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise FormatError(f"El campo '{field}' debe ser booleano (true/false).", field=field)
    return value


def require_valid_email(value: Any, field: str = 'email') -> str:
    email = require_non_empty(value, field)
    if not _EMAIL_RE.match(email):
        raise FormatError(f"El campo '{field}' no tiene un formato de correo electrónico válido.", field=field)
    return email


def require_valid_phone(value: Any, field: str = 'phone') -> str:
    phone = require_non_empty(value, field)
    if not _PHONE_RE.match(phone):
        raise FormatError(f"El campo '{field}' debe contener 9 dígitos numéricos.", field=field)
    return phone


def _rut_check_digit(number: str) -> str:
    """Dígito verificador por Módulo 11."""
    total = 0
    factor = 2
    for digit in reversed(number):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1
    calculated = 11 - (total % 11)
    if calculated == 11:
        return '0'
    if calculated == 10:
        return 'k'
    return str(calculated)


def is_valid_rut(value: Any) -> bool:
    """Verifica formato XX.XXX.XXX-X y dígito verificador."""
    if not isinstance(value, str) or not _RUT_RE.match(value):
        return False
    number, dv = value.replace('.', '').split('-')
    return _rut_check_digit(number) == dv.lower()


def require_valid_rut(value: Any, field: str = 'nationalId') -> str:
    """
    Asegura que el valor sea un RUT chileno válido.

    Raises:
        FormatError: Si falta, no respeta el formato XX.XXX.XXX-X
            o falla el Módulo 11
    """
    rut = require_non_empty(value, field)
    if not _RUT_RE.match(rut):
        raise FormatError(f"El campo '{field}' no tiene el formato esperado (XX.XXX.XXX-X).", field=field)
    if not is_valid_rut(rut):
        raise FormatError(f"El campo '{field}' es un RUT inválido (falló el Módulo 11).", field=field)
    return rut


def require_non_empty_list(value: Any, field: str) -> List[Any]:
    if not isinstance(value, list) or not value:
        raise FormatError(
            f"La lista '{field}' no puede estar vacía. Se requiere al menos un elemento.",
            field=field
        )
    return value

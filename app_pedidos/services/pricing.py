# ==============================================================================
# PRECIOS Y DESCUENTOS
# ==============================================================================
# Reglas de precio compartidas por combos y pedidos.
# Los montos se redondean a 2 decimales en cada paso.
# ==============================================================================

from typing import Dict, Iterable, Optional, Tuple

from app_pedidos.models import PaymentMethod


# Un combo cuesta el 90% de la suma de sus productos
COMBO_PRICE_RATE = 0.9

# Pagos con tarjeta (débito o crédito)
CARD_METHODS = frozenset([PaymentMethod.DEBIT, PaymentMethod.CREDIT])


def combo_price(prices: Iterable[float]) -> float:
    """Precio de un combo a partir de los precios de sus productos."""
    return round(COMBO_PRICE_RATE * sum(prices), 2)


class DiscountPolicy:
    """
    Tabla de descuentos por (método de pago, banco).

    Por defecto: pago con tarjeta del banco Santander → 10%.
    Cualquier otra combinación no tiene descuento.
    """

    DEFAULT_RATES: Dict[Tuple[PaymentMethod, str], float] = {
        (PaymentMethod.DEBIT, 'Santander'): 0.10,
        (PaymentMethod.CREDIT, 'Santander'): 0.10,
    }

    def __init__(self, rates: Optional[Dict[Tuple[PaymentMethod, str], float]] = None):
        """
        Args:
            rates: Tabla {(método, banco): tasa}; None usa DEFAULT_RATES
        """
        self.rates = dict(self.DEFAULT_RATES if rates is None else rates)
        for key, rate in self.rates.items():
            if not 0 <= rate < 1:
                raise ValueError(f"Tasa de descuento fuera de rango para {key}: {rate}")

    def rate_for(self, method: PaymentMethod, bank: Optional[str]) -> float:
        if method not in CARD_METHODS or not bank:
            return 0.0
        return self.rates.get((method, bank), 0.0)

    def discount_for(self, subtotal: float, method: PaymentMethod, bank: Optional[str]) -> float:
        """Monto de descuento, nunca mayor que el subtotal."""
        discount = round(subtotal * self.rate_for(method, bank), 2)
        return min(discount, subtotal)

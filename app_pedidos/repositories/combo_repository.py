# ==============================================================================
# REPOSITORIO DE COMBOS
# ==============================================================================
# Encapsula todo el acceso a combos.json
# ==============================================================================

from app_pedidos.models import Combo
from app_pedidos.repositories.base import DictRepository


class ComboRepository(DictRepository[Combo]):
    """Combos: {combo_id: {name, productIds, price, ...}}"""

    file_name = 'combos.json'
    entity_cls = Combo

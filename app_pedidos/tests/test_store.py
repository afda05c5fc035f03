import pytest

from app_pedidos.errors import StockConflictError
from app_pedidos.models import Product
from app_pedidos.repositories import (
    AuditRepository,
    IAuditRepository,
    IEntityRepository,
    IProductLookup,
    IStockRepository,
    JsonStore,
    ProductRepository,
)
from app_pedidos.validation import new_id

from conftest import read_json_file


def _product(name='Papas', stock=5, active=True):
    return Product(id=new_id(), name=name, price=990.0, stock=stock, category='Acompañamientos', active=active)


def test_closed_store_rejects_access(data_dir):
    s = JsonStore(data_dir)
    with pytest.raises(RuntimeError):
        s.read('productos.json', dict)
    s.open()
    assert s.read('productos.json', dict) == {}
    s.close()
    assert not s.is_open
    with pytest.raises(RuntimeError):
        s.write('productos.json', {})


def test_add_and_get(store):
    repo = ProductRepository(store)
    p = repo.add(_product())
    loaded = repo.get(p.id)
    assert loaded.name == 'Papas'
    assert loaded.stock == 5
    assert repo.get(new_id()) is None


def test_insert_duplicate_id_fails(store):
    repo = ProductRepository(store)
    p = repo.add(_product())
    with pytest.raises(KeyError):
        repo.add(p)


def test_transaction_rolls_back_every_file(store, data_dir):
    repo = ProductRepository(store)
    p = repo.add(_product())

    with pytest.raises(ValueError):
        with store.transaction():
            repo.update_fields(p.id, {'stock': 0})
            store.write('pedidos.json', {'x': {'id': 'x'}})
            raise ValueError('boom')

    assert repo.get(p.id).stock == 5
    # pedidos.json no existía antes de la transacción
    assert read_json_file(data_dir, 'pedidos.json') is None


def test_nested_transaction_rolls_back_at_outer_level(store):
    repo = ProductRepository(store)
    p = repo.add(_product())

    with pytest.raises(ValueError):
        with store.transaction():
            with store.transaction():
                repo.update_fields(p.id, {'stock': 1})
            assert repo.get(p.id).stock == 1
            raise ValueError('boom')

    assert repo.get(p.id).stock == 5


def test_list_filters_active(store):
    repo = ProductRepository(store)
    a = repo.add(_product('A'))
    b = repo.add(_product('B', active=False))
    assert [p.id for p in repo.list()] == [a.id]
    assert [p.id for p in repo.list(active=False)] == [b.id]
    assert {p.id for p in repo.list(active=None)} == {a.id, b.id}


def test_active_conflicts_ignore_inactive_and_self(store):
    repo = ProductRepository(store)
    a = repo.add(_product('Whopper'))
    repo.add(_product('Cheeseburger', active=False))

    assert repo.find_active_conflicts({'name': ' whopper '}) == ['name']
    assert repo.find_active_conflicts({'name': 'Whopper'}, exclude_id=a.id) == []
    assert repo.find_active_conflicts({'name': 'Cheeseburger'}) == []


def test_find_by_ids_keeps_order_and_skips_missing(store):
    repo = ProductRepository(store)
    a = repo.add(_product('A'))
    b = repo.add(_product('B'))
    found = repo.find_by_ids([b.id, new_id(), a.id, b.id])
    assert [p.id for p in found] == [b.id, a.id]


def test_decrement_stock_is_all_or_nothing(store):
    repo = ProductRepository(store)
    a = repo.add(_product('A', stock=5))
    b = repo.add(_product('B', stock=1))

    with pytest.raises(StockConflictError) as exc:
        repo.decrement_stock({a.id: 2, b.id: 3})
    assert exc.value.retryable
    assert exc.value.product_id == b.id
    assert repo.get(a.id).stock == 5
    assert repo.get(b.id).stock == 1

    remaining = repo.decrement_stock({a.id: 2, b.id: 1})
    assert remaining == {a.id: 3, b.id: 0}


def test_decrement_stock_rejects_inactive(store):
    repo = ProductRepository(store)
    a = repo.add(_product('A', stock=5, active=False))
    with pytest.raises(StockConflictError):
        repo.decrement_stock({a.id: 1})


def test_audit_log_newest_first_and_capped(store):
    repo = AuditRepository(store)
    repo.MAX_LOGS = 3
    for i in range(5):
        repo.log('PEDIDO', 'caja1', f'evento {i}', related_id=str(i))
    logs = repo.search()
    assert [log.message for log in logs] == ['evento 4', 'evento 3', 'evento 2']
    assert repo.search('STOCK') == []
    assert len(repo.search(limit=1)) == 1


def test_repositories_satisfy_service_contracts(container):
    assert isinstance(container.product_repo, IStockRepository)
    for repo in (container.combo_repo, container.customer_repo, container.employee_repo, container.order_repo):
        assert isinstance(repo, IEntityRepository)
    assert not isinstance(container.customer_repo, IStockRepository)
    assert isinstance(container.audit_repo, IAuditRepository)
    assert isinstance(container.product_service, IProductLookup)

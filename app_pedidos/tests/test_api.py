import pytest

from app_pedidos.validation import new_id

from conftest import RUT_A, RUT_C


def _create_product(client, name='Whopper', price=1000, stock=10):
    r = client.post('/api/productos', json={
        'name': name, 'price': price, 'stock': stock, 'category': 'Hamburguesas',
    })
    assert r.status_code == 201
    return r.get_json()


def _create_customer(client):
    r = client.post('/api/clientes', json={
        'name': 'Ana',
        'surname': 'Pérez',
        'nationalId': RUT_A,
        'email': 'ana@example.com',
        'phone': '912345678',
        'address': 'Av. Siempre Viva 742',
    })
    assert r.status_code == 201
    return r.get_json()


def test_health(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.get_json() == {'status': 'ok'}


def test_cors_on_api_routes(client):
    r = client.get('/api/productos', headers={'Origin': 'http://localhost:3000'})
    assert r.status_code == 200
    assert r.headers['Access-Control-Allow-Origin'] in ('*', 'http://localhost:3000')

    r = client.options('/api/pedidos', headers={
        'Origin': 'http://localhost:3000',
        'Access-Control-Request-Method': 'POST',
        'Access-Control-Request-Headers': 'X-User',
    })
    assert r.status_code == 200
    assert 'POST' in r.headers['Access-Control-Allow-Methods']
    assert 'x-user' in r.headers['Access-Control-Allow-Headers'].lower()


def test_product_crud(client):
    p = _create_product(client)
    assert len(p['id']) == 24
    assert p['active'] is True

    r = client.get(f"/api/productos/{p['id']}")
    assert r.status_code == 200
    assert r.get_json()['name'] == 'Whopper'

    r = client.put(f"/api/productos/{p['id']}", json={'stock': 25})
    assert r.status_code == 200
    assert r.get_json()['stock'] == 25

    r = client.get('/api/productos')
    assert [x['id'] for x in r.get_json()] == [p['id']]


def test_soft_delete_status_codes(client):
    p = _create_product(client)
    assert client.delete(f"/api/productos/{p['id']}").status_code == 200
    assert client.delete(f"/api/productos/{p['id']}").status_code == 204
    r = client.delete(f"/api/productos/{new_id()}")
    assert r.status_code == 404
    assert r.get_json()['kind'] == 'NOT_FOUND'

    assert client.get('/api/productos').get_json() == []
    assert len(client.get('/api/productos?all=1').get_json()) == 1


def test_toggle_active(client):
    p = _create_product(client)
    r = client.put(f"/api/productos/{p['id']}/toggle-active", json={'active': False})
    assert r.status_code == 200
    assert r.get_json()['active'] is False
    r = client.put(f"/api/productos/{p['id']}/toggle-active", json={'active': 'no'})
    assert r.status_code == 400
    assert r.get_json()['field'] == 'active'


def test_error_shapes(client):
    r = client.post('/api/productos', json={'name': '', 'price': 10, 'stock': 1, 'category': 'X'})
    assert r.status_code == 400
    body = r.get_json()
    assert body['kind'] == 'FORMAT'
    assert body['field'] == 'name'
    assert body['error']

    r = client.post('/api/productos', data='no es json', content_type='application/json')
    assert r.status_code == 400
    assert r.get_json()['kind'] == 'FORMAT'

    r = client.get('/api/productos/xyz')
    assert r.status_code == 400

    r = client.get(f'/api/productos/{new_id()}')
    assert r.status_code == 404

    r = client.get('/api/no-existe')
    assert r.status_code == 404
    assert r.get_json()['kind'] == 'HTTP'


def test_duplicate_is_conflict(client):
    _create_product(client)
    r = client.post('/api/productos', json={
        'name': 'whopper', 'price': 1000, 'stock': 1, 'category': 'Hamburguesas',
    })
    assert r.status_code == 409
    body = r.get_json()
    assert body['kind'] == 'CONFLICT'
    assert body['field'] == 'name'


def test_combo_endpoint_computes_price(client):
    a = _create_product(client, 'Whopper', 1000)
    b = _create_product(client, 'Papas', 500)
    r = client.post('/api/combos', json={'name': 'Combo', 'productIds': [a['id'], b['id']], 'price': 5})
    assert r.status_code == 201
    assert r.get_json()['price'] == 1350.0


def test_employee_endpoint(client):
    r = client.post('/api/empleados', json={
        'name': 'Luis', 'surname': 'Soto', 'nationalId': RUT_C, 'role': 'COOK',
    })
    assert r.status_code == 201
    assert r.get_json()['role'] == 'COOK'
    r = client.post('/api/empleados', json={
        'name': 'Luis', 'surname': 'Soto', 'nationalId': '12.345.678-9', 'role': 'COOK',
    })
    assert r.status_code == 400
    assert r.get_json()['field'] == 'nationalId'


def test_order_flow(client):
    a = _create_product(client, 'Whopper', 1000, stock=10)
    b = _create_product(client, 'Papas', 500, stock=3)
    c = _create_customer(client)

    r = client.post('/api/pedidos', json={
        'customerId': c['id'],
        'lines': [{'productId': a['id'], 'quantity': 2}, {'productId': b['id'], 'quantity': 1}],
        'paymentMethod': 'CREDIT',
        'bank': 'Santander',
        'deliveryAddress': 'Av. Siempre Viva 742',
    }, headers={'X-User': 'caja1'})
    assert r.status_code == 201
    order = r.get_json()
    assert order['subtotal'] == 2500
    assert order['discount'] == 250
    assert order['total'] == 2250
    assert order['status'] == 'PENDING'
    assert order['lines'][0]['productName'] == 'Whopper'

    assert client.get(f"/api/productos/{a['id']}").get_json()['stock'] == 8

    r = client.put(f"/api/pedidos/{order['id']}/estado", json={'status': 'en preparacion'})
    assert r.status_code == 200
    assert r.get_json()['status'] == 'PREPARING'

    r = client.put(f"/api/pedidos/{order['id']}/estado", json={'status': 'PENDING'})
    assert r.status_code == 400
    assert r.get_json()['kind'] == 'BUSINESS_RULE'

    r = client.put(f"/api/pedidos/{order['id']}/estado", json={'status': 'volando'})
    assert r.status_code == 400
    assert r.get_json()['kind'] == 'FORMAT'

    r = client.put(f"/api/pedidos/{new_id()}/estado", json={'status': 'READY'})
    assert r.status_code == 404

    r = client.get(f"/api/clientes/{c['id']}/pedidos")
    assert [o['id'] for o in r.get_json()] == [order['id']]

    assert client.delete(f"/api/pedidos/{order['id']}").status_code == 200
    assert client.delete(f"/api/pedidos/{order['id']}").status_code == 204
    assert client.delete(f"/api/pedidos/{new_id()}").status_code == 404
    assert client.get('/api/pedidos').get_json() == []
    assert len(client.get('/api/pedidos?all=1').get_json()) == 1


def test_order_rejections(client):
    a = _create_product(client, 'Papas', 500, stock=3)
    c = _create_customer(client)
    base = {
        'customerId': c['id'],
        'paymentMethod': 'CASH',
        'deliveryAddress': 'Av. Siempre Viva 742',
    }

    r = client.post('/api/pedidos', json=dict(base, lines=[{'productId': a['id'], 'quantity': 5}]))
    assert r.status_code == 400
    body = r.get_json()
    assert body['kind'] == 'BUSINESS_RULE'
    assert body['details']['stock'] == 3
    assert body['details']['requested'] == 5

    missing = new_id()
    r = client.post('/api/pedidos', json=dict(base, lines=[{'productId': missing, 'quantity': 1}]))
    assert r.status_code == 404
    assert missing in r.get_json()['error']

    r = client.post('/api/pedidos', json=dict(base, lines=[]))
    assert r.status_code == 400

    assert client.get(f"/api/productos/{a['id']}").get_json()['stock'] == 3


@pytest.mark.parametrize('query,expected', [('', 200), ('?type=pedido&limit=5', 200), ('?type=OTRO', 400), ('?limit=abc', 400)])
def test_audit_endpoint(client, query, expected):
    _create_product(client)
    r = client.get(f'/api/audit{query}')
    assert r.status_code == expected


def test_audit_records_user_header(client):
    client.post('/api/productos', json={
        'name': 'Whopper', 'price': 1000, 'stock': 10, 'category': 'Hamburguesas',
    }, headers={'X-User': 'admin1'})
    logs = client.get('/api/audit?type=PRODUCTO').get_json()
    assert logs[0]['user'] == 'admin1'
    assert logs[0]['type'] == 'PRODUCTO'


@pytest.mark.parametrize('literal', ['NaN', 'Infinity', '-Infinity'])
def test_non_finite_price_is_rejected(client, literal):
    body = '{"name": "N", "price": %s, "stock": 5, "category": "X"}' % literal
    r = client.post('/api/productos', data=body, content_type='application/json')
    assert r.status_code == 400
    assert r.get_json()['field'] == 'price'
    assert client.get('/api/productos').get_json() == []

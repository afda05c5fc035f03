import json
import os

import pytest

from app_pedidos.app_container import AppContainer
from app_pedidos.blueprints.common import EXTENSION_KEY
from app_pedidos.config import Settings
from app_pedidos.main import create_app
from app_pedidos.repositories import JsonStore


# RUTs con dígito verificador correcto
RUT_A = '12.345.678-5'
RUT_B = '11.111.111-1'
RUT_C = '22.222.222-2'
RUT_D = '7.654.321-6'


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / 'data')


@pytest.fixture
def store(data_dir):
    s = JsonStore(data_dir).open()
    yield s
    s.close()


@pytest.fixture
def container(data_dir):
    c = AppContainer(data_dir).open()
    yield c
    c.close()


@pytest.fixture
def app(tmp_path, data_dir):
    settings = Settings(
        data_dir=data_dir,
        logs_dir=str(tmp_path / 'logs'),
        production=False,
        profiling=False,
    )
    application = create_app(settings)
    application.config['TESTING'] = True
    yield application
    application.extensions[EXTENSION_KEY].close()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_product(container):
    def _make(name='Whopper', price=1000, stock=10, category='Hamburguesas', **extra):
        data = {'name': name, 'price': price, 'stock': stock, 'category': category}
        data.update(extra)
        return container.product_service.create(data)
    return _make


@pytest.fixture
def make_customer(container):
    def _make(national_id=RUT_A, email='ana@example.com', **extra):
        data = {
            'name': 'Ana',
            'surname': 'Pérez',
            'nationalId': national_id,
            'email': email,
            'phone': '912345678',
            'address': 'Av. Siempre Viva 742',
        }
        data.update(extra)
        return container.customer_service.create(data)
    return _make


def read_json_file(data_dir, name):
    path = os.path.join(data_dir, name)
    if not os.path.exists(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)

import os

import pytest

from app_pedidos import main, performance_logger
from app_pedidos.config import Settings
from app_pedidos.main import create_app
from app_pedidos.blueprints.common import EXTENSION_KEY


def test_settings_from_env():
    s = Settings.from_env({
        'PEDIDOS_DATA_DIR': '/tmp/pedidos-data',
        'PEDIDOS_PRODUCTION': '0',
        'PEDIDOS_PROFILING': 'false',
        'PEDIDOS_LOG_LEVEL': 'debug',
        'FLASK_PORT': '8080',
        'PEDIDOS_CORS_ORIGINS': 'https://admin.example.com, http://localhost:3000',
    })
    assert s.data_dir == '/tmp/pedidos-data'
    assert s.production is False
    assert s.profiling is False
    assert s.log_level == 'DEBUG'
    assert s.port == 8080
    assert s.cors_origin_list == ['https://admin.example.com', 'http://localhost:3000']
    assert s.secret_key is None
    assert s.effective_secret_key


def test_settings_defaults():
    s = Settings.from_env({})
    assert s.production is True
    assert s.profiling is True
    assert s.data_dir.endswith('data')
    assert s.cors_origin_list == ['*']


@pytest.fixture
def profiled_app(tmp_path):
    logs_dir = str(tmp_path / 'logs')
    app = create_app(Settings(
        data_dir=str(tmp_path / 'data'),
        logs_dir=logs_dir,
        production=False,
        profiling=True,
    ))
    performance_logger.reset_stats()
    yield app, logs_dir
    app.extensions[EXTENSION_KEY].close()
    performance_logger.configure(enabled=False)
    performance_logger.reset_stats()


def test_requests_are_timed(profiled_app):
    app, logs_dir = profiled_app
    with app.test_client() as client:
        assert client.get('/api/productos', headers={'X-User': 'caja1'}).status_code == 200

    with open(os.path.join(logs_dir, 'performance.log'), 'r', encoding='utf-8') as f:
        text = f.read()
    assert 'Listar productos' in text
    assert 'caja1' in text


def test_profile_function_collects_stats(profiled_app):
    @performance_logger.profile_function(name='prueba')
    def work(x):
        return x * 2

    assert work(2) == 4
    assert work(3) == 6
    stats = performance_logger.get_function_stats()
    assert stats['prueba']['calls'] == 2


def test_profiling_disabled_is_passthrough():
    performance_logger.configure(enabled=False)

    @performance_logger.profile_function
    def work():
        return 'ok'

    assert work() == 'ok'
    assert 'work' not in performance_logger.get_function_stats()


def test_stats_report_and_slow_routes(profiled_app):
    _, logs_dir = profiled_app

    @performance_logger.profile_function(name='Crear pedido')
    def work():
        return 1

    work()
    performance_logger.write_function_stats_report()
    performance_logger.log_slow_route('POST', '/api/pedidos', '/api/pedidos', 950, 'caja2', 'CRITICAL')

    with open(os.path.join(logs_dir, 'slow_functions.log'), 'r', encoding='utf-8') as f:
        report = f.read()
    assert 'REPORTE' in report
    assert 'Crear pedido: 1 llamadas' in report

    with open(os.path.join(logs_dir, 'slow_routes.log'), 'r', encoding='utf-8') as f:
        line = f.read().strip()
    assert '| CRITICAL | Crear pedido | caja2 | POST /api/pedidos | 950 ms' in line
    assert 'umbral 700 ms' in line


def test_shutdown_closes_every_open_store(tmp_path):
    apps = [
        create_app(Settings(
            data_dir=str(tmp_path / f'data{i}'),
            logs_dir=str(tmp_path / 'logs'),
            production=False,
            profiling=False,
        ))
        for i in range(2)
    ]
    containers = [a.extensions[EXTENSION_KEY] for a in apps]
    assert all(c in main._OPEN_CONTAINERS for c in containers)

    main._shutdown()

    assert not any(c.store.is_open for c in containers)

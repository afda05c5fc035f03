import pytest

from app_pedidos.errors import FormatError
from app_pedidos.models import EmployeeRole, OrderStatus, PaymentMethod
from app_pedidos.validation import (
    is_valid_id,
    is_valid_rut,
    new_id,
    require_non_empty,
    require_non_empty_list,
    require_non_negative_int,
    require_positive_int,
    require_positive_number,
    require_price,
    require_valid_email,
    require_valid_id,
    require_valid_phone,
    require_valid_rut,
)


def test_new_id_is_valid():
    ident = new_id()
    assert len(ident) == 24
    assert is_valid_id(ident)
    assert new_id() != ident


@pytest.mark.parametrize('value', [None, '', '   ', 'abc', 'z' * 24, 123])
def test_require_valid_id_rejects(value):
    with pytest.raises(FormatError) as exc:
        require_valid_id(value, 'customerId')
    assert exc.value.field == 'customerId'


def test_require_non_empty_strips():
    assert require_non_empty('  Whopper ', 'name') == 'Whopper'
    with pytest.raises(FormatError):
        require_non_empty('   ', 'name')
    with pytest.raises(FormatError):
        require_non_empty(None, 'name')


def test_numbers():
    assert require_positive_number(1000, 'price') == 1000.0
    assert require_non_negative_int(0, 'stock') == 0
    assert require_positive_int(3, 'quantity') == 3
    for bad in (0, -1, '10', True):
        with pytest.raises(FormatError):
            require_positive_number(bad, 'price')
    with pytest.raises(FormatError):
        require_non_negative_int(-1, 'stock')
    with pytest.raises(FormatError):
        require_non_negative_int(2.5, 'stock')
    with pytest.raises(FormatError):
        require_positive_int(0, 'quantity')


@pytest.mark.parametrize('bad', [float('nan'), float('inf'), float('-inf'), 10 ** 400])
def test_non_finite_numbers_rejected(bad):
    with pytest.raises(FormatError) as exc:
        require_positive_number(bad, 'price')
    assert exc.value.field == 'price'


def test_price_rounds_before_positive_check():
    assert require_price(1234.5678, 'price') == 1234.57
    assert require_price(0.005001, 'price') == 0.01
    with pytest.raises(FormatError):
        require_price(0.001, 'price')
    with pytest.raises(FormatError):
        require_price(float('nan'), 'price')


@pytest.mark.parametrize('rut', ['12.345.678-5', '11.111.111-1', '22.222.222-2', '7.654.321-6'])
def test_valid_ruts(rut):
    assert is_valid_rut(rut)
    assert require_valid_rut(rut) == rut


def test_invalid_rut_check_digit():
    assert not is_valid_rut('12.345.678-9')
    with pytest.raises(FormatError) as exc:
        require_valid_rut('12.345.678-9')
    assert 'Módulo 11' in exc.value.message


def test_invalid_rut_format():
    with pytest.raises(FormatError) as exc:
        require_valid_rut('12345678-5')
    assert exc.value.field == 'nationalId'


def test_email_and_phone():
    assert require_valid_email('ana@example.com') == 'ana@example.com'
    with pytest.raises(FormatError):
        require_valid_email('ana@example')
    assert require_valid_phone('912345678') == '912345678'
    with pytest.raises(FormatError):
        require_valid_phone('12345')


def test_non_empty_list():
    assert require_non_empty_list([1], 'productIds') == [1]
    with pytest.raises(FormatError):
        require_non_empty_list([], 'productIds')
    with pytest.raises(FormatError):
        require_non_empty_list('abc', 'productIds')


def test_enum_parsing_is_lenient():
    assert PaymentMethod.parse(' credit ') == PaymentMethod.CREDIT
    assert PaymentMethod.parse('efectivo') == PaymentMethod.CASH
    assert OrderStatus.parse('en preparacion') == OrderStatus.PREPARING
    assert OrderStatus.parse('ready') == OrderStatus.READY
    assert EmployeeRole.parse('cook') == EmployeeRole.COOK
    assert EmployeeRole.parse('Cajero') == EmployeeRole.CASHIER
    assert EmployeeRole.parse('repartidor') == EmployeeRole.DELIVERY
    assert EmployeeRole.parse('ADMINISTRATIVO') == EmployeeRole.ADMINISTRATIVE


def test_invalid_status_lists_valid_values():
    with pytest.raises(FormatError) as exc:
        OrderStatus.parse('volando')
    assert 'volando' in exc.value.message
    assert 'PENDING' in exc.value.message and 'CANCELLED' in exc.value.message


def test_invalid_payment_method():
    with pytest.raises(FormatError) as exc:
        PaymentMethod.parse('BITCOIN')
    assert exc.value.field == 'paymentMethod'


def test_status_transitions():
    assert OrderStatus.PENDING.can_move_to(OrderStatus.READY)
    assert OrderStatus.READY.can_move_to(OrderStatus.CANCELLED)
    assert not OrderStatus.READY.can_move_to(OrderStatus.PENDING)
    assert not OrderStatus.DELIVERED.can_move_to(OrderStatus.CANCELLED)
    assert not OrderStatus.CANCELLED.can_move_to(OrderStatus.PENDING)

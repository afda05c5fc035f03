import pytest

from app_pedidos.errors import ConflictError, FormatError, NotFoundError
from app_pedidos.models import EmployeeRole, SoftDeleteResult
from app_pedidos.validation import new_id

from conftest import RUT_A, RUT_B, RUT_C


def _employee_data(**extra):
    data = {
        'name': 'Luis',
        'surname': 'Soto',
        'nationalId': RUT_C,
        'role': 'cashier',
    }
    data.update(extra)
    return data


# =========================================================================
# Clientes
# =========================================================================

def test_create_customer(make_customer):
    c = make_customer()
    assert c.national_id == RUT_A
    assert c.email == 'ana@example.com'
    assert c.active


@pytest.mark.parametrize('field,value', [
    ('nationalId', '12.345.678-9'),
    ('email', 'no-es-correo'),
    ('phone', '12345'),
    ('address', '   '),
    ('surname', None),
])
def test_customer_field_validation(make_customer, field, value):
    kwargs = {'national_id': value} if field == 'nationalId' else {field: value}
    with pytest.raises(FormatError) as exc:
        make_customer(**kwargs)
    assert exc.value.field == field


def test_customer_conflict_names_every_field(make_customer):
    make_customer()
    with pytest.raises(ConflictError) as exc:
        make_customer()
    assert set(exc.value.fields) == {'nationalId', 'email'}

    with pytest.raises(ConflictError) as exc:
        make_customer(national_id=RUT_B)
    assert exc.value.fields == ['email']


def test_inactive_customer_does_not_block_new_one(container, make_customer):
    old = make_customer()
    assert container.customer_service.soft_delete(old.id) == SoftDeleteResult.DEACTIVATED
    new = make_customer()
    assert new.id != old.id
    assert {c.id for c in container.customer_service.list(active=None)} == {old.id, new.id}
    assert [c.id for c in container.customer_service.list()] == [new.id]


def test_update_customer(container, make_customer):
    c = make_customer()
    other = make_customer(national_id=RUT_B, email='otro@example.com')

    updated = container.customer_service.update(c.id, {'phone': '987654321', 'address': 'Calle 2'})
    assert updated.phone == '987654321'
    assert updated.national_id == RUT_A

    with pytest.raises(ConflictError) as exc:
        container.customer_service.update(c.id, {'email': 'otro@example.com'})
    assert exc.value.fields == ['email']

    with pytest.raises(NotFoundError):
        container.customer_service.update(new_id(), {'phone': '987654321'})

    assert container.customer_service.get(other.id).email == 'otro@example.com'


def test_customer_soft_delete_idempotent(container, make_customer):
    c = make_customer()
    svc = container.customer_service
    assert svc.soft_delete(c.id) == SoftDeleteResult.DEACTIVATED
    assert svc.soft_delete(c.id) == SoftDeleteResult.NO_CHANGE
    assert svc.soft_delete(new_id()) == SoftDeleteResult.NOT_FOUND
    with pytest.raises(FormatError):
        svc.soft_delete('123')


# =========================================================================
# Empleados
# =========================================================================

def test_create_employee_minimal(container):
    e = container.employee_service.create(_employee_data())
    assert e.role == EmployeeRole.CASHIER
    assert e.email is None and e.phone is None and e.address is None
    assert e.to_dict()['role'] == 'CASHIER'


def test_employee_optional_fields_validated(container):
    with pytest.raises(FormatError) as exc:
        container.employee_service.create(_employee_data(phone='123'))
    assert exc.value.field == 'phone'

    with pytest.raises(FormatError) as exc:
        container.employee_service.create(_employee_data(role='CHEF'))
    assert exc.value.field == 'role'

    e = container.employee_service.create(_employee_data(email='  ', phone='912345678'))
    assert e.email is None
    assert e.phone == '912345678'


def test_employee_email_unique_when_present(container):
    svc = container.employee_service
    svc.create(_employee_data(email='luis@example.com'))
    with pytest.raises(ConflictError) as exc:
        svc.create(_employee_data(nationalId=RUT_A, email='LUIS@example.com'))
    assert exc.value.fields == ['email']


def test_employee_email_optional_does_not_conflict(container):
    svc = container.employee_service
    svc.create(_employee_data())
    # Otro empleado sin correo y con RUT distinto: sin conflicto
    other = svc.create(_employee_data(nationalId=RUT_A))
    assert other.email is None

    with pytest.raises(ConflictError) as exc:
        svc.create(_employee_data(nationalId=RUT_C))
    assert exc.value.fields == ['nationalId']


def test_employee_update_role_and_toggle(container):
    svc = container.employee_service
    e = svc.create(_employee_data())
    updated = svc.update(e.id, {'role': 'delivery'})
    assert updated.role == EmployeeRole.DELIVERY

    assert svc.set_active(e.id, False).active is False
    assert svc.soft_delete(e.id) == SoftDeleteResult.NO_CHANGE
    assert svc.set_active(e.id, True).active is True

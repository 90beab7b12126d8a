import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from practice.models import AuditEvent, InventoryItem, User

pytestmark = pytest.mark.django_db


def login(client, email, password, **extra):
    return client.post(reverse('login_view'), {'email': email, 'password': password, **extra}, format='json')


@pytest.fixture
def nurse():
    return User.objects.create_user(username='n@clinic.test', email='n@clinic.test', password='P@ssw0rd1',
                                    name='Nora', role='nurse')


def test_protected_endpoints_require_a_token():
    client = APIClient()
    for path in ('/api/appointments', '/api/inventory', '/api/medical-records', '/api/auth/me'):
        r = client.get(path)
        assert r.status_code == 401, path
        assert r.data['ok'] is False
        assert r.data['code'] == 'not_authenticated'


def test_garbage_token_is_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    r = client.get('/api/appointments')
    assert r.status_code == 401


def test_wrong_password_is_401(nurse):
    r = login(APIClient(), 'n@clinic.test', 'wrong')
    assert r.status_code == 401
    assert r.data == {'ok': False, 'error': 'Invalid email or password', 'code': 'invalid_credentials'}
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_unknown_email_is_401():
    r = login(APIClient(), 'nobody@clinic.test', 'whatever')
    assert r.status_code == 401


def test_login_issues_bearer_token_with_claims(nurse):
    client = APIClient()
    r = login(client, 'N@clinic.test', 'P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['user'] == {'id': nurse.id, 'email': 'n@clinic.test', 'name': 'Nora', 'role': 'nurse'}
    assert r.data['refresh']

    claims = AccessToken(r.data['token'])
    assert claims['email'] == 'n@clinic.test'
    assert claims['role'] == 'nurse'
    assert claims['name'] == 'Nora'

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    me = client.get(reverse('me_view'))
    assert me.status_code == 200
    assert me.data['user']['role'] == 'nurse'

    # role comes from the account, so the token grants nurse rights
    created = client.post('/api/inventory', {'name': 'Saline', 'quantity': 3, 'price': '1.00'}, format='json')
    assert created.status_code == 201


def test_no_role_escalation_through_login():
    client = APIClient()
    u = User.objects.create_user(username='p@clinic.test', email='p@clinic.test', password='P@ssw0rd1',
                                 role='patient')
    r = login(client, 'p@clinic.test', 'P@ssw0rd1', role='admin')
    assert r.status_code == 200
    assert r.data['user']['role'] == 'patient'
    assert AccessToken(r.data['token'])['role'] == 'patient'
    u.refresh_from_db()
    assert u.role == 'patient'

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    item = InventoryItem.objects.create(name='X', quantity=1, price='1.00')
    assert client.delete(f'/api/inventory/{item.id}').status_code == 403


def test_refresh_and_logout(nurse):
    client = APIClient()
    r = login(client, 'n@clinic.test', 'P@ssw0rd1')
    refresh = r.data['refresh']

    renewed = client.post(reverse('refresh_view'), {'refresh': refresh}, format='json')
    assert renewed.status_code == 200
    assert renewed.data['token']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    out = client.post(reverse('logout_view'), {'refresh': refresh}, format='json')
    assert out.status_code == 200
    assert out.data == {'ok': True, 'blacklisted': 1}

    again = APIClient().post(reverse('refresh_view'), {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_logout_rejects_invalid_refresh(nurse):
    client = APIClient()
    client.force_authenticate(user=nurse)
    r = client.post(reverse('logout_view'), {'refresh': 'nope'}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert isinstance(r.data['error'], str)
    assert r.data['code'] == 'token_not_valid'


def test_unhandled_errors_are_generic_500(monkeypatch, nurse):
    from practice.views import appointments as views

    def boom(*args, **kwargs):
        raise RuntimeError('database exploded: secret detail')

    monkeypatch.setattr(views, 'ensure_slot_free', boom)
    client = APIClient(raise_request_exception=False)
    client.force_authenticate(user=nurse)
    r = client.post('/api/appointments', {
        'date': '2024-03-04', 'time': '10:00', 'clientName': 'A', 'service': 'x',
    }, format='json')
    assert r.status_code == 500
    assert r.data == {'ok': False, 'error': 'Internal server error', 'code': 'server_error'}

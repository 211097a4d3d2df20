import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from care.models import AuditEvent, User

pytestmark = pytest.mark.django_db


def register_body(**overrides):
    body = {
        'sex': 'Frau',
        'username': 'erika',
        'firstname': 'Erika',
        'lastname': 'Musterfrau',
        'birthdate': '12.08.1964',
        'address': 'Hauptstraße 1, 10115 Berlin',
        'email': 'erika@example.de',
        'password': 'Pflege#2024',
        'confirmPassword': 'Pflege#2024',
    }
    body.update(overrides)
    return body


def test_login_returns_jwt_and_token(staff_user):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['user']['name'] == 'Anna Pflege'
    assert AuditEvent.objects.filter(action='login', detail__result='ok').count() == 1


def test_login_wrong_password_is_401(staff_user):
    r = APIClient().post(reverse('login_view'), {'username': 'pflege1', 'password': 'falsch'}, format='json')
    assert r.status_code == 401
    assert r.data == {'success': False, 'message': 'Ungültige Anmeldedaten'}


def test_hardcoded_admin_is_not_accepted():
    r = APIClient().post(reverse('login_view'), {'username': 'admin', 'password': '1234'}, format='json')
    assert r.status_code == 401


def test_login_empty_fields():
    r = APIClient().post(reverse('login_view'), {'username': '', 'password': ''}, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False


def test_both_token_kinds_authenticate(staff_user):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json')
    token, access = r.data['token'], r.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
    assert client.get(reverse('appointments')).status_code == 200
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
    assert client.get(reverse('appointments')).status_code == 200


def test_register_creates_user_with_hashed_password():
    r = APIClient().post(reverse('register_view'), register_body(), format='json')
    assert r.status_code == 201
    assert r.data['success'] is True
    user = User.objects.get(username='erika')
    assert user.password != 'Pflege#2024'
    assert user.check_password('Pflege#2024')
    assert user.birth_date.isoformat() == '1964-08-12'
    assert user.sex == 'Frau'
    r = APIClient().post(reverse('login_view'), {'username': 'erika', 'password': 'Pflege#2024'}, format='json')
    assert r.status_code == 200


@pytest.mark.parametrize('overrides, field', [
    ({'password': 'kurz#1', 'confirmPassword': 'kurz#1'}, 'password'),
    ({'password': 'OhneZahl!!', 'confirmPassword': 'OhneZahl!!'}, 'password'),
    ({'password': 'OhneSonder1', 'confirmPassword': 'OhneSonder1'}, 'password'),
    ({'confirmPassword': 'Anders#2024'}, 'confirmPassword'),
    ({'birthdate': '31.02.1964'}, 'birthdate'),
    ({'birthdate': '1964-08-12'}, 'birthdate'),
    ({'email': 'keine-mail'}, 'email'),
])
def test_register_validation(overrides, field):
    r = APIClient().post(reverse('register_view'), register_body(**overrides), format='json')
    assert r.status_code == 400
    assert r.data['success'] is False
    assert field in r.data['errors']
    assert r.data['message']
    assert not User.objects.filter(username='erika').exists()


def test_register_duplicate_username_and_email(staff_user):
    r = APIClient().post(reverse('register_view'), register_body(username='PFLEGE1'), format='json')
    assert r.status_code == 400
    assert 'username' in r.data['errors']
    staff_user.email = 'erika@example.de'
    staff_user.save()
    r = APIClient().post(reverse('register_view'), register_body(), format='json')
    assert 'email' in r.data['errors']


def test_refresh_and_logout(staff_user):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json')
    refresh = r.data['jwt_refresh']

    r2 = client.post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert r2.status_code == 200
    assert r2.data['jwt_access']
    new_refresh = r2.data.get('jwt_refresh', refresh)

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r2.data['jwt_access']}")
    r3 = client.post(reverse('jwt_logout'), {'refresh': new_refresh}, format='json')
    assert r3.status_code == 200
    assert r3.data['blacklisted'] == 1

    r4 = APIClient().post(reverse('jwt_refresh'), {'refresh': new_refresh}, format='json')
    assert r4.status_code == 401


def test_refresh_with_garbage_token():
    r = APIClient().post(reverse('jwt_refresh'), {'refresh': 'nope'}, format='json')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_expired_token_is_rejected_and_replaced_on_login(staff_user, settings):
    from datetime import timedelta
    from django.utils import timezone
    from rest_framework.authtoken.models import Token

    settings.AUTH_TOKEN_TTL_HOURS = 1
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json')
    old_key = r.data['token']
    Token.objects.filter(key=old_key).update(created=timezone.now() - timedelta(hours=2))

    client.credentials(HTTP_AUTHORIZATION=f'Token {old_key}')
    r = client.get(reverse('appointments'))
    assert r.status_code == 401
    assert not Token.objects.filter(key=old_key).exists()

    r = APIClient().post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json')
    assert r.data['token'] != old_key


def test_forwarded_ip_is_audited(staff_user):
    APIClient().post(reverse('login_view'), {'username': 'pflege1', 'password': 'Sicher!123'}, format='json',
                     HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1')
    event = AuditEvent.objects.get(action='login')
    assert event.detail['ip'] == '203.0.113.7'

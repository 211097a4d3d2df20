from datetime import timedelta

import pytest
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from care.models import Category, ContactMessage, NewsItem, Relative

pytestmark = pytest.mark.django_db


def test_seed_categories_is_idempotent():
    call_command('seed_categories')
    call_command('seed_categories')
    labels = set(Category.objects.values_list('label', flat=True))
    assert labels == {'Arztbesuch', 'MDK-Besuch', 'Erstgespräch', 'Default Category'}


def test_categories_are_cached(auth_client):
    call_command('seed_categories')
    r = auth_client.get(reverse('categories'))
    assert r.status_code == 200
    assert [c['label'] for c in r.data['data']][0] == 'Arztbesuch'
    Category.objects.create(id='neu', label='Neu')
    r = auth_client.get(reverse('categories'))
    assert 'Neu' not in [c['label'] for c in r.data['data']]


def test_relatives(auth_client):
    Relative.objects.create(firstname='Eva', lastname='Mustermann', notes='Tochter')
    r = auth_client.get(reverse('relatives'))
    assert r.status_code == 200
    assert r.data['data'][0]['notes'] == 'Tochter'


def test_contact_form_is_public():
    r = APIClient().post(reverse('contact'), {
        'firstname': 'Paul', 'lastname': 'Panzer', 'email': 'paul@example.de',
        'phone': '030 1234567', 'message': '<script>x</script>Rückruf bitte',
    }, format='json')
    assert r.status_code == 201
    msg = ContactMessage.objects.get()
    assert '<script>' not in msg.message
    assert msg.message.endswith('Rückruf bitte')


def test_contact_requires_email():
    r = APIClient().post(reverse('contact'), {'firstname': 'P', 'lastname': 'P', 'message': 'Hallo'}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_contact_is_throttled(settings):
    rates = dict(settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'])
    limit = int(rates['contact'].split('/')[0])
    body = {'firstname': 'P', 'lastname': 'P', 'email': 'p@example.de', 'message': 'Hallo'}
    client = APIClient()
    codes = [client.post(reverse('contact'), body, format='json').status_code for _ in range(limit + 1)]
    assert codes[-1] == 429


def test_news_hides_future_items():
    now = timezone.now()
    NewsItem.objects.create(title='Alt', content='...', published_at=now - timedelta(days=2))
    NewsItem.objects.create(title='Neu', content='...', published_at=now - timedelta(hours=1))
    NewsItem.objects.create(title='Geplant', content='...', published_at=now + timedelta(days=1))
    r = APIClient().get(reverse('news'))
    assert r.status_code == 200
    assert [n['title'] for n in r.data['data']] == ['Neu', 'Alt']


def test_healthz():
    r = APIClient().get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json()['ok'] is True

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from care.models import Appointment, AuditEvent

pytestmark = pytest.mark.django_db

BERLIN = ZoneInfo('Europe/Berlin')


def make(id, start, end, **kw):
    return Appointment.objects.create(
        id=id,
        title=kw.pop('title', f'Termin {id}'),
        start=datetime(*start, tzinfo=BERLIN),
        end=datetime(*end, tzinfo=BERLIN),
        location=kw.pop('location', 'Berlin'),
        **kw,
    )


def test_requires_authentication():
    r = APIClient().get(reverse('appointments'))
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_create_appointment(auth_client, staff_user):
    r = auth_client.post(reverse('appointments'), {
        'date': '15.05.2024',
        'title': '<b>Hausbesuch</b>',
        'startTime': '09:00',
        'endTime': '10:00',
        'location': 'Berlin',
        'category': 'Arztbesuch',
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['title'] == 'Hausbesuch'
    assert len(data['id']) == 32
    saved = Appointment.objects.get(pk=data['id'])
    assert saved.start == datetime(2024, 5, 15, 9, 0, tzinfo=BERLIN)
    assert saved.category == 'Arztbesuch'
    event = AuditEvent.objects.get(action='appointment_create')
    assert event.object_id == data['id']
    assert event.user == staff_user


@pytest.mark.parametrize('overrides, code', [
    ({'title': ''}, 'missing_fields'),
    ({'date': '31.04.2025'}, 'invalid_date'),
    ({'startTime': '9:00'}, 'invalid_time'),
    ({'startTime': '11:00'}, 'invalid_range'),
])
def test_create_validation_errors(auth_client, overrides, code):
    body = {'date': '15.05.2024', 'title': 'T', 'startTime': '10:00', 'endTime': '11:00', 'location': 'X'}
    body.update(overrides)
    r = auth_client.post(reverse('appointments'), body, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert r.data['error']['code'] == code
    assert r.data['error']['fields']
    assert Appointment.objects.count() == 0


def test_week_list_sorted_and_windowed(auth_client):
    make('late', (2024, 5, 16, 14, 0), (2024, 5, 16, 15, 0))
    make('early', (2024, 5, 13, 0, 0), (2024, 5, 13, 1, 0))
    make('next', (2024, 5, 20, 9, 0), (2024, 5, 20, 10, 0))
    r = auth_client.get(reverse('appointments'), {'view': 'week', 'date': '15.05.2024'})
    assert r.status_code == 200
    assert [a['id'] for a in r.data['data']] == ['early', 'late']
    assert r.data['total'] == 2


def test_month_list_with_filters(auth_client):
    make('1', (2024, 5, 2, 9, 0), (2024, 5, 2, 10, 0), category='Arztbesuch', patient='Max Mustermann')
    make('2', (2024, 5, 8, 14, 0), (2024, 5, 8, 15, 0), category='Arztbesuch', patient='Erika Musterfrau')
    make('3', (2024, 6, 1, 9, 0), (2024, 6, 1, 10, 0), category='Arztbesuch', patient='Max Mustermann')
    r = auth_client.get(reverse('appointments'), {
        'view': 'month', 'date': '2024-05-20', 'category': 'Arztbesuch', 'client': 'max',
    })
    assert [a['id'] for a in r.data['data']] == ['1']
    r = auth_client.get(reverse('appointments'), {'view': 'all', 'timeRange': 'afternoon'})
    assert [a['id'] for a in r.data['data']] == ['2']


def test_bad_query_is_rejected(auth_client):
    r = auth_client.get(reverse('appointments'), {'view': 'year'})
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_week_grid(auth_client):
    make('5', (2024, 5, 15, 9, 0), (2024, 5, 15, 9, 30))
    make('8', (2024, 5, 15, 9, 0), (2024, 5, 15, 11, 0))
    r = auth_client.get(reverse('appointments_week'), {'date': '15.05.2024', 'columns': '1'})
    assert r.status_code == 200
    days = r.data['days']
    assert [d['date'] for d in days][:3] == ['2024-05-13', '2024-05-14', '2024-05-15']
    blocks = {b['appointment_id']: b for b in days[2]['blocks']}
    assert blocks['5']['top'] == 900
    assert blocks['5']['height'] == 50
    assert blocks['5']['condensed'] is True
    assert blocks['5']['showNotes'] is False
    assert blocks['5']['color_index'] == 1
    assert blocks['8']['height'] == 200
    assert {blocks['5']['column'], blocks['8']['column']} == {0, 1}
    assert r.data['from'].startswith('2024-05-13T00:00:00')


def test_day_grid_custom_slot_height(auth_client):
    make('1', (2024, 5, 15, 9, 0), (2024, 5, 15, 10, 0))
    r = auth_client.get(reverse('appointments_day'), {'date': '2024-05-15', 'slotHeight': 60, 'startHour': 8})
    assert r.status_code == 200
    block = r.data['blocks'][0]
    assert (block['top'], block['height']) == (60, 60)


@pytest.mark.parametrize('view, step, expected', [
    ('week', 1, '2024-02-07'),
    ('month', 1, '2024-02-29'),
    ('month', -1, '2023-12-31'),
    ('all', 1, '2024-01-31'),
])
def test_navigate(auth_client, view, step, expected):
    r = auth_client.get(reverse('appointments_navigate'), {'view': view, 'date': '31.01.2024', 'step': step})
    assert r.status_code == 200
    assert r.data['date'] == expected


def test_free_text_is_stored_as_typed_and_searchable(auth_client):
    r = auth_client.post(reverse('appointments'), {
        'date': '15.05.2024',
        'title': 'Arzt & Pflege',
        'startTime': '09:00',
        'endTime': '10:00',
        'location': 'Praxis <Nord>',
        'notes': 'Blutdruck < 140<script>alert(1)</script>',
    }, format='json')
    assert r.status_code == 201
    saved = Appointment.objects.get(pk=r.data['data']['id'])
    assert saved.title == 'Arzt & Pflege'
    assert saved.location == 'Praxis <Nord>'
    assert saved.notes == 'Blutdruck < 140alert(1)'

    r = auth_client.get(reverse('appointments'), {'view': 'all', 'q': 'arzt & pflege'})
    assert [a['title'] for a in r.data['data']] == ['Arzt & Pflege']
    r = auth_client.get(reverse('appointments'), {'view': 'all', 'q': '< 140'})
    assert r.data['total'] == 1


@pytest.mark.parametrize('overrides, code, fields', [
    ({'startTime': '09:000'}, 'invalid_time', ['startTime']),
    ({'endTime': '10:00:00'}, 'invalid_time', ['endTime']),
    ({'date': '15.05.20245'}, 'invalid_date', ['date']),
])
def test_overlong_values_are_classified_by_the_engine(auth_client, overrides, code, fields):
    body = {'date': '15.05.2024', 'title': 'T', 'startTime': '09:00', 'endTime': '10:00', 'location': 'X'}
    body.update(overrides)
    r = auth_client.post(reverse('appointments'), body, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == code
    assert r.data['error']['fields'] == fields

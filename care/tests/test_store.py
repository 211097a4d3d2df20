from datetime import date

import pytest

from care.exceptions import RecordNotFound, StoreError
from care.models import Appointment, Patient
from care.services.store import DjangoDataStore, InMemoryDataStore

pytestmark = pytest.mark.django_db


def test_insert_and_select_round_trip_as_wire_records():
    store = DjangoDataStore()
    store.insert('appointments', {
        'id': 'abc123',
        'title': 'Arzttermin',
        'start': '2024-05-15T09:00:00+02:00',
        'end': '2024-05-15T10:00:00+02:00',
        'location': 'Praxis',
        'notes': None,
        'patient': 'Max Mustermann',
        'category': 'Arztbesuch',
    })
    rows = store.select('appointments')
    assert len(rows) == 1
    row = rows[0]
    assert row['id'] == 'abc123'
    assert isinstance(row['start'], str)
    assert Appointment.objects.get(pk='abc123').start.isoformat().startswith('2024-05-15T07:00:00')


def test_insert_rejects_bad_rows():
    store = DjangoDataStore()
    with pytest.raises(StoreError):
        store.insert('appointments', {'id': 'x', 'title': 'T', 'start': 'kaputt', 'end': '2024-05-15T10:00:00+02:00'})
    with pytest.raises(StoreError):
        store.insert('appointments', {'id': 'x', 'colour': 'red'})
    with pytest.raises(StoreError):
        store.select('invoices')
    assert Appointment.objects.count() == 0


def test_insert_duplicate_id_is_a_store_error():
    store = DjangoDataStore()
    row = {'id': 'dup', 'title': 'T', 'start': '2024-05-15T09:00:00+02:00', 'end': '2024-05-15T10:00:00+02:00', 'location': 'X'}
    store.insert('appointments', row)
    with pytest.raises(StoreError):
        store.insert('appointments', row)


def test_update_patient_fields():
    p = Patient.objects.create(firstname='Max', lastname='Mustermann', birth_date=date(1950, 1, 1))
    row = DjangoDataStore().update('patients', str(p.id), {'notes': 'Allergie: Penicillin'})
    assert row['notes'] == 'Allergie: Penicillin'
    assert row['birth_date'] == '1950-01-01'
    p.refresh_from_db()
    assert p.notes == 'Allergie: Penicillin'


def test_update_missing_record():
    with pytest.raises(RecordNotFound):
        DjangoDataStore().update('patients', '999', {'notes': 'x'})


def test_in_memory_store_outage_and_duplicates():
    store = InMemoryDataStore({'relatives': [{'id': '1', 'firstname': 'Eva'}]})
    assert store.select('relatives')[0]['firstname'] == 'Eva'
    with pytest.raises(StoreError):
        store.insert('relatives', {'id': '1'})
    store.fail = 'relatives'
    with pytest.raises(StoreError):
        store.select('relatives')
    store.fail = None
    with pytest.raises(RecordNotFound):
        store.update('relatives', '2', {})


def test_get_single_record():
    p = Patient.objects.create(firstname='Max', lastname='Mustermann')
    store = DjangoDataStore()
    assert store.get('patients', str(p.id))['lastname'] == 'Mustermann'
    with pytest.raises(RecordNotFound):
        store.get('patients', '999')
    with pytest.raises(StoreError):
        store.get('patients', 'keine-zahl')

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from care.models import User


@pytest.fixture(autouse=True)
def _fresh_cache():
    # throttle counters and cached lookups live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(username='pflege1', password='Sicher!123', first_name='Anna', last_name='Pflege')


@pytest.fixture
def auth_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client

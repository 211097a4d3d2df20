from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.services.store import DjangoDataStore

CATEGORY_CACHE_KEY = 'categories:all'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_categories(request):
    cached = cache.get(CATEGORY_CACHE_KEY)
    if cached:
        return Response(cached)
    rows = DjangoDataStore().select('categories')
    payload = {'ok': True, 'data': rows}
    cache.set(CATEGORY_CACHE_KEY, payload, settings.CATEGORY_CACHE_SECONDS)
    return Response(payload)

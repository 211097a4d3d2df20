from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.services.store import DjangoDataStore


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_relatives(request):
    rows = DjangoDataStore().select('relatives')
    return Response({'ok': True, 'data': rows})

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.models import NewsItem


@api_view(['GET'])
@permission_classes([AllowAny])
def list_news(request):
    """Published news, newest first; future items stay hidden."""
    items = NewsItem.objects.filter(published_at__lte=timezone.now())
    data = [{
        'id': n.id,
        'title': n.title,
        'content': n.content,
        'image': n.image,
        'publishedAt': n.published_at.isoformat(),
    } for n in items]
    return Response({'ok': True, 'data': data})

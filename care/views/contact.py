"""Public contact form."""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from care.models import ContactMessage
from care.serializers.contact import ContactSerializer
from care.services.audit import log_action

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def contact(request):
    s = ContactSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    msg = ContactMessage.objects.create(**s.validated_data)
    logger.info("contact message %s from %s", msg.pk, msg.email)
    log_action(user=request.user, action='contact', object_type='contact_message', object_id=msg.pk)
    return Response({'ok': True, 'message': 'Vielen Dank für deine Nachricht!'}, status=status.HTTP_201_CREATED)

contact.cls.throttle_scope = 'contact'

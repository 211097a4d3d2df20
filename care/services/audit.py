import logging
from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from care.models import AuditEvent

User = get_user_model()

logger = logging.getLogger(__name__)


def client_ip(request) -> Optional[str]:
    """First hop of ``X-Forwarded-For`` when behind the proxy, else ``REMOTE_ADDR``."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR')


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[Any]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    """Append an audit row; anonymous callers are stored without a user."""
    event = AuditEvent.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
    logger.debug("audit %s %s/%s by %s", action, object_type, object_id, event.user_id)
    return event

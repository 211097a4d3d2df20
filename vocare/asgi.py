"""
ASGI config for the VoCare project.

Plain HTTP only; the API has no WebSocket routes.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "vocare.settings")

application = get_asgi_application()

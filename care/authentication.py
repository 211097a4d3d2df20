"""
Token authentication for the ``Authorization: Token <key>`` header.

Tokens are issued at login and expire ``AUTH_TOKEN_TTL_HOURS`` after
they were created (``0`` disables expiry).  An expired token is
deleted, so the next login issues a fresh key.
"""
from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework import authentication, exceptions
from rest_framework.authtoken.models import Token


def token_expired(token: Token) -> bool:
    ttl = getattr(settings, 'AUTH_TOKEN_TTL_HOURS', 0)
    return bool(ttl) and token.created < timezone.now() - timedelta(hours=ttl)


def issue_token(user) -> Token:
    """Return the user's token, replacing it when it has expired."""
    token, created = Token.objects.get_or_create(user=user)
    if not created and token_expired(token):
        token.delete()
        token = Token.objects.create(user=user)
    return token


class TokenAuthentication(authentication.TokenAuthentication):
    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if token_expired(token):
            token.delete()
            raise exceptions.AuthenticationFailed('Sitzung abgelaufen, bitte erneut anmelden.')
        return user, token

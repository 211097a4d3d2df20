"""
Authentication views: username/password login, self-registration and
the JWT refresh/logout pair.

Login hands out both a DRF token (``Authorization: Token <key>``) and a
simplejwt pair (``Authorization: Bearer <access>``); either is accepted
by the API.  Responses use the ``{success, message}`` shape the login
and registration pages display.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from care.serializers.auth import LoginSerializer, RegisterSerializer
from care.authentication import issue_token
from care.services.audit import client_ip, log_action

logger = logging.getLogger(__name__)


def _first_error(errors) -> str:
    for value in errors.values():
        while isinstance(value, (list, tuple)) and value:
            value = value[0]
        if isinstance(value, dict):
            return _first_error(value)
        return str(value)
    return 'Ungültige Eingabe'


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login with username and password.
    Returns the DRF token, a JWT pair and the user summary, or
    401 ``{success: false, message}`` for unknown credentials.
    """
    s = LoginSerializer(data=request.data)
    if not s.is_valid():
        return Response({'success': False, 'message': _first_error(s.errors), 'errors': s.errors}, status=400)
    username = s.validated_data['username']
    ip = client_ip(request)

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        logger.warning("failed login for %r from %s", username, ip)
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': ip})
        return Response({'success': False, 'message': 'Ungültige Anmeldedaten'}, status=401)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj = issue_token(user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'success': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': {
            'id': user.id,
            'username': user.username,
            'name': user.get_full_name() or user.username,
            'sex': user.sex,
        },
    }, status=200)

login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    if not s.is_valid():
        return Response({'success': False, 'message': _first_error(s.errors), 'errors': s.errors}, status=400)
    user = s.save()
    logger.info("registered user %s", user.username)
    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'ip': client_ip(request)})
    return Response({'success': True, 'message': 'Registrierung erfolgreich!'}, status=status.HTTP_201_CREATED)

register_view.cls.throttle_scope = 'register'


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        return Response({'ok': False, 'error': {'code': 'token_not_valid', 'message': str(e)}}, status=401)
    data = dict(s.validated_data)
    data['jwt_access'] = data.pop('access')
    if 'refresh' in data:
        data['jwt_refresh'] = data.pop('refresh')
    return Response({'ok': True, **data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            return Response({'ok': False, 'error': {'code': 'token_not_valid', 'message': str(e)}}, status=400)
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})

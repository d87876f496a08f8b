"""
Authentication endpoints.

Login issues a simplejwt access/refresh pair, refresh trades a refresh
token for a new access token, and logout blacklists refresh tokens.
Kept apart from ``booking.authentication`` so DRF can load the
authentication class without importing views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import InvalidArgument
from .responses import envelope
from .serializers.auth import LoginSerializer, LogoutSerializer
from .services.audit import log_action

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': ip})
        logger.info('Failed login for %s from %s', username, ip)
        raise AuthenticationFailed('Invalid username or password.')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})
    refresh = RefreshToken.for_user(user)
    return envelope({
        'access': str(refresh.access_token),
        'refresh': str(refresh),
        'user': {
            'id': user.id,
            'username': user.username,
            'name': user.display_name,
            'role': user.role,
        },
    }, 'Login successful.')


login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token for a valid refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    return envelope(s.validated_data)


jwt_refresh_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding token of the user."""
    count = 0
    if request.data.get('refresh'):
        s = LogoutSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            token = RefreshToken(s.validated_data['refresh'])
        except TokenError as e:
            raise InvalidArgument(str(e))
        if str(token.get('user_id')) != str(request.user.id):
            raise InvalidArgument('Token does not belong to the current user.')
        token.blacklist()
        count = 1
    else:
        for outstanding in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
            count += int(created)
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return envelope({'blacklisted': count}, 'Logged out.')

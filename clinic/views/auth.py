"""
Login and logout endpoints.

A successful login sets the admin session cookie (see
:mod:`clinic.auth`); logout clears it.  Both are open to anonymous
callers, and login attempts are rate limited through DRF's
``ScopedRateThrottle`` under the ``login`` scope.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from ..auth import clear_session_cookie, issue_session_token, set_session_cookie
from ..serializers.auth import LoginSerializer
from ..services.audit import log_action

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = 'Username and password are required.'
INVALID_CREDENTIALS = 'Invalid username or password.'
TOO_MANY_ATTEMPTS = 'Too many login attempts. Please try again later.'


def check_credentials(request, data):
    """Return ``(admin, error_message)`` for a login attempt and record it."""
    s = LoginSerializer(data=data)
    s.is_valid(raise_exception=True)
    username = s.validated_data.get('username') or ''
    password = s.validated_data.get('password') or ''
    if not username or not password:
        return None, MISSING_CREDENTIALS

    admin = authenticate(request, username=username, password=password)
    ip = request.META.get('REMOTE_ADDR')
    if admin is None:
        logger.warning('Failed login for %r from %s', username, ip)
        log_action(admin=None, action='login_failed', object_type='admin',
                   detail={'username': username, 'ip': ip})
        return None, INVALID_CREDENTIALS

    logger.info('Admin %s signed in from %s', admin.username, ip)
    log_action(admin=admin, action='login', object_type='admin', object_id=admin.id, detail={'ip': ip})
    return admin, None


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    admin, error = check_credentials(request, request.data)
    if error == MISSING_CREDENTIALS:
        return Response({'message': error}, status=status.HTTP_400_BAD_REQUEST)
    if error:
        return Response({'message': error}, status=status.HTTP_401_UNAUTHORIZED)
    return set_session_cookie(Response({'success': True}), issue_session_token(admin))

# DRF ScopedRateThrottle reads throttle_scope from the view class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def logout_view(request):
    return clear_session_cookie(Response({'success': True}))


def login_attempt_wait(request):
    """Count a login attempt made outside DRF against the ``login`` rate.

    Returns ``None`` when the attempt may proceed, otherwise the number of
    seconds to wait.  The form and the API share one budget per client.
    """
    throttle = ScopedRateThrottle()
    if throttle.allow_request(request, login_view.cls):
        return None
    return throttle.wait() or 1.0

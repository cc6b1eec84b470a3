"""
Admin session cookie helpers.

A signed access token (HS256 JWT issued through ``rest_framework_simplejwt``)
is stored in an HTTP-only cookie after login.  The page guard
middleware and the DRF authentication class both read that cookie and
verify it with :func:`verify_session_token`.  There is no refresh flow
and no revocation list: a token is valid until it expires.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .models import Admin


def cookie_name() -> str:
    return settings.AUTH_COOKIE_NAME


def issue_session_token(admin: Admin) -> str:
    token = AccessToken.for_user(admin)
    token['sub'] = str(admin.pk)
    token['username'] = admin.username
    return str(token)


def verify_session_token(raw: str | None) -> AccessToken | None:
    """Return the decoded token, or ``None`` when it is missing, forged or expired."""
    if not raw:
        return None
    try:
        return AccessToken(raw)
    except TokenError:
        return None


def set_session_cookie(response, token: str):
    response.set_cookie(
        cookie_name(),
        token,
        max_age=int(settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].total_seconds()),
        path='/',
        secure=settings.ENV == 'prod',
        httponly=True,
        samesite='Lax',
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(cookie_name(), path='/', samesite='Lax')
    return response


def session_admin(claims) -> Admin | None:
    """The active admin account a verified token was issued to."""
    if claims is None:
        return None
    return Admin.objects.filter(pk=claims.get('sub'), is_active=True).first()

"""
DRF authentication backed by the admin session cookie.

The JSON API is called from the same browser session as the server
rendered pages, so the cookie set at login is the primary credential.
A ``Authorization: Bearer <token>`` header carrying the same token is
accepted as well, which keeps the API usable from scripts.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication

from .auth import cookie_name


class SessionCookieAuthentication(JWTAuthentication):
    """JWT authentication that looks in the session cookie first."""

    def authenticate(self, request):
        raw = request.COOKIES.get(cookie_name())
        if not raw:
            return super().authenticate(request)
        validated = self.get_validated_token(raw)
        return self.get_user(validated), validated

from django.http import HttpResponseRedirect

from .auth import clear_session_cookie, cookie_name, verify_session_token


class SessionGuardMiddleware:
    """Redirect page requests based on the admin session cookie.

    Protected pages require a valid token and bounce to ``/login``
    otherwise; the login page bounces an already signed-in admin to the
    dashboard.  A token that fails verification is always cleared.
    """
    PROTECTED_PREFIXES = (
        '/dashboard',
        '/patients',
        '/treatments',
        '/appointments',
        '/sessions',
        '/stocks',
        '/reporting',
    )
    LOGIN_PATH = '/login'
    HOME_PATH = '/dashboard'

    def __init__(self, get_response):
        self.get_response = get_response

    def _is_protected(self, path: str) -> bool:
        return any(path == p or path.startswith(p + '/') for p in self.PROTECTED_PREFIXES)

    def __call__(self, request):
        path = request.path or ''
        token = request.COOKIES.get(cookie_name())
        claims = verify_session_token(token)
        request.admin_claims = claims

        if path.startswith(self.LOGIN_PATH):
            if claims is not None:
                return HttpResponseRedirect(self.HOME_PATH)
            response = self.get_response(request)
            # A successful login POST has already replaced the cookie
            if token and cookie_name() not in response.cookies:
                clear_session_cookie(response)
            return response

        if self._is_protected(path) and claims is None:
            response = HttpResponseRedirect(self.LOGIN_PATH)
            if token:
                clear_session_cookie(response)
            return response

        return self.get_response(request)

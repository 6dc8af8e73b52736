"""
Session credential handling: issuing the signed access token after an OAuth
login and verifying it on every protected request.
"""
from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.tokens import AccessToken


class CookieJWTAuthentication(JWTAuthentication):
    """
    Reads the access token from the session cookie set at login, falling
    back to an ``Authorization: Bearer`` header for API clients.

    A missing credential leaves the request anonymous so the permission
    layer answers 401; a malformed, tampered or expired one raises
    ``InvalidToken`` which is also a 401. A stale cookie does not shadow
    a header sent alongside it.
    """

    def authenticate(self, request):
        raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if not raw_token:
            return super().authenticate(request)

        try:
            validated_token = self.get_validated_token(raw_token)
        except InvalidToken:
            if self.get_header(request) is None:
                raise
            return super().authenticate(request)
        return self.get_user(validated_token), validated_token


def issue_access_token(user):
    """Signed credential carrying the user id and email"""
    token = AccessToken.for_user(user)
    token['email'] = user.email
    return str(token)


def set_auth_cookie(response, user):
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        issue_access_token(user),
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response

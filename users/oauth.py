"""
Google OAuth integration
"""
import urllib.parse
import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError
from django.urls import reverse
from .models import User
import logging

logger = logging.getLogger('abbey')


class OAuthError(Exception):
    """The provider refused the login or answered with something unusable"""


class GoogleOAuthProvider:
    """
    Authorization-code flow against Google. One instance is built when the
    URLconf loads and handed to the auth views.
    """
    name = 'google'
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPE = 'openid email profile'

    def __init__(self, client_id, client_secret, redirect_uri=None, timeout=10):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI or None,
            timeout=settings.GOOGLE_OAUTH_TIMEOUT,
        )

    def _require_credentials(self):
        if not self.client_id or not self.client_secret:
            raise ImproperlyConfigured(
                "Missing required OAuth settings: GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET"
            )

    def get_redirect_uri(self, request):
        """Fixed redirect URI from settings, else built from the request"""
        if self.redirect_uri:
            return self.redirect_uri
        return request.build_absolute_uri(reverse('auth:google-callback'))

    def get_auth_url(self, request, state):
        """Generate Google authorization URL"""
        self._require_credentials()

        params = {
            'client_id': self.client_id,
            'response_type': 'code',
            'redirect_uri': self.get_redirect_uri(request),
            'scope': self.SCOPE,
            'state': state,
            'access_type': 'online',
            'prompt': 'select_account',
        }

        return f"{self.AUTHORIZATION_URL}?{urllib.parse.urlencode(params)}"

    def exchange_code_for_tokens(self, request, code):
        """Exchange authorization code for tokens"""
        self._require_credentials()

        data = {
            'grant_type': 'authorization_code',
            'code': code,
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'redirect_uri': self.get_redirect_uri(request),
        }

        try:
            response = requests.post(self.TOKEN_URL, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise OAuthError(f"Token endpoint unreachable: {e}") from e

        if response.status_code != 200:
            raise OAuthError(f"Token exchange failed: {response.status_code} {response.text}")

        tokens_data = response.json()
        if 'access_token' not in tokens_data:
            raise OAuthError("Token response did not contain an access token")
        return tokens_data

    def fetch_profile(self, access_token):
        """
        Fetch the signed-in Google account.

        Returns a dict with ``oauth_id``, ``email``, ``name`` and ``avatar_url``.
        """
        headers = {
            'Authorization': f'Bearer {access_token}'
        }

        try:
            response = requests.get(self.USERINFO_URL, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise OAuthError(f"Userinfo endpoint unreachable: {e}") from e

        if response.status_code != 200:
            raise OAuthError(f"Userinfo request failed: {response.status_code}")

        user_profile = response.json()
        if not user_profile.get('sub'):
            raise OAuthError("Google profile has no subject id")
        if not user_profile.get('email'):
            raise OAuthError("Google account does not have an email address")

        return {
            'oauth_id': user_profile['sub'],
            'email': user_profile['email'],
            'name': user_profile.get('name') or '',
            'avatar_url': user_profile.get('picture'),
        }

    def authenticate(self, request, code):
        """
        Complete the login for an authorization code: returns the local user,
        created on first login.
        """
        tokens_data = self.exchange_code_for_tokens(request, code)
        profile = self.fetch_profile(tokens_data['access_token'])

        try:
            user, created = User.objects.get_or_create_from_oauth(
                provider=self.name,
                oauth_id=profile['oauth_id'],
                email=profile['email'],
                name=profile['name'],
                avatar_url=profile['avatar_url'],
            )
        except IntegrityError as e:
            # email already registered under another identity
            raise OAuthError(f"Cannot register {profile['email']}: {e}") from e
        if not created:
            logger.info(f"User {user.pk} logged in via {self.name}")
        return user

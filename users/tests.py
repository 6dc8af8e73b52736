from urllib.parse import urlparse, parse_qs
from django.conf import settings
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from django.contrib.auth import get_user_model
from unittest.mock import patch, MagicMock
import requests

from users.oauth import GoogleOAuthProvider, OAuthError
from users.authentication import issue_access_token
from users.auth_urls import google_provider
from abbey.admin import abbey_admin_site

User = get_user_model()


def mock_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = str(payload)
    return response


GOOGLE_PROFILE = {
    'sub': 'google-sub-123',
    'email': 'New.Person@Example.com',
    'name': 'New Person',
    'picture': 'https://example.com/avatar.png',
}


class UserModelTests(TestCase):
    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email='Mixed.Case@Example.COM', name='Mixed')
        self.assertEqual(user.email, 'mixed.case@example.com')
        self.assertFalse(user.has_usable_password())
        self.assertEqual(str(user), 'mixed.case@example.com')
        self.assertEqual(user.get_full_name(), 'Mixed')

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email='admin@example.com', password='ComplexP@ssw0rd!', name='Admin')
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.check_password('ComplexP@ssw0rd!'))

    def test_get_or_create_from_oauth(self):
        user, created = User.objects.get_or_create_from_oauth(
            provider='google', oauth_id='abc', email='oauth@example.com', name='  OAuth User ',
        )
        self.assertTrue(created)
        self.assertEqual(user.name, 'OAuth User')
        self.assertIsNone(user.avatar_url)

        again, created = User.objects.get_or_create_from_oauth(
            provider='google', oauth_id='abc', email='oauth@example.com', name='Renamed upstream',
        )
        self.assertFalse(created)
        self.assertEqual(again.pk, user.pk)
        self.assertEqual(again.name, 'OAuth User')

    def test_name_falls_back_to_email_local_part(self):
        user, _ = User.objects.get_or_create_from_oauth(
            provider='google', oauth_id='noname', email='someone@example.com', name='',
        )
        self.assertEqual(user.name, 'someone')

    def test_update_profile(self):
        user = User.objects.create_user(email='profile@example.com', name='Old', avatar_url='https://example.com/a.png')
        user.update_profile('  New  ', '')
        user.refresh_from_db()
        self.assertEqual(user.name, 'New')
        self.assertIsNone(user.avatar_url)


class GoogleOAuthProviderTests(TestCase):
    def setUp(self):
        self.provider = GoogleOAuthProvider(
            client_id='client', client_secret='secret', redirect_uri='http://testserver/callback/'
        )

    def test_auth_url_carries_state_and_redirect(self):
        url = self.provider.get_auth_url(None, 'state-value')
        query = parse_qs(urlparse(url).query)

        self.assertTrue(url.startswith(GoogleOAuthProvider.AUTHORIZATION_URL))
        self.assertEqual(query['client_id'], ['client'])
        self.assertEqual(query['state'], ['state-value'])
        self.assertEqual(query['redirect_uri'], ['http://testserver/callback/'])
        self.assertEqual(query['response_type'], ['code'])

    def test_missing_credentials_raise_improperly_configured(self):
        from django.core.exceptions import ImproperlyConfigured

        provider = GoogleOAuthProvider(client_id='', client_secret='')
        with self.assertRaises(ImproperlyConfigured):
            provider.get_auth_url(None, 'state')

    @patch('users.oauth.requests.get')
    @patch('users.oauth.requests.post')
    def test_authenticate_creates_user(self, mock_post, mock_get):
        mock_post.return_value = mock_response(200, {'access_token': 'google-access'})
        mock_get.return_value = mock_response(200, GOOGLE_PROFILE)

        user = self.provider.authenticate(None, 'auth-code')

        self.assertEqual(user.email, 'new.person@example.com')
        self.assertEqual(user.oauth_provider, 'google')
        self.assertEqual(user.oauth_id, 'google-sub-123')
        self.assertEqual(user.avatar_url, 'https://example.com/avatar.png')
        self.assertEqual(mock_post.call_args.kwargs['data']['code'], 'auth-code')
        self.assertEqual(mock_get.call_args.kwargs['headers']['Authorization'], 'Bearer google-access')

    @patch('users.oauth.requests.post')
    def test_failed_token_exchange_raises(self, mock_post):
        mock_post.return_value = mock_response(400, {'error': 'invalid_grant'})
        with self.assertRaises(OAuthError):
            self.provider.authenticate(None, 'bad-code')

    @patch('users.oauth.requests.post')
    def test_network_error_raises(self, mock_post):
        mock_post.side_effect = requests.ConnectionError('down')
        with self.assertRaises(OAuthError):
            self.provider.authenticate(None, 'code')

    @patch('users.oauth.requests.get')
    @patch('users.oauth.requests.post')
    def test_profile_without_email_raises(self, mock_post, mock_get):
        mock_post.return_value = mock_response(200, {'access_token': 'google-access'})
        mock_get.return_value = mock_response(200, {'sub': 'x'})
        with self.assertRaises(OAuthError):
            self.provider.authenticate(None, 'code')

    @patch('users.oauth.requests.get')
    @patch('users.oauth.requests.post')
    def test_email_taken_by_other_identity_raises(self, mock_post, mock_get):
        User.objects.create_user(email='new.person@example.com', name='Existing', oauth_provider='google', oauth_id='other')
        mock_post.return_value = mock_response(200, {'access_token': 'google-access'})
        mock_get.return_value = mock_response(200, GOOGLE_PROFILE)

        with self.assertRaises(OAuthError):
            self.provider.authenticate(None, 'code')
        self.assertEqual(User.objects.count(), 1)


class GoogleLoginFlowTests(APITestCase):
    def setUp(self):
        self.login_url = reverse('auth:google-login')
        self.callback_url = reverse('auth:google-callback')

    def start_login(self):
        response = self.client.get(self.login_url)
        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        return parse_qs(urlparse(response['Location']).query)['state'][0]

    def test_login_redirects_to_google(self):
        response = self.client.get(self.login_url)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertTrue(response['Location'].startswith(GoogleOAuthProvider.AUTHORIZATION_URL))
        self.assertIn(settings.OAUTH_STATE_COOKIE_NAME, response.cookies)

    @patch('users.oauth.requests.get')
    @patch('users.oauth.requests.post')
    def test_callback_sets_cookie_and_redirects_to_dashboard(self, mock_post, mock_get):
        mock_post.return_value = mock_response(200, {'access_token': 'google-access'})
        mock_get.return_value = mock_response(200, GOOGLE_PROFILE)
        state = self.start_login()

        response = self.client.get(self.callback_url, {'code': 'auth-code', 'state': state})

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/dashboard")
        cookie = response.cookies[settings.AUTH_COOKIE_NAME]
        self.assertTrue(cookie['httponly'])
        self.assertTrue(User.objects.filter(email='new.person@example.com').exists())

        # The cookie now authenticates API calls
        me = self.client.get(reverse('auth:current-user'))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['email'], 'new.person@example.com')
        self.assertEqual(me.data['oauth_provider'], 'google')

    @patch('users.oauth.requests.get')
    @patch('users.oauth.requests.post')
    def test_second_login_reuses_user(self, mock_post, mock_get):
        mock_post.return_value = mock_response(200, {'access_token': 'google-access'})
        mock_get.return_value = mock_response(200, GOOGLE_PROFILE)

        for _ in range(2):
            state = self.start_login()
            self.client.get(self.callback_url, {'code': 'auth-code', 'state': state})

        self.assertEqual(User.objects.count(), 1)

    def test_callback_with_wrong_state_fails(self):
        self.start_login()
        response = self.client.get(self.callback_url, {'code': 'auth-code', 'state': 'forged'})

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/login?error=auth_failed")
        self.assertFalse(User.objects.exists())

    def test_callback_with_non_ascii_state_fails(self):
        self.start_login()
        response = self.client.get(self.callback_url, {'code': 'auth-code', 'state': 'é'})

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/login?error=auth_failed")

    def test_login_without_credentials_redirects_to_failure(self):
        with patch.object(google_provider, 'client_id', ''):
            response = self.client.get(self.login_url)

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/login?error=auth_failed")
        self.assertNotIn(settings.OAUTH_STATE_COOKIE_NAME, response.cookies)

    def test_callback_with_provider_error_fails(self):
        response = self.client.get(self.callback_url, {'error': 'access_denied'})
        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/login?error=auth_failed")

    @patch('users.oauth.requests.post')
    def test_callback_with_failed_exchange_fails(self, mock_post):
        mock_post.return_value = mock_response(400, {'error': 'invalid_grant'})
        state = self.start_login()

        response = self.client.get(self.callback_url, {'code': 'bad', 'state': state})

        self.assertEqual(response['Location'], f"{settings.CLIENT_URL}/login?error=auth_failed")
        self.assertNotIn(settings.AUTH_COOKIE_NAME, response.cookies)


class CurrentUserTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email='me@example.com', name='Me', oauth_provider='google', oauth_id='google-me'
        )
        self.me_url = reverse('auth:current-user')
        self.logout_url = reverse('auth:logout')

    def test_unauthenticated_access_to_me_fails(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_expired_or_tampered_token_fails(self):
        token = issue_access_token(self.user)
        self.client.cookies[settings.AUTH_COOKIE_NAME] = token[:-4] + 'abcd'
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_stale_cookie_does_not_shadow_bearer_header(self):
        self.client.cookies[settings.AUTH_COOKIE_NAME] = 'expired-or-garbage'
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(self.user)}')

        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.id)

    def test_get_current_user(self):
        self.client.cookies[settings.AUTH_COOKIE_NAME] = issue_access_token(self.user)
        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.id)
        self.assertEqual(response.data['name'], 'Me')

    def test_logout_clears_cookie(self):
        self.client.cookies[settings.AUTH_COOKIE_NAME] = issue_access_token(self.user)
        response = self.client.post(self.logout_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Logged out successfully')
        self.assertEqual(response.cookies[settings.AUTH_COOKIE_NAME].value, '')

    def test_logout_requires_authentication(self):
        response = self.client.post(self.logout_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserDirectoryTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email='profile@example.com', name='Profile User', oauth_provider='google', oauth_id='google-p'
        )
        self.other = User.objects.create_user(
            email='other@example.com', name='Other User', oauth_provider='google', oauth_id='google-o'
        )
        self.client.force_authenticate(user=self.user)

        self.list_url = reverse('users:user-list')
        self.me_url = reverse('users:user-me')

    def test_list_users_excludes_current_user(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['id'] for u in response.data], [self.other.id])
        self.assertEqual(
            set(response.data[0].keys()),
            {'id', 'email', 'name', 'avatar_url', 'created_at'}
        )

    def test_get_user_by_id(self):
        response = self.client.get(reverse('users:user-detail', args=[self.other.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'other@example.com')

    def test_get_missing_user(self):
        response = self.client.get(reverse('users:user-detail', args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')

    def test_update_user_profile_success(self):
        update_data = {
            'name': '  New Name  ',
            'avatar_url': 'https://example.com/new.png',
        }
        response = self.client.put(self.me_url, update_data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New Name')
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'New Name')
        self.assertEqual(self.user.avatar_url, 'https://example.com/new.png')

    def test_update_without_avatar_clears_it(self):
        self.user.update_profile('Profile User', 'https://example.com/old.png')

        response = self.client.put(self.me_url, {'name': 'Profile User'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertIsNone(self.user.avatar_url)

    def test_patch_keeps_avatar(self):
        self.user.update_profile('Profile User', 'https://example.com/old.png')

        response = self.client.patch(self.me_url, {'name': 'Patched'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, 'Patched')
        self.assertEqual(self.user.avatar_url, 'https://example.com/old.png')

    def test_update_requires_name(self):
        for payload in ({}, {'name': ''}, {'name': '   '}):
            response = self.client.put(self.me_url, payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error'], 'Name is required')

    def test_email_cannot_be_changed(self):
        response = self.client.put(self.me_url, {'name': 'X', 'email': 'hijack@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, 'profile@example.com')

    def test_directory_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class HealthTests(APITestCase):
    def test_health(self):
        response = self.client.get(reverse('health'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')


class AdminSiteTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(email='admin@example.com', password='ComplexP@ssw0rd!', name='Admin')
        self.client.force_login(self.admin)

    def test_index_lists_users_before_connections(self):
        response = self.client.get(reverse('abbey_admin:index'))

        self.assertEqual(response.status_code, 200)
        labels = [app['app_label'] for app in response.context['app_list']]
        self.assertEqual(labels, ['users', 'connections'])

    def test_connection_changelist_is_reachable(self):
        response = self.client.get(reverse('abbey_admin:connections_connection_changelist'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['site_header'], abbey_admin_site.site_header)

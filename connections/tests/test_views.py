from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from users.models import User
from users.authentication import issue_access_token
from connections.models import Connection


class ConnectionAPITests(APITestCase):
    def setUp(self):
        """Set up test data"""
        self.user1 = User.objects.create_user(
            email='test1_connections@example.com',
            name='Test User 1',
            oauth_provider='google',
            oauth_id='google-1',
        )
        self.user2 = User.objects.create_user(
            email='test2_connections@example.com',
            name='Test User 2',
            oauth_provider='google',
            oauth_id='google-2',
        )
        self.user_non_involved = User.objects.create_user(
            email='noninvolved@example.com',
            name='Non Involved',
            oauth_provider='google',
            oauth_id='google-3',
        )

        self.client = APIClient()
        self.client.force_authenticate(user=self.user1)

        self.list_url = reverse('connections:connection-list')
        self.overview_url = reverse('connections:connection-overview')

    def detail_url(self, pk):
        return reverse('connections:connection-detail', args=[pk])

    def accept_url(self, pk):
        return reverse('connections:connection-accept', args=[pk])

    def test_send_connection_request(self):
        response = self.client.post(self.detail_url(self.user2.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user_id'], self.user1.id)
        self.assertEqual(response.data['friend_id'], self.user2.id)
        self.assertEqual(response.data['status'], 'pending')
        self.assertIn('created_at', response.data)
        self.assertTrue(Connection.objects.filter(user=self.user1, friend=self.user2).exists())

    def test_cannot_send_request_to_self(self):
        response = self.client.post(self.detail_url(self.user1.id))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot connect with yourself')

    def test_send_request_to_missing_user(self):
        response = self.client.post(self.detail_url(999999))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')

    def test_cannot_send_duplicate_request(self):
        Connection.objects.create(user=self.user2, friend=self.user1)

        response = self.client.post(self.detail_url(self.user2.id))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Connection already exists')
        self.assertEqual(Connection.objects.count(), 1)

    def test_accept_connection_request(self):
        connection = Connection.objects.create(user=self.user2, friend=self.user1)

        response = self.client.put(self.accept_url(connection.id))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'accepted')
        connection.refresh_from_db()
        self.assertEqual(connection.status, 'accepted')

    def test_requester_cannot_accept_own_request(self):
        connection = Connection.objects.create(user=self.user1, friend=self.user2)

        response = self.client.put(self.accept_url(connection.id))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Not authorized to accept this connection')

    def test_cannot_accept_already_accepted_request(self):
        connection = Connection.objects.create(user=self.user2, friend=self.user1, status='accepted')

        response = self.client.put(self.accept_url(connection.id))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Connection already accepted')

    def test_accept_missing_connection(self):
        response = self.client.put(self.accept_url(999999))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_connection(self):
        connection = Connection.objects.create(user=self.user2, friend=self.user1)

        response = self.client.delete(self.detail_url(connection.id))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Connection deleted successfully')
        self.assertFalse(Connection.objects.filter(id=connection.id).exists())

    def test_delete_not_part_of_connection(self):
        connection = Connection.objects.create(user=self.user1, friend=self.user2, status='accepted')
        self.client.force_authenticate(user=self.user_non_involved)

        response = self.client.delete(self.detail_url(connection.id))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Connection.objects.filter(id=connection.id).exists())

    def test_delete_missing_connection(self):
        response = self.client.delete(self.detail_url(999999))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Connection not found')

    def test_list_connections_from_both_sides(self):
        connection = Connection.objects.create(user=self.user1, friend=self.user2)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], connection.id)
        self.assertTrue(response.data[0]['is_sender'])
        self.assertEqual(response.data[0]['friend']['id'], self.user2.id)
        self.assertEqual(
            set(response.data[0]['friend'].keys()),
            {'id', 'email', 'name', 'avatar_url'}
        )

        self.client.force_authenticate(user=self.user2)
        response = self.client.get(self.list_url)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], connection.id)
        self.assertFalse(response.data[0]['is_sender'])
        self.assertEqual(response.data[0]['friend']['id'], self.user1.id)

    def test_request_accept_remove_scenario(self):
        response = self.client.post(self.detail_url(self.user2.id))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        connection_id = response.data['id']

        sender_view = self.client.get(self.list_url).data
        self.assertEqual(len(sender_view), 1)
        self.assertEqual(sender_view[0]['status'], 'pending')
        self.assertTrue(sender_view[0]['is_sender'])

        self.client.force_authenticate(user=self.user2)
        receiver_view = self.client.get(self.list_url).data
        self.assertEqual(receiver_view[0]['id'], connection_id)
        self.assertFalse(receiver_view[0]['is_sender'])

        response = self.client.put(self.accept_url(connection_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(self.list_url).data[0]['status'], 'accepted')

        self.client.force_authenticate(user=self.user1)
        self.assertEqual(self.client.get(self.list_url).data[0]['status'], 'accepted')

        response = self.client.delete(self.detail_url(connection_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(self.list_url).data, [])

        self.client.force_authenticate(user=self.user2)
        self.assertEqual(self.client.get(self.list_url).data, [])

    def test_overview_groups_users(self):
        pending_user = User.objects.create_user(
            email='pending@example.com', name='Pending', oauth_provider='google', oauth_id='google-4'
        )
        Connection.objects.create(user=self.user1, friend=self.user2, status='accepted')
        Connection.objects.create(user=pending_user, friend=self.user1)

        response = self.client.get(self.overview_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['id'] for u in response.data['accepted']], [self.user2.id])
        self.assertEqual([u['id'] for u in response.data['pending_received']], [pending_user.id])
        self.assertEqual(response.data['pending_sent'], [])
        self.assertEqual([u['id'] for u in response.data['discoverable']], [self.user_non_involved.id])


class ConnectionAuthTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            email='auth_connections@example.com',
            name='Auth User',
            oauth_provider='google',
            oauth_id='google-auth',
        )
        self.other = User.objects.create_user(
            email='other_connections@example.com',
            name='Other User',
            oauth_provider='google',
            oauth_id='google-other',
        )

    def test_every_route_requires_authentication(self):
        requests = [
            ('get', reverse('connections:connection-list')),
            ('get', reverse('connections:connection-overview')),
            ('post', reverse('connections:connection-detail', args=[self.other.id])),
            ('put', reverse('connections:connection-accept', args=[1])),
            ('delete', reverse('connections:connection-detail', args=[1])),
        ]
        for method, url in requests:
            response = getattr(self.client, method)(url)
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED, f"{method} {url}")

        self.assertFalse(Connection.objects.exists())

    def test_invalid_cookie_is_unauthorized(self):
        self.client.cookies['token'] = 'not-a-jwt'
        response = self.client.get(reverse('connections:connection-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_session_cookie_authenticates(self):
        self.client.cookies['token'] = issue_access_token(self.user)
        response = self.client.post(reverse('connections:connection-detail', args=[self.other.id]))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user_id'], self.user.id)

    def test_bearer_header_authenticates(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(self.user)}')
        response = self.client.get(reverse('connections:connection-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

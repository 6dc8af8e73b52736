from django.test import SimpleTestCase
from users.models import User
from connections.models import Connection
from connections.utils import partition_users, relationship_state


def user(pk):
    return User(pk=pk, email=f'user{pk}@example.com', name=f'User {pk}')


class PartitionUsersTests(SimpleTestCase):
    """partition_users works on unsaved instances and never touches the database"""

    def setUp(self):
        self.viewer = user(1)
        self.users = [user(pk) for pk in range(1, 7)]

    def test_groups_every_other_user_once(self):
        connections = [
            Connection(user_id=1, friend_id=2, status='accepted'),
            Connection(user_id=3, friend_id=1, status='accepted'),
            Connection(user_id=1, friend_id=4, status='pending'),
            Connection(user_id=5, friend_id=1, status='pending'),
        ]

        groups = partition_users(self.viewer, connections, self.users)

        self.assertEqual([u.pk for u in groups['accepted']], [2, 3])
        self.assertEqual([u.pk for u in groups['pending_sent']], [4])
        self.assertEqual([u.pk for u in groups['pending_received']], [5])
        self.assertEqual([u.pk for u in groups['discoverable']], [6])

    def test_viewer_is_excluded(self):
        groups = partition_users(self.viewer, [], self.users)

        self.assertEqual([u.pk for u in groups['discoverable']], [2, 3, 4, 5, 6])
        for members in groups.values():
            self.assertNotIn(1, [u.pk for u in members])

    def test_relationship_state_is_viewer_relative(self):
        pending = Connection(user_id=1, friend_id=2, status='pending')

        self.assertEqual(relationship_state(user(1), pending), 'pending_sent')
        self.assertEqual(relationship_state(user(2), pending), 'pending_received')

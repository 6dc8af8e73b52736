from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.db.models.functions import Greatest, Least
from abbey.models import TimeStampedModel

class Connection(TimeStampedModel):
    """
    A relationship between two users. ``user`` sent the request and
    ``friend`` received it. Rejecting, cancelling and removing all delete
    the row, so pending and accepted are the only persisted states.
    """
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUSES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='connections_sent'
    )
    friend = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='connections_received'
    )
    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_PENDING)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            # One row per unordered pair, whichever side sent the request
            models.UniqueConstraint(
                Least('user', 'friend'),
                Greatest('user', 'friend'),
                name='unique_connection_pair',
            ),
            models.CheckConstraint(
                condition=~Q(user=F('friend')),
                name='connection_not_self',
            ),
            models.CheckConstraint(
                condition=Q(status__in=['pending', 'accepted']),
                name='connection_status_valid',
            ),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.friend_id} ({self.status})"

    def other_party(self, user):
        """The participant that is not ``user``"""
        return self.friend if self.user_id == user.pk else self.user

"""
Connection lifecycle: request, accept, remove.

Every rule about who may change a connection lives here. The views only
translate HTTP to these calls, and the failures raised below already carry
their HTTP status.
"""
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from abbey.exceptions import Conflict, Forbidden, InvalidOperation, NotFound
from .models import Connection
import logging

logger = logging.getLogger('abbey')
User = get_user_model()


class ConnectionService:
    """
    Connection operations performed on behalf of ``viewer``.
    """

    def __init__(self, viewer):
        self.viewer = viewer

    def _involving_viewer(self):
        return Q(user=self.viewer) | Q(friend=self.viewer)

    def list(self):
        """
        Every connection the viewer takes part in, either side, any status,
        newest first.
        """
        return (
            Connection.objects
            .filter(self._involving_viewer())
            .select_related('user', 'friend')
            .order_by('-created_at', '-id')
        )

    def request(self, target_id):
        """
        Send a connection request from the viewer to ``target_id``.

        Checked in order: not self, target exists, no connection between
        the two in either direction.
        """
        if target_id == self.viewer.pk:
            raise InvalidOperation("Cannot connect with yourself")

        target = User.objects.filter(pk=target_id).first()
        if target is None:
            raise NotFound("User not found")

        pair = (
            Q(user=self.viewer, friend=target) |
            Q(user=target, friend=self.viewer)
        )
        if Connection.objects.filter(pair).exists():
            raise Conflict("Connection already exists")

        # The unordered-pair constraint catches a duplicate racing past the check above
        try:
            with transaction.atomic():
                connection = Connection.objects.create(
                    user=self.viewer,
                    friend=target,
                    status=Connection.STATUS_PENDING,
                )
        except IntegrityError:
            logger.warning(f"Concurrent duplicate request between users {self.viewer.pk} and {target.pk}")
            raise Conflict("Connection already exists")

        logger.info(f"User {self.viewer.pk} requested connection {connection.pk} with user {target.pk}")
        return connection

    def accept(self, connection_id):
        """
        Accept a pending request addressed to the viewer.
        """
        accepted = Connection.objects.filter(
            pk=connection_id,
            friend=self.viewer,
            status=Connection.STATUS_PENDING,
        ).update(status=Connection.STATUS_ACCEPTED)

        connection = Connection.objects.select_related('user', 'friend').filter(pk=connection_id).first()

        if not accepted:
            if connection is None:
                raise NotFound("Connection not found")
            if connection.friend_id != self.viewer.pk:
                raise Forbidden("Not authorized to accept this connection")
            raise Conflict("Connection already accepted")

        if connection is None:
            # removed by the other party right after the update
            raise NotFound("Connection not found")

        logger.info(f"User {self.viewer.pk} accepted connection {connection.pk}")
        return connection

    def remove(self, connection_id):
        """
        Delete a connection the viewer is part of, whatever its status.
        Covers rejecting and cancelling a request as well as removing an
        accepted connection.
        """
        deleted, _ = Connection.objects.filter(
            self._involving_viewer(),
            pk=connection_id,
        ).delete()

        if not deleted:
            if not Connection.objects.filter(pk=connection_id).exists():
                raise NotFound("Connection not found")
            raise Forbidden("Not authorized to delete this connection")

        logger.info(f"User {self.viewer.pk} removed connection {connection_id}")

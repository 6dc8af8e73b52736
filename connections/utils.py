from .models import Connection

ACCEPTED = 'accepted'
PENDING_SENT = 'pending_sent'
PENDING_RECEIVED = 'pending_received'
DISCOVERABLE = 'discoverable'


def relationship_state(viewer, connection):
    """Where ``connection`` puts its other party from the viewer's side"""
    if connection.status == Connection.STATUS_ACCEPTED:
        return ACCEPTED
    if connection.user_id == viewer.pk:
        return PENDING_SENT
    return PENDING_RECEIVED


def partition_users(viewer, connections, users):
    """
    Split ``users`` by their relationship with ``viewer``.

    ``connections`` is the viewer's full connection list and ``users`` any
    iterable of users; nothing is queried. The viewer never appears in the
    result and input order is preserved inside each group.
    """
    states = {}
    for connection in connections:
        other_id = connection.friend_id if connection.user_id == viewer.pk else connection.user_id
        states[other_id] = relationship_state(viewer, connection)

    groups = {
        ACCEPTED: [],
        PENDING_SENT: [],
        PENDING_RECEIVED: [],
        DISCOVERABLE: [],
    }
    for user in users:
        if user.pk == viewer.pk:
            continue
        groups[states.get(user.pk, DISCOVERABLE)].append(user)
    return groups

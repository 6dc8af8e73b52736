from rest_framework import serializers
from abbey.serializers import BaseSerializer
from users.serializers import UserMiniSerializer, UserSerializer
from .models import Connection


class ConnectionSerializer(BaseSerializer):
    """
    A connection record as stored, returned by request and accept
    """
    user_id = serializers.IntegerField(read_only=True)
    friend_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Connection
        fields = ['id', 'user_id', 'friend_id', 'status', 'created_at']
        read_only_fields = fields


class ConnectionViewSerializer(BaseSerializer):
    """
    A connection as seen by the requesting user: ``friend`` is always the
    other party and ``is_sender`` tells whether the viewer sent the request.
    """
    is_sender = serializers.SerializerMethodField()
    friend = serializers.SerializerMethodField()

    class Meta:
        model = Connection
        fields = ['id', 'status', 'created_at', 'is_sender', 'friend']
        read_only_fields = fields

    def _viewer(self):
        return self.context['request'].user

    def get_is_sender(self, obj):
        return obj.user_id == self._viewer().pk

    def get_friend(self, obj):
        return UserMiniSerializer(obj.other_party(self._viewer())).data


class ConnectionOverviewSerializer(serializers.Serializer):
    """
    Users grouped by their relationship to the viewer
    """
    accepted = UserSerializer(many=True)
    pending_sent = UserSerializer(many=True)
    pending_received = UserSerializer(many=True)
    discoverable = UserSerializer(many=True)

from rest_framework import serializers
from django.contrib.auth import get_user_model
from abbey.serializers import BaseSerializer
import logging

logger = logging.getLogger('abbey')
User = get_user_model()


class UserMiniSerializer(serializers.ModelSerializer):
    """
    The other party of a connection, as embedded in connection views
    """
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'avatar_url']
        read_only_fields = fields


class UserSerializer(BaseSerializer):
    """
    Public profile fields shown in the user directory
    """
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'avatar_url', 'created_at']
        read_only_fields = fields


class CurrentUserSerializer(BaseSerializer):
    """
    The authenticated user's own account
    """
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'avatar_url', 'oauth_provider', 'created_at']
        read_only_fields = fields


class UserUpdateSerializer(BaseSerializer):
    """
    Serializer for updating user profile. Only the display name and avatar
    may change; email and identity are fixed by the OAuth provider.
    """
    name = serializers.CharField(
        max_length=255,
        error_messages={
            'required': 'Name is required',
            'blank': 'Name is required',
            'null': 'Name is required',
        },
    )
    avatar_url = serializers.URLField(
        max_length=1024, required=False, allow_null=True, allow_blank=True
    )

    class Meta:
        model = User
        fields = ['name', 'avatar_url']

    def update(self, instance, validated_data):
        name = validated_data.get('name', instance.name)

        # A full update without an avatar clears it
        if 'avatar_url' in validated_data or not self.partial:
            avatar_url = validated_data.get('avatar_url')
        else:
            avatar_url = instance.avatar_url

        instance.update_profile(name, avatar_url)
        return instance

    def to_representation(self, instance):
        return UserSerializer(instance, context=self.context).data

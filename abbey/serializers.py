from rest_framework import serializers
import logging

logger = logging.getLogger('abbey')


class BaseSerializer(serializers.ModelSerializer):
    """
    Model serializer that records rejected payloads before the error handler
    turns them into a 400.
    """

    def is_valid(self, *, raise_exception=False):
        valid = super().is_valid()
        if not valid:
            request = self.context.get('request')
            who = getattr(getattr(request, 'user', None), 'pk', None)
            logger.warning(f"{self.__class__.__name__} rejected input from user {who}: {dict(self.errors)}")
            if raise_exception:
                raise serializers.ValidationError(self.errors)
        return valid

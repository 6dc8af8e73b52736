from django.contrib.auth import get_user_model
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from abbey.views import LoggingMixin
from .serializers import ConnectionSerializer, ConnectionViewSerializer, ConnectionOverviewSerializer
from .services import ConnectionService
from .utils import partition_users

User = get_user_model()


class ConnectionViewSet(LoggingMixin, viewsets.ViewSet):
    """
    API viewset for connection requests.

    ``POST /connections/{pk}/`` takes a *user* id (the person to connect
    with); the other detail routes take a *connection* id.
    """
    permission_classes = [IsAuthenticated]

    def get_service(self):
        return ConnectionService(self.request.user)

    def list(self, request):
        """
        All of the current user's connections, accepted and pending
        """
        connections = self.get_service().list()
        serializer = ConnectionViewSerializer(connections, many=True, context={'request': request})
        return Response(serializer.data)

    def overview(self, request):
        """
        Every other user grouped into accepted, pending sent, pending
        received and discoverable
        """
        connections = self.get_service().list()
        users = User.objects.exclude(pk=request.user.pk).order_by('-created_at', '-id')
        groups = partition_users(request.user, connections, users)
        serializer = ConnectionOverviewSerializer(groups, context={'request': request})
        return Response(serializer.data)

    def create(self, request, pk=None):
        """
        Send a connection request to user ``pk``
        """
        connection = self.get_service().request(pk)
        serializer = ConnectionSerializer(connection)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    def accept(self, request, pk=None):
        """
        Accept a connection request sent to the current user
        """
        connection = self.get_service().accept(pk)
        serializer = ConnectionSerializer(connection)
        return Response(serializer.data)

    def destroy(self, request, pk=None):
        """
        Reject, cancel or remove a connection
        """
        self.get_service().remove(pk)
        return Response({'message': 'Connection deleted successfully'}, status=status.HTTP_200_OK)

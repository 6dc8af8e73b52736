from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
import logging

logger = logging.getLogger('abbey')


class HealthView(APIView):
    """Liveness probe, no authentication"""
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({'status': 'ok', 'message': 'Abbey Challenge API is running'})


class BaseReadOnlyViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Base viewset for read-only operations.
    """
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        """
        Filter queryset based on request parameters.
        """
        queryset = super().get_queryset()

        # Add request to logging context
        logger.info(f"Fetching {queryset.model.__name__} objects for user {self.request.user.pk}")

        return queryset


class LoggingMixin:
    """
    Mixin to add standardized logging to any view.
    """
    def dispatch(self, request, *args, **kwargs):
        logger.info(f"{request.method} request to {request.path}")
        return super().dispatch(request, *args, **kwargs)

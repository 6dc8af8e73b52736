import secrets
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from abbey.exceptions import NotFound
from abbey.views import BaseReadOnlyViewSet
from .authentication import set_auth_cookie, clear_auth_cookie
from .oauth import OAuthError
from .serializers import UserSerializer, CurrentUserSerializer, UserUpdateSerializer
import logging

User = get_user_model()
logger = logging.getLogger('abbey')


class UserViewSet(BaseReadOnlyViewSet):
    """
    API viewset for browsing users and editing one's own profile.
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = super().get_queryset().order_by('-created_at', '-id')
        if self.action == 'list':
            # Everyone except the viewer, for discovering connections
            queryset = queryset.exclude(pk=self.request.user.pk)
        return queryset

    def get_object(self):
        try:
            return self.get_queryset().get(pk=self.kwargs['pk'])
        except User.DoesNotExist:
            raise NotFound("User not found")

    @action(detail=False, methods=['get', 'put', 'patch'])
    def me(self, request):
        """
        Get or update the current user's profile
        """
        if request.method == 'GET':
            return Response(UserSerializer(request.user).data)

        serializer = UserUpdateSerializer(
            request.user,
            data=request.data,
            partial=request.method == 'PATCH',
            context={'request': request},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class GoogleAuthView(APIView):
    """
    Start Google OAuth flow
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    provider = None

    def get(self, request):
        state = secrets.token_urlsafe(32)
        try:
            auth_url = self.provider.get_auth_url(request, state)
        except ImproperlyConfigured as e:
            logger.error(f"Google OAuth is not configured: {e}")
            return HttpResponseRedirect(f"{settings.CLIENT_URL}/login?error=auth_failed")

        response = HttpResponseRedirect(auth_url)
        response.set_cookie(
            settings.OAUTH_STATE_COOKIE_NAME,
            state,
            max_age=settings.OAUTH_STATE_MAX_AGE,
            httponly=True,
            secure=settings.AUTH_COOKIE_SECURE,
            samesite='Lax',
        )
        return response


class GoogleCallbackView(APIView):
    """
    Handle Google OAuth callback.
    Creates the user on first login, then sets the session cookie and
    sends the browser back to the frontend.
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    provider = None

    def get(self, request):
        failure_url = f"{settings.CLIENT_URL}/login?error=auth_failed"

        error = request.GET.get('error')
        if error:
            logger.warning(f"OAuth error from provider: {error}")
            return self._finish(HttpResponseRedirect(failure_url))

        expected_state = request.COOKIES.get(settings.OAUTH_STATE_COOKIE_NAME)
        received_state = request.GET.get('state', '')
        if not expected_state or not secrets.compare_digest(expected_state.encode(), received_state.encode()):
            logger.warning("OAuth error: state mismatch")
            return self._finish(HttpResponseRedirect(failure_url))

        code = request.GET.get('code')
        if not code:
            logger.warning("OAuth error: no authorization code provided")
            return self._finish(HttpResponseRedirect(failure_url))

        try:
            user = self.provider.authenticate(request, code)
        except (OAuthError, ImproperlyConfigured) as e:
            logger.error(f"OAuth error: {e}")
            return self._finish(HttpResponseRedirect(failure_url))

        if not user.is_active:
            logger.warning(f"OAuth login refused for inactive user {user.pk}")
            return self._finish(HttpResponseRedirect(failure_url))

        response = HttpResponseRedirect(f"{settings.CLIENT_URL}/dashboard")
        set_auth_cookie(response, user)
        logger.info(f"OAuth successful for user {user.pk}")
        return self._finish(response)

    def _finish(self, response):
        response.delete_cookie(settings.OAUTH_STATE_COOKIE_NAME)
        return response


class CurrentUserView(APIView):
    """
    Get current authenticated user
    """

    def get(self, request):
        serializer = CurrentUserSerializer(request.user)
        return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    Log the user out by clearing the session cookie
    """
    response = Response({'message': 'Logged out successfully'}, status=status.HTTP_200_OK)
    clear_auth_cookie(response)
    logger.info(f"User {request.user.pk} logged out")
    return response

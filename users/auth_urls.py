from django.urls import path
from .oauth import GoogleOAuthProvider
from .views import GoogleAuthView, GoogleCallbackView, CurrentUserView, logout_view

app_name = 'auth'

# Identity provider shared by the OAuth views for the life of the process
google_provider = GoogleOAuthProvider.from_settings()

urlpatterns = [
    path('google/', GoogleAuthView.as_view(provider=google_provider), name='google-login'),
    path('google/callback/', GoogleCallbackView.as_view(provider=google_provider), name='google-callback'),
    path('me/', CurrentUserView.as_view(), name='current-user'),
    path('logout/', logout_view, name='logout'),
]

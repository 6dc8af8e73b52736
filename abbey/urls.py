"""
URL configuration for the Abbey project.
"""
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from .admin import abbey_admin_site
from .views import HealthView

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),

    # Admin - with custom admin site
    path('admin/', abbey_admin_site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # App URLs
    path('api/auth/', include('users.auth_urls')),
    path('api/users/', include('users.urls')),
    path('api/connections/', include('connections.urls')),
]

from django.urls import path
from .views import ConnectionViewSet

app_name = 'connections'

connection_list = ConnectionViewSet.as_view({'get': 'list'})
connection_overview = ConnectionViewSet.as_view({'get': 'overview'})
connection_detail = ConnectionViewSet.as_view({'post': 'create', 'delete': 'destroy'})
connection_accept = ConnectionViewSet.as_view({'put': 'accept'})

urlpatterns = [
    path('', connection_list, name='connection-list'),
    path('overview/', connection_overview, name='connection-overview'),
    path('<int:pk>/', connection_detail, name='connection-detail'),
    path('<int:pk>/accept/', connection_accept, name='connection-accept'),
]

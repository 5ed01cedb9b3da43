from django.urls import path
from . import views

app_name = 'rides'

urlpatterns = [
    # Collection: list (role-scoped) and create
    path('', views.ride_requests, name='request-list'),
    path('completed/', views.completed_today, name='completed-today'),

    # Single request: detail, edit/status/rate (PUT), status (PATCH), cancel (DELETE)
    path('<int:request_id>/', views.ride_request_detail, name='request-detail'),
    path('<int:request_id>/rate/', views.rate_ride_request, name='request-rate'),
    path('<int:request_id>/notified/', views.mark_request_notified, name='request-notified'),
]

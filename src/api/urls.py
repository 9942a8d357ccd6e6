"""Main API URL router for /api/v1/."""
from django.urls import path

from api.auth_views import CSRFTokenAPIView, LogoutAPIView, SessionAPIView
from api.v1 import views as v1_views

app_name = "api"

urlpatterns = [
    # Session
    path("auth/me/", SessionAPIView.as_view(), name="auth-me"),
    path("auth/csrf/", CSRFTokenAPIView.as_view(), name="auth-csrf"),
    path("auth/logout/", LogoutAPIView.as_view(), name="auth-logout"),
    # Metrics
    path("metrics/", v1_views.MetricsAPIView.as_view(), name="metrics"),
    path("metrics/export/", v1_views.MetricsExportAPIView.as_view(), name="metrics-export"),
    path("dashboard/", v1_views.DashboardAPIView.as_view(), name="dashboard"),
    path("account-managers/", v1_views.AccountManagerListAPIView.as_view(), name="account-managers"),
]

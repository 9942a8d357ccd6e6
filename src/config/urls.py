"""URL configuration for the Account Manager Dashboard."""
from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from accounts.views import DashboardRedirectView

urlpatterns = [
    path("accounts/", include("allauth.urls")),
    path("dashboard/", DashboardRedirectView.as_view(), name="dashboard"),
    # API
    path("api/v1/", include("api.urls")),
    # Root redirect
    path("", DashboardRedirectView.as_view(), name="home"),
]

if getattr(settings, "ENABLE_DJANGO_ADMIN", False):
    urlpatterns.insert(0, path("admin/", admin.site.urls))

if settings.DEBUG and "debug_toolbar" in settings.INSTALLED_APPS:
    try:
        import debug_toolbar  # noqa: F401
        urlpatterns += [path("__debug__/", include("debug_toolbar.urls"))]
    except ImportError:
        pass

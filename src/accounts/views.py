"""Views for the accounts app."""
from django.conf import settings
from django.shortcuts import redirect
from django.urls import reverse
from django.views import View


class DashboardRedirectView(View):
    """Send visitors to sign-in or to their dashboard payload."""

    def get(self, request, *args, **kwargs):
        if getattr(request, "principal", None) is None:
            return redirect(f"{settings.LOGIN_URL}?next={request.path}")
        return redirect(reverse("api:dashboard"))

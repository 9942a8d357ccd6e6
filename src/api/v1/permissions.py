"""Custom DRF permissions for the dashboard API."""
from rest_framework.permissions import BasePermission

from accounts.principals import ManagementPrincipal


class IsManagement(BasePermission):
    """Allow only principals resolved to the management role."""

    message = "Access reserved to management."

    def has_permission(self, request, view):
        return isinstance(getattr(request, "principal", None), ManagementPrincipal)

"""Session API views for the dashboard frontend."""

import logging

from django.contrib.auth import logout
from django.middleware import csrf
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import ensure_csrf_cookie
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.principals import AccountManagerPrincipal

logger = logging.getLogger("dashboard")


class SessionAPIView(APIView):
    """Return the principal materialised for the current session.

    Role and account-manager link come from the user store on every call,
    never from what the identity provider asserted at sign-in.
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        principal = getattr(request, "principal", None)
        if principal is None:
            return Response({"detail": "Authentication is required."}, status=status.HTTP_401_UNAUTHORIZED)

        linked_entity_id = None
        if isinstance(principal, AccountManagerPrincipal):
            linked_entity_id = principal.linked_entity_id
        return Response({
            "email": principal.email,
            "name": principal.display_name,
            "role": principal.role,
            "account_manager_id": linked_entity_id,
        })


class LogoutAPIView(APIView):
    """Terminate the Django session for the browser."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        if request.user.is_authenticated:
            logger.info("Signed out %s", request.user.email)
        logout(request._request)
        return Response(status=status.HTTP_204_NO_CONTENT)


@method_decorator(ensure_csrf_cookie, name="dispatch")
class CSRFTokenAPIView(APIView):
    """Return a CSRF token and ensure CSRF cookie is set."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        token = csrf.get_token(request)
        return Response({"csrfToken": token}, status=status.HTTP_200_OK)

"""Middleware materialising the request principal."""
from accounts.services import get_identity_resolver


class PrincipalMiddleware:
    """Set ``request.principal`` from the user store on every request.

    Role and account-manager link are read fresh for each request instead of
    being cached in the session, so an administrator relinking a user takes
    effect on that user's next request. Anonymous requests get ``None``.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.principal = None

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            request.principal = get_identity_resolver().refresh(user.email)

        return self.get_response(request)

"""Adapters for third-party authentication providers."""

import logging

from allauth.core.exceptions import ImmediateHttpResponse
from allauth.socialaccount.adapter import DefaultSocialAccountAdapter
from django.http import HttpResponseForbidden

from accounts.services import SignInFailure, derive_name, get_identity_resolver

logger = logging.getLogger("dashboard")


def _claims_for(sociallogin) -> dict:
    """Merge the provider's raw profile with the email allauth extracted."""
    claims = dict(sociallogin.account.extra_data or {})
    user_email = getattr(sociallogin.user, "email", "") or ""
    if user_email and not claims.get("email"):
        claims["email"] = user_email
    return claims


class DashboardSocialAccountAdapter(DefaultSocialAccountAdapter):
    """Resolve every Microsoft sign-in through the identity resolver.

    The local user is upserted (role and account-manager link recomputed)
    before allauth logs it in; sign-ins without any usable email claim are
    refused outright.
    """

    def pre_social_login(self, request, sociallogin):
        super().pre_social_login(request, sociallogin)

        claims = _claims_for(sociallogin)
        try:
            user, _principal = get_identity_resolver().sign_in(claims)
        except SignInFailure as exc:
            raise ImmediateHttpResponse(HttpResponseForbidden(str(exc)))

        if not sociallogin.is_existing:
            # First Microsoft login for this address: attach the social
            # account to the user we just upserted instead of signing up.
            sociallogin.connect(request, user)
        elif sociallogin.user.pk != user.pk:
            logger.warning(
                "Social account is linked to a different user than its email claim",
                extra={"email": user.email, "linked_user_id": str(sociallogin.user.pk)},
            )

    def populate_user(self, request, sociallogin, data):
        user = super().populate_user(request, sociallogin, data)
        if not getattr(user, "name", ""):
            user.name = derive_name(sociallogin.account.extra_data or {}) or (
                " ".join(filter(None, [data.get("first_name"), data.get("last_name")])).strip()
            )
        return user

"""Identity resolution for single sign-on.

Turns identity-provider claims into a local ``User`` and the in-memory
principal used by the access policy. Role and account-manager link are
recomputed on every sign-in and re-read from the database on every
request, so administrative changes apply without waiting for the
provider session to expire.
"""

from __future__ import annotations

import logging
import os
import threading

from django.conf import settings
from django.core.signals import setting_changed
from django.db import transaction
from django.dispatch import receiver

from accounts.principals import AccountManagerPrincipal, ManagementPrincipal, Principal

logger = logging.getLogger("dashboard")

# Claim names checked, in order, for the sign-in email. Entra ID does not
# always populate ``email``; work accounts reliably carry a UPN.
EMAIL_CLAIMS = ("email", "mail", "preferred_username", "upn", "userPrincipalName")
NAME_CLAIMS = ("name", "displayName")


class SignInFailure(Exception):
    """Raised when no principal can be created from an identity assertion."""


def normalize_email(value) -> str:
    return str(value or "").strip().lower()


def derive_email(claims) -> str | None:
    """Return the first usable email among :data:`EMAIL_CLAIMS`, lowercased."""
    for claim in EMAIL_CLAIMS:
        email = normalize_email(claims.get(claim))
        if email and "@" in email:
            return email
    return None


def derive_name(claims) -> str:
    for claim in NAME_CLAIMS:
        name = str(claims.get(claim) or "").strip()
        if name:
            return name
    return ""


# ---------------------------------------------------------------------------
# Management allow-list
# ---------------------------------------------------------------------------

class ManagementAllowList:
    """Set of management email addresses, matched case-insensitively.

    Addresses come from an explicit iterable and, optionally, a text file
    with one address per line (``#`` starts a comment). The file is re-read
    whenever its modification time changes.
    """

    def __init__(self, emails=(), path: str | None = None):
        self._static = frozenset(normalize_email(e) for e in emails if normalize_email(e))
        self.path = path or None
        self._file_emails: frozenset = frozenset()
        self._file_mtime = None
        self._lock = threading.Lock()
        self.reload()

    @classmethod
    def from_settings(cls) -> "ManagementAllowList":
        return cls(
            emails=getattr(settings, "MANAGEMENT_EMAILS", ()) or (),
            path=getattr(settings, "MANAGEMENT_EMAILS_FILE", "") or None,
        )

    def reload(self) -> None:
        """Re-read the backing file, if any."""
        if not self.path:
            return
        with self._lock:
            try:
                mtime = os.path.getmtime(self.path)
                with open(self.path, encoding="utf-8") as handle:
                    lines = handle.read().splitlines()
            except OSError:
                logger.exception(
                    "Could not read management allow-list file",
                    extra={"path": self.path},
                )
                return
            self._file_emails = frozenset(
                normalize_email(line.split("#", 1)[0])
                for line in lines
                if normalize_email(line.split("#", 1)[0])
            )
            self._file_mtime = mtime

    def _refresh_if_stale(self) -> None:
        if not self.path:
            return
        try:
            mtime = os.path.getmtime(self.path)
        except OSError:
            return
        if mtime != self._file_mtime:
            self.reload()

    @property
    def emails(self) -> frozenset:
        self._refresh_if_stale()
        return self._static | self._file_emails

    def __contains__(self, email) -> bool:
        return normalize_email(email) in self.emails


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

def principal_from_user(user):
    """Build the in-memory principal for a stored ``User``."""
    from accounts.models import User

    if user.role == User.Role.MANAGEMENT:
        return ManagementPrincipal(email=user.email, display_name=user.name)
    if user.role == User.Role.AM:
        return AccountManagerPrincipal(
            email=user.email,
            display_name=user.name,
            linked_entity_id=user.account_manager_id,
        )
    # Unknown stored role: a bare principal, which the access policy refuses.
    logger.error(
        "User has an unrecognised role",
        extra={"email": user.email, "role": user.role},
    )
    return Principal(email=user.email, display_name=user.name)


class IdentityResolver:
    """Resolve sign-ins and session refreshes against the user store."""

    def __init__(self, allow_list: ManagementAllowList):
        self.allow_list = allow_list

    def sign_in(self, claims, name=None):
        """Upsert the user for *claims* and return ``(user, principal)``.

        Raises ``SignInFailure`` if no email can be derived from the claims.
        """
        from accounts.models import User
        from metrics.services import find_entity_by_email

        email = derive_email(claims)
        if not email:
            logger.error(
                "Sign-in refused: identity provider returned no email claim",
                extra={"claims": sorted(claims.keys())},
            )
            raise SignInFailure("No email address was provided by the identity provider.")

        display_name = (name or derive_name(claims)).strip()

        if email in self.allow_list:
            role = User.Role.MANAGEMENT
            account_manager = None
        else:
            role = User.Role.AM
            account_manager = find_entity_by_email(email)

        with transaction.atomic():
            user, created = User.objects.update_or_create(
                email=email,
                defaults={
                    "name": display_name,
                    "role": role,
                    "account_manager": account_manager,
                },
            )
            if created:
                user.set_unusable_password()
                user.save(update_fields=["password"])

        logger.info(
            "Signed in %s as %s",
            email,
            role,
            extra={"created": created, "account_manager_id": user.account_manager_id},
        )
        return user, principal_from_user(user)

    def refresh(self, email):
        """Re-read role, link and name for *email* from the user store.

        A missing user yields an unlinked account-manager principal.
        """
        from accounts.models import User

        email = normalize_email(email)
        user = User.objects.filter(email=email).first()
        if user is None:
            return AccountManagerPrincipal(email=email, linked_entity_id=None)
        return principal_from_user(user)


_resolver = None
_resolver_lock = threading.Lock()


def get_identity_resolver() -> IdentityResolver:
    """Return the process-wide resolver built from settings."""
    global _resolver
    with _resolver_lock:
        if _resolver is None:
            _resolver = IdentityResolver(ManagementAllowList.from_settings())
        return _resolver


def reset_identity_resolver() -> None:
    global _resolver
    with _resolver_lock:
        _resolver = None


@receiver(setting_changed)
def _reset_on_settings_change(sender, setting, **kwargs):
    if setting in ("MANAGEMENT_EMAILS", "MANAGEMENT_EMAILS_FILE"):
        reset_identity_resolver()

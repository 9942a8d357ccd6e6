"""Role-based access policy for metric reads.

``authorize`` turns a principal and the scope it asked for into the scope it
may actually read. Account managers only ever see their own book, whatever
they ask for. Management may read any active account manager; a single
unknown id is an error while unknown ids inside a multi-select are dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from accounts.principals import AccountManagerPrincipal, ManagementPrincipal
from metrics.months import MonthRange

logger = logging.getLogger("dashboard")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AccessError(Exception):
    """Base class for access policy refusals."""

    status_code = 403
    default_detail = "You do not have access to these metrics."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(AccessError):
    status_code = 401
    default_detail = "Authentication is required."


class NotLinked(AccessError):
    status_code = 403
    default_detail = (
        "Your account is not linked to an Account Manager. "
        "Please contact your administrator to link your account."
    )


class EntityNotFound(AccessError):
    status_code = 404
    default_detail = "Account Manager not found or inactive."


class Forbidden(AccessError):
    status_code = 403
    default_detail = "Unable to load metrics for this account."


# ---------------------------------------------------------------------------
# Scope
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScopeRequest:
    """Account manager ids a request may read, plus its month bounds."""

    entity_ids: tuple[int, ...] = ()
    month_range: MonthRange | None = None

    @property
    def is_empty(self) -> bool:
        return not self.entity_ids


def _active_entity_ids(candidate_ids) -> set[int]:
    from metrics.models import AccountManager

    return set(
        AccountManager.objects
        .filter(pk__in=list(candidate_ids), active=True)
        .values_list("pk", flat=True)
    )


def _dedupe(ids) -> list[int]:
    return list(dict.fromkeys(ids))


def authorize(principal, entity_id=None, entity_ids=None, month_range=None) -> ScopeRequest:
    """Resolve the readable scope for *principal*.

    *entity_id* requests a single account manager, *entity_ids* a set of
    them; account-manager principals have both ignored. Raises an
    ``AccessError`` subclass when the request cannot be served.
    """
    if principal is None:
        raise Unauthenticated()

    if isinstance(principal, AccountManagerPrincipal):
        if principal.linked_entity_id is None:
            raise NotLinked()
        return ScopeRequest(
            entity_ids=(principal.linked_entity_id,),
            month_range=month_range,
        )

    if isinstance(principal, ManagementPrincipal):
        if entity_id is not None:
            if entity_id not in _active_entity_ids([entity_id]):
                raise EntityNotFound()
            return ScopeRequest(entity_ids=(entity_id,), month_range=month_range)

        requested = _dedupe(entity_ids or [])
        if not requested:
            return ScopeRequest(month_range=month_range)

        valid = _active_entity_ids(requested)
        dropped = [i for i in requested if i not in valid]
        if dropped:
            logger.info(
                "Dropped unknown or inactive account managers from scope",
                extra={"email": principal.email, "dropped_ids": dropped},
            )
        return ScopeRequest(
            entity_ids=tuple(i for i in requested if i in valid),
            month_range=month_range,
        )

    logger.error(
        "Refusing metrics access for unrecognised principal",
        extra={"principal_type": type(principal).__name__},
    )
    raise Forbidden()

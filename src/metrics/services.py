"""Service functions for the metrics app.

Selectors wrap the ORM access the access policy and the API need; the
``get_metrics`` / ``build_dashboard`` operations chain policy, store and
aggregation so that views stay thin.
"""
import logging

from metrics.access import authorize
from metrics.aggregation import (
    combine_latest,
    comparison_series,
    compute_deltas,
    group_by_entity,
    latest_by_entity,
)
from metrics.models import AccountManager, MetricMonthly
from metrics.months import MonthRange, format_month

logger = logging.getLogger("dashboard")


# ---------------------------------------------------------------------------
# Store selectors
# ---------------------------------------------------------------------------

def find_entity(entity_id):
    """Return the ``AccountManager`` with *entity_id* or ``None``."""
    return AccountManager.objects.filter(pk=entity_id).first()


def find_entity_by_email(email):
    """Return the ``AccountManager`` whose email matches exactly (any case)."""
    if not email:
        return None
    return AccountManager.objects.filter(email__iexact=email.strip()).first()


def active_account_managers():
    return AccountManager.objects.filter(active=True).order_by("name")


def query_rows(entity_ids, month_range=None):
    """Metric rows for *entity_ids*, ordered by month then account manager."""
    entity_ids = list(entity_ids)
    if not entity_ids:
        return MetricMonthly.objects.none()
    filters = {"account_manager_id__in": entity_ids}
    if month_range is not None:
        filters.update(month_range.as_filter())
    return (
        MetricMonthly.objects
        .filter(**filters)
        .select_related("account_manager")
        .order_by("month", "account_manager_id")
    )


def available_months(entity_ids) -> list:
    """Distinct months with data for *entity_ids*, ignoring any range filter."""
    entity_ids = list(entity_ids)
    if not entity_ids:
        return []
    return list(
        MetricMonthly.objects
        .filter(account_manager_id__in=entity_ids)
        .order_by("month")
        .values_list("month", flat=True)
        .distinct()
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def get_metrics(principal, entity_id=None, entity_ids=None, start_month=None, end_month=None):
    """Return ``{"rows": [...]}`` with the metric rows *principal* may read.

    Raises ``metrics.access.AccessError`` when the request is refused.
    """
    month_range = MonthRange.from_bounds(start_month, end_month)
    scope = authorize(
        principal,
        entity_id=entity_id,
        entity_ids=entity_ids,
        month_range=month_range,
    )
    if scope.is_empty:
        return {"rows": []}
    rows = list(query_rows(scope.entity_ids, scope.month_range))
    logger.debug(
        "Loaded %d metric rows",
        len(rows),
        extra={"email": principal.email, "scope": list(scope.entity_ids)},
    )
    return {"rows": rows}


def build_dashboard(principal, entity_id=None, entity_ids=None, start_month=None, end_month=None) -> dict:
    """Assemble the role-aware dashboard payload for *principal*.

    Per account manager in scope: latest snapshot and month-over-month
    deltas. When more than one account manager is in scope a combined
    snapshot and a retention comparison series are added.
    """
    month_range = MonthRange.from_bounds(start_month, end_month)
    scope = authorize(
        principal,
        entity_id=entity_id,
        entity_ids=entity_ids,
        month_range=month_range,
    )

    managers = {
        am.pk: am
        for am in AccountManager.objects.filter(pk__in=list(scope.entity_ids))
    }
    rows = list(query_rows(scope.entity_ids, scope.month_range))
    grouped = group_by_entity(rows)
    latest = latest_by_entity(grouped)
    names = {pk: am.name for pk, am in managers.items()}

    entities = []
    for pk in sorted(scope.entity_ids):
        am = managers.get(pk)
        snapshot = latest.get(pk)
        deltas = compute_deltas(grouped.get(pk, []))
        entities.append({
            "id": pk,
            "name": am.name if am else "",
            "email": am.email if am else "",
            "latest": snapshot.as_dict() if snapshot else None,
            "deltas": (
                {field: delta.as_dict() for field, delta in deltas.items()}
                if deltas else None
            ),
        })

    combined = None
    comparison = []
    if len(scope.entity_ids) > 1:
        snapshot = combine_latest(latest)
        combined = snapshot.as_dict() if snapshot else None
        comparison = comparison_series(rows, names)

    return {
        "role": principal.role,
        "scope": list(scope.entity_ids),
        "selected_names": [names[pk] for pk in scope.entity_ids if pk in names],
        "available_months": [format_month(m) for m in available_months(scope.entity_ids)],
        "rows": rows,
        "entities": entities,
        "combined": combined,
        "comparison": comparison,
    }

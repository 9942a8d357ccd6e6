"""Aggregation engine for multi-account-manager views.

All functions are pure: they take month-ordered metric rows (model
instances or anything exposing the same attributes) and never touch the
database.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date

from metrics.months import format_month

logger = logging.getLogger("dashboard")

# Fields combined by arithmetic mean across account managers.
RATE_FIELDS = ("net_retention", "gross_retention")
# Fields combined by sum across account managers.
TOTAL_FIELDS = (
    "renewal_premium",
    "lost_premium",
    "new_biz_premium",
    "policy_count_start",
    "policy_count_end",
)
METRIC_FIELDS = RATE_FIELDS + TOTAL_FIELDS

# A rise is good news for every metric except lost premium.
LOWER_IS_BETTER = frozenset({"lost_premium"})


@dataclass(frozen=True)
class MetricSnapshot:
    month: date
    net_retention: object
    gross_retention: object
    renewal_premium: object
    lost_premium: object
    new_biz_premium: object
    policy_count_start: int
    policy_count_end: int
    account_manager_id: int | None = None

    @classmethod
    def from_row(cls, row) -> "MetricSnapshot":
        return cls(
            month=row.month,
            account_manager_id=getattr(row, "account_manager_id", None),
            **{field: getattr(row, field) for field in METRIC_FIELDS},
        )

    def as_dict(self) -> dict:
        data = asdict(self)
        data["month"] = format_month(self.month)
        return data


@dataclass(frozen=True)
class MetricDelta:
    field: str
    value: object

    @property
    def higher_is_better(self) -> bool:
        return self.field not in LOWER_IS_BETTER

    @property
    def favorable(self) -> bool:
        is_positive = self.value >= 0
        return is_positive if self.higher_is_better else not is_positive

    def as_dict(self) -> dict:
        return {"value": self.value, "favorable": self.favorable}


def group_by_entity(rows) -> dict:
    """Group month-ordered rows per account manager, keeping row order."""
    grouped = {}
    for row in rows:
        grouped.setdefault(row.account_manager_id, []).append(row)
    return grouped


def latest_by_entity(grouped: dict) -> dict:
    """Map each account manager id to a snapshot of its last row."""
    return {
        entity_id: MetricSnapshot.from_row(entity_rows[-1])
        for entity_id, entity_rows in grouped.items()
        if entity_rows
    }


def combine_latest(latest: dict) -> MetricSnapshot | None:
    """Combine per-account-manager latest snapshots into one.

    Rates are averaged and premiums/counts summed. With a single account
    manager its snapshot is returned unchanged; with none there is nothing
    to combine.

    Account managers are taken in ascending id order and the combined month
    is the lowest id's latest month. Books whose latest months differ are
    still combined as-is.
    """
    snapshots = [latest[entity_id] for entity_id in sorted(latest)]
    if not snapshots:
        return None
    if len(snapshots) == 1:
        return snapshots[0]

    months = {snapshot.month for snapshot in snapshots}
    if len(months) > 1:
        logger.warning(
            "Combining latest metrics across different months",
            extra={"months": sorted(format_month(m) for m in months)},
        )

    count = len(snapshots)
    combined = {
        field: sum(getattr(s, field) for s in snapshots) / count
        for field in RATE_FIELDS
    }
    combined.update({
        field: sum(getattr(s, field) for s in snapshots)
        for field in TOTAL_FIELDS
    })
    return MetricSnapshot(month=snapshots[0].month, **combined)


def compute_deltas(rows) -> dict | None:
    """Month-over-month change of every metric for one account manager.

    *rows* must be that account manager's month-ordered rows after range
    filtering. Returns ``None`` when fewer than two rows are available.
    """
    rows = list(rows)
    if len(rows) < 2:
        return None
    previous, latest = rows[-2], rows[-1]
    return {
        field: MetricDelta(field=field, value=getattr(latest, field) - getattr(previous, field))
        for field in METRIC_FIELDS
    }


def comparison_series(rows, names: dict | None = None) -> list[dict]:
    """Build one data point per month with each account manager's retention.

    Keys follow ``"<name> - Net"`` / ``"<name> - Gross"``; *names* maps
    account manager ids to display names.
    """
    names = names or {}
    points = {}
    for row in rows:
        label = names.get(row.account_manager_id) or f"AM {row.account_manager_id}"
        point = points.setdefault(row.month, {"month": format_month(row.month)})
        point[f"{label} - Net"] = row.net_retention
        point[f"{label} - Gross"] = row.gross_retention
    return [points[month] for month in sorted(points)]
